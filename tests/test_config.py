"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from nuaudit.core.config import DEFAULT_ALLOWED_LICENSES, Settings, parse_license_list
from nuaudit.exceptions import ConfigError


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.registry_url == "https://api.nuget.org/v3/index.json"
        assert settings.timeout == 30.0
        assert settings.allowed_licenses == DEFAULT_ALLOWED_LICENSES == {"MIT", "Microsoft", "Apache-2.0"}
        assert settings.manifest_pattern == "*.csproj"
        assert settings.solution_marker == "*.sln"
        assert settings.strict is False

    def test_overrides(self):
        settings = Settings.from_env(
            {
                "NUAUDIT_REGISTRY_URL": "https://mirror.test/v3/index.json",
                "NUAUDIT_TIMEOUT": "5.5",
                "NUAUDIT_ALLOWED_LICENSES": "MIT, BSD-3-Clause ,",
                "NUAUDIT_MANIFEST_PATTERN": "*.fsproj",
                "NUAUDIT_SOLUTION_MARKER": "*.slnx",
                "NUAUDIT_STRICT": "yes",
            }
        )
        assert settings.registry_url == "https://mirror.test/v3/index.json"
        assert settings.timeout == 5.5
        assert settings.allowed_licenses == {"MIT", "BSD-3-Clause"}
        assert settings.manifest_pattern == "*.fsproj"
        assert settings.solution_marker == "*.slnx"
        assert settings.strict is True

    def test_empty_values_keep_defaults(self):
        settings = Settings.from_env({"NUAUDIT_REGISTRY_URL": "", "NUAUDIT_TIMEOUT": ""})
        assert settings.registry_url == "https://api.nuget.org/v3/index.json"
        assert settings.timeout == 30.0

    @pytest.mark.parametrize("value", ["0", "false", "no", "off"])
    def test_strict_falsy(self, value):
        assert Settings.from_env({"NUAUDIT_STRICT": value}).strict is False

    @pytest.mark.parametrize("value", ["fast", "-1", "0"])
    def test_bad_timeout(self, value):
        with pytest.raises(ConfigError, match="NUAUDIT_TIMEOUT"):
            Settings.from_env({"NUAUDIT_TIMEOUT": value})

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("NUAUDIT_MANIFEST_PATTERN", "*.vbproj")
        assert Settings.from_env().manifest_pattern == "*.vbproj"


class TestParseLicenseList:
    def test_case_preserved(self):
        assert parse_license_list("mit,MIT") == {"mit", "MIT"}

    def test_empty(self):
        assert parse_license_list(" , ") == frozenset()
