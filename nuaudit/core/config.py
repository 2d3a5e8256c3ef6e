"""Runtime settings read from ``NUAUDIT_*`` environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from nuaudit.exceptions import ConfigError
from nuaudit.registry.nuget import DEFAULT_SERVICE_INDEX, DEFAULT_TIMEOUT
from nuaudit.scanner.discovery import DEFAULT_MANIFEST_PATTERN, DEFAULT_SOLUTION_MARKER

DEFAULT_ALLOWED_LICENSES = frozenset({"MIT", "Microsoft", "Apache-2.0"})

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    registry_url: str = DEFAULT_SERVICE_INDEX
    timeout: float = DEFAULT_TIMEOUT
    allowed_licenses: frozenset[str] = field(default_factory=lambda: DEFAULT_ALLOWED_LICENSES)
    manifest_pattern: str = DEFAULT_MANIFEST_PATTERN
    solution_marker: str = DEFAULT_SOLUTION_MARKER
    strict: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (default: ``os.environ``).

        Unset or empty variables keep their defaults.  Raises
        :class:`ConfigError` for a timeout that is not a positive number.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        if env.get("NUAUDIT_REGISTRY_URL"):
            settings.registry_url = env["NUAUDIT_REGISTRY_URL"]
        if env.get("NUAUDIT_TIMEOUT"):
            settings.timeout = _parse_timeout(env["NUAUDIT_TIMEOUT"])
        if env.get("NUAUDIT_ALLOWED_LICENSES"):
            settings.allowed_licenses = parse_license_list(env["NUAUDIT_ALLOWED_LICENSES"])
        if env.get("NUAUDIT_MANIFEST_PATTERN"):
            settings.manifest_pattern = env["NUAUDIT_MANIFEST_PATTERN"]
        if env.get("NUAUDIT_SOLUTION_MARKER"):
            settings.solution_marker = env["NUAUDIT_SOLUTION_MARKER"]
        if env.get("NUAUDIT_STRICT"):
            settings.strict = env["NUAUDIT_STRICT"].strip().lower() in _TRUTHY
        return settings


def parse_license_list(value: str) -> frozenset[str]:
    """Split a comma-separated license list; identifiers are kept case-sensitive."""
    return frozenset(item.strip() for item in value.split(",") if item.strip())


def _parse_timeout(value: str) -> float:
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ConfigError(f"NUAUDIT_TIMEOUT must be a number, got {value!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"NUAUDIT_TIMEOUT must be positive, got {value!r}")
    return timeout
