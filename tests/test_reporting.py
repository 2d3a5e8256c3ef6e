"""Tests for report rendering."""

from __future__ import annotations

import json
from pathlib import Path

from nuaudit.models import (
    LicenseViolation,
    ManifestFailure,
    PackageReference,
    VersionMismatch,
    Vulnerability,
    VulnerabilityReport,
)
from nuaudit.reporting import (
    NO_LICENSE_VIOLATIONS,
    NO_REFERENCES,
    NO_VERSION_MISMATCHES,
    NO_VULNERABILITIES,
    failure_lines,
    license_lines,
    license_rows,
    mismatch_lines,
    mismatch_rows,
    reference_lines,
    reference_rows,
    vulnerability_lines,
    vulnerability_rows,
)

REF_A = PackageReference("A", "PackageX", "1.0.0", manifest=Path("src/A/A.csproj"))
REF_B = PackageReference("B", "PackageY", "2.0.0")


class TestLines:
    def test_vulnerabilities_multiple_entries(self):
        report = VulnerabilityReport(
            REF_A,
            (
                Vulnerability("High", "https://example/adv1"),
                Vulnerability("Low", "https://example/adv2"),
            ),
        )
        assert vulnerability_lines([report]) == [
            "Package: PackageX",
            "  Version: 1.0.0",
            "  Project: A",
            "    Severity: High",
            "    Advisory URL: https://example/adv1",
            "    Severity: Low",
            "    Advisory URL: https://example/adv2",
        ]

    def test_empty_inputs(self):
        assert vulnerability_lines([]) == [NO_VULNERABILITIES]
        assert license_lines([]) == [NO_LICENSE_VIOLATIONS]
        assert mismatch_lines([]) == [NO_VERSION_MISMATCHES]
        assert reference_lines([]) == [NO_REFERENCES]
        assert failure_lines([]) == []

    def test_license_lines(self):
        lines = license_lines([LicenseViolation(REF_B, "Apache-2.0"), LicenseViolation(REF_A, None)])
        assert "  License: Apache-2.0" in lines
        assert "  License: (none)" in lines
        assert not any(line.startswith("  License URL:") for line in lines)

    def test_license_lines_with_url(self):
        violation = LicenseViolation(REF_B, "Someone", license_url="https://aka.ms/license")
        assert license_lines([violation])[-2:] == [
            "  License: Someone",
            "  License URL: https://aka.ms/license",
        ]

    def test_mismatch_lines(self):
        lines = mismatch_lines([VersionMismatch(PackageReference("Web", "NUnit", ""), "4.2.2")])
        assert lines == ["Web: NUnit (no version) (expected 4.2.2)"]

    def test_reference_lines_grouped_by_project(self):
        refs = [REF_A, REF_B, PackageReference("A", "Serilog", "")]
        assert reference_lines(refs) == [
            "A",
            "  PackageX 1.0.0",
            "  Serilog",
            "B",
            "  PackageY 2.0.0",
        ]

    def test_failure_lines(self):
        lines = failure_lines([ManifestFailure(Path("Bad.csproj"), "no element found")])
        assert lines == ["Skipped unreadable manifest Bad.csproj: no element found"]


class TestRows:
    def test_rows_are_json_serialisable(self):
        report = VulnerabilityReport(REF_A, (Vulnerability("High", "https://example/adv1"),))
        rows = (
            vulnerability_rows([report])
            + license_rows([LicenseViolation(REF_B, "Apache-2.0")])
            + mismatch_rows([VersionMismatch(REF_A, "1.1.0")])
            + reference_rows([REF_A, REF_B])
        )
        assert json.loads(json.dumps(rows)) == rows

    def test_vulnerability_row(self):
        report = VulnerabilityReport(REF_A, (Vulnerability("High", "https://example/adv1"),))
        assert vulnerability_rows([report]) == [
            {
                "project": "A",
                "package": "PackageX",
                "version": "1.0.0",
                "manifest": str(Path("src/A/A.csproj")),
                "vulnerabilities": [{"severity": "High", "advisory_url": "https://example/adv1"}],
            }
        ]

    def test_reference_row_without_manifest(self):
        assert reference_rows([REF_B])[0]["manifest"] is None

    def test_license_and_mismatch_rows(self):
        row = license_rows([LicenseViolation(REF_B, None)])[0]
        assert row["license"] is None
        assert row["license_url"] is None
        row = license_rows([LicenseViolation(REF_B, "Someone", "https://aka.ms/license")])[0]
        assert row["license_url"] == "https://aka.ms/license"
        assert mismatch_rows([VersionMismatch(REF_B, "3.0.0")])[0]["expected_version"] == "3.0.0"
