"""Human-readable and JSON-ready renderings of audit results."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from nuaudit.models import (
    LicenseViolation,
    ManifestFailure,
    PackageReference,
    VersionMismatch,
    VulnerabilityReport,
)

NO_VULNERABILITIES = "No vulnerable packages found."
NO_LICENSE_VIOLATIONS = "No packages with restricted licenses found."
NO_VERSION_MISMATCHES = "No version mismatches found."
NO_REFERENCES = "No package references found."


def _reference_lines(ref: PackageReference) -> list[str]:
    return [
        f"Package: {ref.name}",
        f"  Version: {ref.version}",
        f"  Project: {ref.project}",
    ]


def vulnerability_lines(reports: Iterable[VulnerabilityReport]) -> list[str]:
    lines: list[str] = []
    for report in reports:
        lines.extend(_reference_lines(report.reference))
        for vuln in report.vulnerabilities:
            lines.append(f"    Severity: {vuln.severity}")
            lines.append(f"    Advisory URL: {vuln.advisory_url}")
    return lines or [NO_VULNERABILITIES]


def license_lines(violations: Iterable[LicenseViolation]) -> list[str]:
    lines: list[str] = []
    for violation in violations:
        lines.extend(_reference_lines(violation.reference))
        lines.append(f"  License: {violation.license or '(none)'}")
        if violation.license_url:
            lines.append(f"  License URL: {violation.license_url}")
    return lines or [NO_LICENSE_VIOLATIONS]


def mismatch_lines(mismatches: Iterable[VersionMismatch]) -> list[str]:
    lines = [
        f"{m.reference.project}: {m.reference.name} {m.reference.version or '(no version)'}"
        f" (expected {m.expected_version})"
        for m in mismatches
    ]
    return lines or [NO_VERSION_MISMATCHES]


def reference_lines(references: Iterable[PackageReference]) -> list[str]:
    """Group references by project, one indented line per package."""
    by_project: dict[str, list[PackageReference]] = {}
    for ref in references:
        by_project.setdefault(ref.project, []).append(ref)
    if not by_project:
        return [NO_REFERENCES]

    lines: list[str] = []
    for project, refs in by_project.items():
        lines.append(project)
        lines.extend(f"  {r.name} {r.version}".rstrip() for r in refs)
    return lines


def failure_lines(failures: Iterable[ManifestFailure]) -> list[str]:
    return [f"Skipped unreadable manifest {f.manifest}: {f.error}" for f in failures]


# ── machine-readable rows ──────────────────────────────────────────────────


def reference_row(ref: PackageReference) -> dict[str, Any]:
    return {
        "project": ref.project,
        "package": ref.name,
        "version": ref.version,
        "manifest": str(ref.manifest) if ref.manifest is not None else None,
    }


def reference_rows(references: Iterable[PackageReference]) -> list[dict[str, Any]]:
    return [reference_row(r) for r in references]


def vulnerability_rows(reports: Iterable[VulnerabilityReport]) -> list[dict[str, Any]]:
    return [
        {
            **reference_row(report.reference),
            "vulnerabilities": [
                {"severity": v.severity, "advisory_url": v.advisory_url}
                for v in report.vulnerabilities
            ],
        }
        for report in reports
    ]


def license_rows(violations: Iterable[LicenseViolation]) -> list[dict[str, Any]]:
    return [
        {**reference_row(v.reference), "license": v.license, "license_url": v.license_url}
        for v in violations
    ]


def mismatch_rows(mismatches: Iterable[VersionMismatch]) -> list[dict[str, Any]]:
    return [
        {**reference_row(m.reference), "expected_version": m.expected_version}
        for m in mismatches
    ]
