"""nuaudit: vulnerability and license audit for NuGet package references."""

from nuaudit.auditor import Auditor
from nuaudit.models import (
    LicenseViolation,
    ManifestFailure,
    ManifestScan,
    PackageMetadata,
    PackageReference,
    VersionMismatch,
    Vulnerability,
    VulnerabilityReport,
)

__all__ = [
    "Auditor",
    "LicenseViolation",
    "ManifestFailure",
    "ManifestScan",
    "PackageMetadata",
    "PackageReference",
    "VersionMismatch",
    "Vulnerability",
    "VulnerabilityReport",
]
