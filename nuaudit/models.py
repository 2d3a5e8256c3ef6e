"""Data models for package references and registry findings."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class PackageReference:
    """A package declared by one project."""

    project: str
    name: str
    version: str
    manifest: Path | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Vulnerability:
    """A known vulnerability advisory for one package version."""

    severity: str
    advisory_url: str


@dataclass(frozen=True)
class PackageMetadata:
    """Registry knowledge of one (name, version) pair.

    ``vulnerabilities`` being empty means no known vulnerabilities; a missing
    ``PackageMetadata`` altogether means the registry does not know the package.
    """

    name: str
    version: str
    license: str | None = None
    authors: str = ""
    vulnerabilities: tuple[Vulnerability, ...] = ()
    license_url: str | None = None

    @property
    def resolved_license(self) -> str | None:
        """License expression, falling back to the authors string."""
        return self.license if self.license else (self.authors or None)


@dataclass(frozen=True)
class VulnerabilityReport:
    reference: PackageReference
    vulnerabilities: tuple[Vulnerability, ...]


@dataclass(frozen=True)
class LicenseViolation:
    reference: PackageReference
    license: str | None
    license_url: str | None = None


@dataclass(frozen=True)
class VersionMismatch:
    reference: PackageReference
    expected_version: str


@dataclass(frozen=True)
class ManifestFailure:
    """A manifest that could not be parsed during a scan."""

    manifest: Path
    error: str


@dataclass
class ManifestScan:
    """Result of one pass over every discovered manifest."""

    references: list[PackageReference] = field(default_factory=list)
    failures: list[ManifestFailure] = field(default_factory=list)
