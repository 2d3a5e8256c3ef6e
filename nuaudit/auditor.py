"""Vulnerability and license checks across every project in a solution."""

from __future__ import annotations

from collections.abc import AsyncIterator, Collection, Iterable
from pathlib import Path
from typing import IO

import click
import structlog

from nuaudit.exceptions import ManifestParseError, RegistryLookupError, RegistryNotConnectedError
from nuaudit.models import (
    LicenseViolation,
    ManifestFailure,
    ManifestScan,
    PackageMetadata,
    PackageReference,
    VersionMismatch,
    VulnerabilityReport,
)
from nuaudit.registry.base import RegistryClient
from nuaudit.registry.nuget import NuGetRegistryClient
from nuaudit.reporting import license_lines, vulnerability_lines
from nuaudit.scanner.csproj import read_references
from nuaudit.scanner.discovery import (
    DEFAULT_MANIFEST_PATTERN,
    DEFAULT_SOLUTION_MARKER,
    discover_manifests,
    find_solution_root,
)

log = structlog.get_logger("nuaudit.auditor")


class Auditor:
    """Audit the package references of every project below a solution root.

    Building an ``Auditor`` is synchronous and cheap: it resolves the solution
    root and lists the manifests once.  The registry must then be connected
    with ``await auditor.connect()`` (or ``async with``) before any query
    that needs package metadata.

    In the default lenient mode a manifest that fails to parse is recorded in
    :attr:`failures` and the scan continues; with ``strict=True`` the first
    :class:`ManifestParseError` propagates.
    """

    def __init__(
        self,
        solution_root: Path | None = None,
        registry: RegistryClient | None = None,
        *,
        manifest_pattern: str = DEFAULT_MANIFEST_PATTERN,
        solution_marker: str = DEFAULT_SOLUTION_MARKER,
        strict: bool = False,
    ) -> None:
        self.solution_root = (
            solution_root if solution_root is not None else find_solution_root(marker=solution_marker)
        )
        self._manifests = discover_manifests(self.solution_root, manifest_pattern)
        self._registry: RegistryClient | None = registry
        self._connected = False
        self._closed = False
        self.strict = strict
        self.failures: list[ManifestFailure] = []
        log.debug(
            "auditor.built",
            solution_root=str(self.solution_root),
            manifests=len(self._manifests),
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    @property
    def manifests(self) -> list[Path]:
        return list(self._manifests)

    async def connect(self) -> None:
        """Resolve the registry handle; raises ``RegistryUnavailableError`` on failure.

        A failed connect closes the registry.  Once closed, an ``Auditor`` cannot
        be connected again.
        """
        if self._closed:
            raise RegistryNotConnectedError("auditor is closed; build a new one to reconnect")
        if self._connected:
            return
        if self._registry is None:
            self._registry = NuGetRegistryClient()
        try:
            await self._registry.connect()
        except Exception:
            await self.close()
            raise
        self._connected = True

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._connected = False
        if self._registry is not None:
            await self._registry.close()

    async def __aenter__(self) -> Auditor:
        await self.connect()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── references (no network) ────────────────────────────────────────────

    def scan(self) -> ManifestScan:
        """Parse every manifest, in discovery order then document order."""
        result = ManifestScan()
        for manifest in self._manifests:
            try:
                result.references.extend(read_references(manifest))
            except ManifestParseError as exc:
                if self.strict:
                    raise
                log.warning("manifest.parse_failed", manifest=str(manifest), error=exc.reason)
                result.failures.append(ManifestFailure(manifest=manifest, error=exc.reason))
        self.failures = result.failures
        return result

    def all_references(self) -> list[PackageReference]:
        """All package references across the solution; files are re-read every call."""
        return self.scan().references

    def references_by_package_name(
        self, name: str, project: str | None = None
    ) -> list[PackageReference]:
        """References to *name* (case-insensitive), optionally in projects containing *project*."""
        wanted = name.casefold()
        return [
            ref
            for ref in self.all_references()
            if ref.name.casefold() == wanted and (not project or project in ref.project)
        ]

    def version_mismatches(
        self, name: str, expected_version: str, project: str | None = None
    ) -> list[VersionMismatch]:
        """References to *name* whose declared version is not *expected_version*."""
        return [
            VersionMismatch(reference=ref, expected_version=expected_version)
            for ref in self.references_by_package_name(name, project)
            if ref.version != expected_version
        ]

    # ── registry-backed checks ─────────────────────────────────────────────

    async def vulnerable_packages(self) -> list[VulnerabilityReport]:
        """References whose registry metadata lists at least one vulnerability."""
        reports: list[VulnerabilityReport] = []
        async for ref, metadata in self._with_metadata():
            if metadata.vulnerabilities:
                reports.append(
                    VulnerabilityReport(reference=ref, vulnerabilities=metadata.vulnerabilities)
                )
        return reports

    async def restricted_license_packages(
        self, allowed_licenses: Collection[str]
    ) -> list[LicenseViolation]:
        """References whose resolved license is not exactly in *allowed_licenses*."""
        violations: list[LicenseViolation] = []
        async for ref, metadata in self._with_metadata():
            resolved = metadata.resolved_license
            if resolved is None or resolved not in allowed_licenses:
                violations.append(
                    LicenseViolation(
                        reference=ref, license=resolved, license_url=metadata.license_url
                    )
                )
        return violations

    async def _with_metadata(self) -> AsyncIterator[tuple[PackageReference, PackageMetadata]]:
        if not self._connected or self._registry is None:
            raise RegistryNotConnectedError("call 'await auditor.connect()' before querying")
        for ref in self.all_references():
            try:
                metadata = await self._registry.fetch_metadata(ref.name, ref.version)
            except RegistryLookupError as exc:
                log.warning(
                    "registry.lookup_failed",
                    package=ref.name,
                    version=ref.version,
                    project=ref.project,
                    error=exc.reason,
                )
                continue
            if metadata is None:
                log.info(
                    "registry.metadata_missing",
                    package=ref.name,
                    version=ref.version,
                    project=ref.project,
                )
                continue
            yield ref, metadata

    # ── presentation ───────────────────────────────────────────────────────

    @staticmethod
    def display_vulnerabilities(
        reports: Iterable[VulnerabilityReport], file: IO[str] | None = None
    ) -> None:
        for line in vulnerability_lines(reports):
            click.echo(line, file=file)

    @staticmethod
    def display_license_violations(
        violations: Iterable[LicenseViolation], file: IO[str] | None = None
    ) -> None:
        for line in license_lines(violations):
            click.echo(line, file=file)
