"""CLI entry point: nuaudit.

Subcommands:
    nuaudit refs                          # List every package reference
    nuaudit find Newtonsoft.Json          # Projects referencing one package
    nuaudit vulns                         # Packages with known vulnerabilities
    nuaudit licenses --allow MIT          # Packages outside the license allow-set
    nuaudit pin NUnit 4.2.2 -p Tests      # Projects not on the expected version

Exit codes: 0 clean, 1 findings (or unreadable manifests), 2 fatal error.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import click
from dotenv import load_dotenv

from nuaudit.auditor import Auditor
from nuaudit.core.config import Settings
from nuaudit.core.logging import setup_logging
from nuaudit.exceptions import (
    ConfigError,
    ManifestParseError,
    RegistryUnavailableError,
)
from nuaudit.models import ManifestFailure
from nuaudit.registry.nuget import NuGetRegistryClient
from nuaudit.reporting import (
    failure_lines,
    license_rows,
    mismatch_lines,
    mismatch_rows,
    reference_lines,
    reference_rows,
    vulnerability_rows,
)

EXIT_FINDINGS = 1
EXIT_FATAL = 2

T = TypeVar("T")


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(EXIT_FATAL)


def _build_auditor(settings: Settings, root: Path | None, online: bool) -> Auditor:
    registry = (
        NuGetRegistryClient(settings.registry_url, timeout=settings.timeout) if online else None
    )
    try:
        return Auditor(
            root,
            registry,
            manifest_pattern=settings.manifest_pattern,
            solution_marker=settings.solution_marker,
            strict=settings.strict,
        )
    except (FileNotFoundError, NotADirectoryError) as e:
        _fail(str(e))


def _run_online(auditor: Auditor, query: Callable[[Auditor], Awaitable[T]]) -> T:
    """Connect the registry, run *query*, and always close the client."""

    async def _go() -> T:
        async with auditor:
            return await query(auditor)

    try:
        return asyncio.run(_go())
    except RegistryUnavailableError as e:
        _fail(str(e))


def _emit(rows: list[dict[str, Any]] | None, lines: list[str], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(rows, indent=2))
    else:
        for line in lines:
            click.echo(line)


def _report_failures(failures: list[ManifestFailure]) -> None:
    for line in failure_lines(failures):
        click.echo(line, err=True)


@click.group()
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Solution root (default: nearest ancestor holding a .sln file)",
)
@click.option("--registry-url", default=None, help="NuGet v3 service index URL")
@click.option("--timeout", type=float, default=None, help="Registry request timeout in seconds")
@click.option("--strict", is_flag=True, help="Abort on the first unparsable manifest")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.pass_context
def main(
    ctx: click.Context,
    root: Path | None,
    registry_url: str | None,
    timeout: float | None,
    strict: bool,
    verbose: bool,
) -> None:
    """nuaudit: vulnerability and license audit for NuGet package references."""
    load_dotenv()
    setup_logging("DEBUG" if verbose else None)
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        _fail(str(e))

    if registry_url:
        settings.registry_url = registry_url
    if timeout is not None:
        settings.timeout = timeout
    if strict:
        settings.strict = True

    ctx.obj = {"settings": settings, "root": root}


def _auditor_from(ctx: click.Context, online: bool = False) -> Auditor:
    return _build_auditor(ctx.obj["settings"], ctx.obj["root"], online)


@main.command("refs")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def refs(ctx: click.Context, as_json: bool) -> None:
    """List every package reference in the solution."""
    auditor = _auditor_from(ctx)
    try:
        scan = auditor.scan()
    except ManifestParseError as e:
        _fail(str(e))
    _emit(reference_rows(scan.references), reference_lines(scan.references), as_json)
    _report_failures(scan.failures)
    if scan.failures:
        ctx.exit(EXIT_FINDINGS)


@main.command("find")
@click.argument("package")
@click.option("-p", "--project", default=None, help="Only projects whose name contains this")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def find(ctx: click.Context, package: str, project: str | None, as_json: bool) -> None:
    """List the projects that reference PACKAGE."""
    auditor = _auditor_from(ctx)
    try:
        matches = auditor.references_by_package_name(package, project)
    except ManifestParseError as e:
        _fail(str(e))
    _emit(reference_rows(matches), reference_lines(matches), as_json)
    _report_failures(auditor.failures)
    if auditor.failures:
        ctx.exit(EXIT_FINDINGS)


@main.command("vulns")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def vulns(ctx: click.Context, as_json: bool) -> None:
    """Report packages with known vulnerabilities."""
    auditor = _auditor_from(ctx, online=True)
    try:
        reports = _run_online(auditor, lambda a: a.vulnerable_packages())
    except ManifestParseError as e:
        _fail(str(e))
    if as_json:
        _emit(vulnerability_rows(reports), [], as_json=True)
    else:
        auditor.display_vulnerabilities(reports)
    _report_failures(auditor.failures)
    if reports or auditor.failures:
        ctx.exit(EXIT_FINDINGS)


@main.command("licenses")
@click.option(
    "-a",
    "--allow",
    "allowed",
    multiple=True,
    help="Allowed license identifier (repeatable; default from NUAUDIT_ALLOWED_LICENSES)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def licenses(ctx: click.Context, allowed: tuple[str, ...], as_json: bool) -> None:
    """Report packages whose license is not in the allow-set."""
    allow_set = frozenset(allowed) if allowed else ctx.obj["settings"].allowed_licenses
    auditor = _auditor_from(ctx, online=True)
    try:
        violations = _run_online(auditor, lambda a: a.restricted_license_packages(allow_set))
    except ManifestParseError as e:
        _fail(str(e))
    if as_json:
        _emit(license_rows(violations), [], as_json=True)
    else:
        auditor.display_license_violations(violations)
    _report_failures(auditor.failures)
    if violations or auditor.failures:
        ctx.exit(EXIT_FINDINGS)


@main.command("pin")
@click.argument("package")
@click.argument("version")
@click.option("-p", "--project", default=None, help="Only projects whose name contains this")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def pin(ctx: click.Context, package: str, version: str, project: str | None, as_json: bool) -> None:
    """Report projects whose PACKAGE reference is not at VERSION."""
    auditor = _auditor_from(ctx)
    try:
        mismatches = auditor.version_mismatches(package, version, project)
    except ManifestParseError as e:
        _fail(str(e))
    _emit(mismatch_rows(mismatches), mismatch_lines(mismatches), as_json)
    _report_failures(auditor.failures)
    if mismatches or auditor.failures:
        ctx.exit(EXIT_FINDINGS)


if __name__ == "__main__":
    main()
