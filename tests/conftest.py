"""Shared pytest fixtures for nuaudit tests (no network access needed)."""

from __future__ import annotations

from pathlib import Path

import pytest
import structlog

from nuaudit.exceptions import RegistryUnavailableError
from nuaudit.models import PackageMetadata, Vulnerability


def write_csproj(path: Path, references: list[tuple[str | None, str | None]]) -> Path:
    """Write an SDK-style project file declaring *references* as (Include, Version)."""
    items = []
    for include, version in references:
        attrs = ""
        if include is not None:
            attrs += f' Include="{include}"'
        if version is not None:
            attrs += f' Version="{version}"'
        items.append(f"    <PackageReference{attrs} />")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        '<Project Sdk="Microsoft.NET.Sdk">\n'
        "  <PropertyGroup>\n"
        "    <TargetFramework>net8.0</TargetFramework>\n"
        "  </PropertyGroup>\n"
        "  <ItemGroup>\n" + "\n".join(items) + "\n  </ItemGroup>\n"
        "</Project>\n",
        encoding="utf-8",
    )
    return path


class FakeRegistry:
    """In-memory RegistryClient keyed by (name, version).

    A value may be ``PackageMetadata``, ``None`` (unknown) or an exception
    instance, which is raised from ``fetch_metadata``.
    """

    def __init__(self, packages=None, *, fail_connect: bool = False) -> None:
        self.packages = dict(packages or {})
        self.fail_connect = fail_connect
        self.connect_calls = 0
        self.closed = False
        self.lookups: list[tuple[str, str]] = []

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.fail_connect:
            raise RegistryUnavailableError("failed to reach registry service: fake outage")

    async def fetch_metadata(self, name: str, version: str):
        self.lookups.append((name, version))
        value = self.packages.get((name, version))
        if isinstance(value, Exception):
            raise value
        return value

    async def close(self) -> None:
        self.closed = True


PACKAGE_X = PackageMetadata(
    name="PackageX",
    version="1.0.0",
    license="MIT",
    authors="X Corp",
    vulnerabilities=(Vulnerability(severity="High", advisory_url="https://example/adv1"),),
)
PACKAGE_Y = PackageMetadata(
    name="PackageY",
    version="2.0.0",
    license="Apache-2.0",
    authors="Y Foundation",
)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def captured_logs():
    """Capture structlog events instead of printing them."""
    with structlog.testing.capture_logs() as logs:
        yield logs


@pytest.fixture
def solution(tmp_path) -> Path:
    """Solution with A.csproj (PackageX) and B.csproj (PackageX, PackageY)."""
    (tmp_path / "Demo.sln").write_text("Microsoft Visual Studio Solution File\n")
    write_csproj(tmp_path / "src" / "A" / "A.csproj", [("PackageX", "1.0.0")])
    write_csproj(
        tmp_path / "src" / "B" / "B.csproj",
        [("PackageX", "1.0.0"), ("PackageY", "2.0.0")],
    )
    return tmp_path


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry(
        {
            ("PackageX", "1.0.0"): PACKAGE_X,
            ("PackageY", "2.0.0"): PACKAGE_Y,
        }
    )


@pytest.fixture
def make_registry():
    return FakeRegistry


@pytest.fixture
def csproj():
    return write_csproj
