"""Registry client interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from nuaudit.models import PackageMetadata


@runtime_checkable
class RegistryClient(Protocol):
    """Interface that every package-metadata registry client must satisfy."""

    async def connect(self) -> None: ...

    async def fetch_metadata(self, name: str, version: str) -> PackageMetadata | None: ...

    async def close(self) -> None: ...
