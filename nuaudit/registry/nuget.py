"""Async NuGet v3 registry client."""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from nuaudit.exceptions import (
    RegistryLookupError,
    RegistryNotConnectedError,
    RegistryUnavailableError,
)
from nuaudit.models import PackageMetadata
from nuaudit.registry.schemas import RegistrationIndex, RegistrationPage, ServiceIndex
from nuaudit.registry.versions import normalize_version

log = structlog.get_logger("nuaudit.registry")

DEFAULT_SERVICE_INDEX = "https://api.nuget.org/v3/index.json"
DEFAULT_TIMEOUT = 30.0

# Preference order; the SemVer2 variant also lists prerelease-only versions.
_REGISTRATION_TYPES = (
    "RegistrationsBaseUrl/3.6.0",
    "RegistrationsBaseUrl/3.4.0",
    "RegistrationsBaseUrl/3.0.0-rc",
    "RegistrationsBaseUrl/3.0.0-beta",
    "RegistrationsBaseUrl",
)

_M = TypeVar("_M", bound=BaseModel)


class NuGetRegistryClient:
    """Thin async wrapper around the NuGet registration (package metadata) resource.

    The service index is resolved once by :meth:`connect`; every later lookup
    reuses the resolved registration base URL.  Lookups are one request (plus
    one per non-inlined registration page) with no retries.
    """

    def __init__(
        self,
        service_index_url: str = DEFAULT_SERVICE_INDEX,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.service_index_url = service_index_url
        self._registration_base: str | None = None
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    @property
    def connected(self) -> bool:
        return self._registration_base is not None

    async def connect(self) -> None:
        """Resolve the registration resource from the service index.

        Raises :class:`RegistryUnavailableError` on any failure, after closing
        the HTTP client.  A closed client cannot be connected again.
        """
        if self._client.is_closed:
            raise RegistryNotConnectedError("registry client is closed")
        try:
            base = await self._resolve_registration_base()
        except RegistryUnavailableError:
            await self._client.aclose()
            raise
        self._registration_base = base.rstrip("/")
        log.debug("registry.connected", service_index=self.service_index_url, base=base)

    async def close(self) -> None:
        self._registration_base = None
        await self._client.aclose()

    async def __aenter__(self) -> NuGetRegistryClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def fetch_metadata(self, name: str, version: str) -> PackageMetadata | None:
        """Return metadata for *name* at exactly *version*, or ``None`` if unknown.

        Network errors, unexpected HTTP statuses and malformed responses raise
        :class:`RegistryLookupError`; a 404 means the package is unknown.
        """
        if self._registration_base is None:
            raise RegistryNotConnectedError("registry client used before connect()")
        if not name or not version:
            return None

        wanted = normalize_version(version)
        data = await self._get_json(
            f"{self._registration_base}/{name.lower()}/index.json", name, version
        )
        if data is None:
            return None
        index = self._validate(RegistrationIndex, data, name, version)

        for page in index.items:
            leaves = page.items
            if leaves is None:
                page_data = await self._get_json(page.id, name, version)
                if page_data is None:
                    continue
                leaves = self._validate(RegistrationPage, page_data, name, version).items or []
            for leaf in leaves:
                if normalize_version(leaf.catalog_entry.version) == wanted:
                    return leaf.catalog_entry.to_metadata()
        return None

    # ── internal ───────────────────────────────────────────────────────────

    async def _resolve_registration_base(self) -> str:
        try:
            response = await self._client.get(self.service_index_url)
            response.raise_for_status()
            index = ServiceIndex.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            raise RegistryUnavailableError(
                f"failed to reach registry service at {self.service_index_url}: {exc}"
            ) from exc

        base = index.find(*_REGISTRATION_TYPES)
        if base is None:
            raise RegistryUnavailableError(
                f"failed to reach registry service at {self.service_index_url}: "
                "no RegistrationsBaseUrl resource advertised"
            )
        return base

    async def _get_json(self, url: str, name: str, version: str) -> Any:
        """GET *url* and decode JSON; ``None`` on 404."""
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise RegistryLookupError(name, version, f"{type(exc).__name__}: {exc}") from exc

        if response.status_code == 404:
            return None
        if response.is_error:
            raise RegistryLookupError(name, version, f"HTTP {response.status_code} from {url}")
        try:
            return response.json()
        except ValueError as exc:
            raise RegistryLookupError(name, version, f"invalid JSON from {url}") from exc

    @staticmethod
    def _validate(model: type[_M], data: Any, name: str, version: str) -> _M:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise RegistryLookupError(
                name, version, f"malformed {model.__name__}: {exc.error_count()} error(s)"
            ) from exc
