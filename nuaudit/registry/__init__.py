"""Package registry clients."""

from nuaudit.registry.base import RegistryClient
from nuaudit.registry.nuget import DEFAULT_SERVICE_INDEX, NuGetRegistryClient
from nuaudit.registry.versions import normalize_version

__all__ = ["DEFAULT_SERVICE_INDEX", "NuGetRegistryClient", "RegistryClient", "normalize_version"]
