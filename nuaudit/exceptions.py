"""Custom exceptions for nuaudit."""

from __future__ import annotations

from pathlib import Path


class AuditError(Exception):
    """Base exception for all audit errors."""


class ConfigError(AuditError):
    """Raised when a configuration value cannot be interpreted."""


class SolutionNotFoundError(AuditError, FileNotFoundError):
    """Raised when no ancestor directory contains a solution marker file."""

    def __init__(self, start: Path, marker: str):
        self.start = start
        self.marker = marker
        super().__init__(
            f"directory not found: no '{marker}' file in {start} or any parent directory"
        )


class ManifestParseError(AuditError, ValueError):
    """Raised when a manifest file is not well-formed markup."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse manifest {path}: {reason}")


class RegistryUnavailableError(AuditError):
    """Raised when the registry service cannot be resolved at connect time."""


class RegistryNotConnectedError(AuditError):
    """Raised when the registry is queried before ``connect()`` completed."""


class RegistryLookupError(AuditError):
    """Raised when a single metadata lookup fails for a transient reason."""

    def __init__(self, name: str, version: str, reason: str):
        self.name = name
        self.version = version
        self.reason = reason
        super().__init__(f"lookup of {name} ({version}) failed: {reason}")
