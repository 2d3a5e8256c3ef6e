"""Manifest scanner: locate project files and extract package references."""

from nuaudit.scanner.csproj import iter_references, project_name, read_references
from nuaudit.scanner.discovery import discover_manifests, find_solution_root

__all__ = [
    "discover_manifests",
    "find_solution_root",
    "iter_references",
    "project_name",
    "read_references",
]
