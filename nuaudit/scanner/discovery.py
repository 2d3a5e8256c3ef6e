"""Solution-root resolution and manifest discovery."""

from __future__ import annotations

from pathlib import Path

from nuaudit.exceptions import SolutionNotFoundError

DEFAULT_MANIFEST_PATTERN = "*.csproj"
DEFAULT_SOLUTION_MARKER = "*.sln"


def find_solution_root(start: Path | None = None, marker: str = DEFAULT_SOLUTION_MARKER) -> Path:
    """Walk upward from *start* until a directory holding a *marker* file is found.

    *start* defaults to the current working directory.  Raises
    :class:`SolutionNotFoundError` once the filesystem root has been checked.
    """
    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        if any(hit.is_file() for hit in directory.glob(marker)):
            return directory
    raise SolutionNotFoundError(origin, marker)


def discover_manifests(root: Path, pattern: str = DEFAULT_MANIFEST_PATTERN) -> list[Path]:
    """Return every file under *root* (any depth) matching *pattern*.

    Nothing is excluded, build output directories included.  Raises
    ``FileNotFoundError`` / ``NotADirectoryError`` when *root* is unusable.
    """
    if not root.exists():
        raise FileNotFoundError(f"manifest root does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"manifest root is not a directory: {root}")
    return sorted(hit for hit in root.rglob(pattern) if hit.is_file())
