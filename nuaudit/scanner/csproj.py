"""Parser for MSBuild project files (*.csproj)."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator
from pathlib import Path

from nuaudit.exceptions import ManifestParseError
from nuaudit.models import PackageReference

_ELEMENT = "PackageReference"


def _local_name(tag: str) -> str:
    # Strip namespace, e.g. legacy "{http://schemas.microsoft.com/developer/msbuild/2003}"
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element:
        if isinstance(child.tag, str) and _local_name(child.tag) == name:
            return (child.text or "").strip()
    return None


def project_name(path: Path) -> str:
    """Project identifier: the file name without its extension."""
    return path.stem


def iter_references(path: Path, content: str) -> Iterator[PackageReference]:
    """Yield one :class:`PackageReference` per ``PackageReference`` element.

    Elements are matched at any depth and under any namespace.  A missing
    ``Include`` or ``Version`` becomes an empty string.  Malformed markup
    raises :class:`ManifestParseError`.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise ManifestParseError(path, str(exc)) from exc

    project = project_name(path)
    for element in root.iter():
        if not isinstance(element.tag, str) or _local_name(element.tag) != _ELEMENT:
            continue
        version = element.get("Version")
        if version is None:
            version = _child_text(element, "Version")
        yield PackageReference(
            project=project,
            name=element.get("Include") or "",
            version=version or "",
            manifest=path,
        )


def read_references(path: Path) -> list[PackageReference]:
    """Read *path* and return all of its package references."""
    # utf-8-sig: Visual Studio writes project files with a BOM
    content = path.read_text(encoding="utf-8-sig", errors="replace")
    return list(iter_references(path, content))
