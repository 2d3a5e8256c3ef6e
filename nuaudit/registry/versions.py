"""NuGet version normalisation."""

from __future__ import annotations


def normalize_version(text: str) -> str:
    """Return the normalised, lowercase form NuGet uses to compare versions.

    ``1.0`` → ``1.0.0``, ``01.2.3.0`` → ``1.2.3``, ``2.0.0+sha.1`` → ``2.0.0``,
    ``1.0.0-Beta`` → ``1.0.0-beta``.  Strings that are not a dotted numeric
    version (ranges, floating ``1.*``) are only trimmed and lowercased.
    """
    value = text.strip().split("+", 1)[0]
    core, sep, release = value.partition("-")
    parts = core.split(".")
    if not 1 <= len(parts) <= 4 or not all(part.isdigit() for part in parts):
        return value.lower()

    numbers = [str(int(part)) for part in parts]
    while len(numbers) < 3:
        numbers.append("0")
    if len(numbers) == 4 and numbers[3] == "0":
        numbers.pop()

    normalized = ".".join(numbers)
    if sep:
        normalized = f"{normalized}-{release}"
    return normalized.lower()
