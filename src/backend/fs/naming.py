"""
Entry naming conventions.

Conflict names: <stem>_<n>.<ext>

- stem: The original name without its last extension
- n: 1, 2, 3, ... the first number giving a free name
- ext: The original last extension (kept as-is, may be absent)

Examples:
    report.txt   -> report_1.txt, report_2.txt, ...
    photos       -> photos_1, photos_2, ...
    .env         -> .env_1
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from .errors import InvalidNameError


# Upper bound on probes when looking for a free conflict name
DEFAULT_MAX_NAME_ATTEMPTS = 10_000

ExistsProbe = Callable[[str], bool]


class NameExhaustedError(RuntimeError):
    """Raised when no free conflict name was found within the attempt limit."""

    def __init__(self, name: str, attempts: int) -> None:
        super().__init__(f"No free name for {name!r} after {attempts} attempts")
        self.name = name
        self.attempts = attempts


class SplitName(NamedTuple):
    """Name split around its last extension."""
    stem: str
    extension: str  # Including the dot, or "" when absent


def split_name(name: str) -> SplitName:
    """
    Split a file name into stem and last extension.

    A leading dot (hidden files) and a trailing dot are not extensions.
    """
    idx = name.rfind(".")
    if idx <= 0 or idx == len(name) - 1:
        return SplitName(name, "")
    return SplitName(name[:idx], name[idx:])


def generate_conflict_name(name: str, counter: int) -> str:
    """
    Generate the n-th conflict name for a base name.

    Args:
        name: Original base name.
        counter: Suffix number, starting at 1.

    Returns:
        Name formatted as <stem>_<counter><ext>.

    Raises:
        ValueError: If counter is less than 1.
    """
    if counter < 1:
        raise ValueError(f"counter must be >= 1, got {counter}")
    stem, ext = split_name(name)
    return f"{stem}_{counter}{ext}"


def find_available_name(
    name: str,
    exists: ExistsProbe,
    *,
    max_attempts: int = DEFAULT_MAX_NAME_ATTEMPTS,
) -> str:
    """
    Find the first free name, starting with the name itself.

    Args:
        name: Desired base name.
        exists: Probe returning True when a candidate name is taken.
        max_attempts: Maximum number of suffixed candidates to probe.

    Returns:
        The original name if free, otherwise the first free conflict name.

    Raises:
        NameExhaustedError: If every candidate up to max_attempts is taken.
    """
    if not exists(name):
        return name

    for counter in range(1, max_attempts + 1):
        candidate = generate_conflict_name(name, counter)
        if not exists(candidate):
            return candidate

    raise NameExhaustedError(name, max_attempts)


def validate_entry_name(name: str | None) -> str:
    """
    Validate a single user-supplied entry name.

    Args:
        name: Raw name, surrounding whitespace is stripped.

    Returns:
        The stripped name.

    Raises:
        InvalidNameError: If the name is empty or contains separators or "..".
    """
    if name is None or not isinstance(name, str):
        raise InvalidNameError("Folder name is required")
    cleaned = name.strip()
    if not cleaned:
        raise InvalidNameError("Folder name is required")
    if "/" in cleaned or "\\" in cleaned or ".." in cleaned or "\x00" in cleaned:
        raise InvalidNameError("Invalid folder name")
    if cleaned == ".":
        raise InvalidNameError("Invalid folder name")
    return cleaned
