"""Lockfile format detection, parsing and line lookup.

Each supported format lives in its own module exposing ``parse(content)`` and
``find_line(content, name, version)``; this package picks the module from the
lockfile name and, for ``yarn.lock``, from its content.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from ..models import VersionsSet
from . import bun_lock, package_lock, pnpm_lock, yarn_berry_lock, yarn_lock
from .yarn_berry_lock import yarn_berry_specifier_to_name
from .yarn_lock import V1_MARKER, yarn_v1_specifier_to_name


class LockfileFormat(str, Enum):
    NPM = "npm"
    PNPM = "pnpm"
    YARN_V1 = "yarn_v1"
    YARN_BERRY = "yarn_berry"
    BUN = "bun"


@dataclass(frozen=True)
class LockfileHandler:
    """Parse and locate functions bound to one lockfile format."""

    format: LockfileFormat
    parse: Callable[[str], VersionsSet]
    find_line: Callable[[str, str, str], int | None]


HANDLERS: dict[LockfileFormat, LockfileHandler] = {
    LockfileFormat.NPM: LockfileHandler(
        LockfileFormat.NPM, package_lock.parse, package_lock.find_line
    ),
    LockfileFormat.PNPM: LockfileHandler(
        LockfileFormat.PNPM, pnpm_lock.parse, pnpm_lock.find_line
    ),
    LockfileFormat.YARN_V1: LockfileHandler(
        LockfileFormat.YARN_V1, yarn_lock.parse, yarn_lock.find_line
    ),
    LockfileFormat.YARN_BERRY: LockfileHandler(
        LockfileFormat.YARN_BERRY, yarn_berry_lock.parse, yarn_berry_lock.find_line
    ),
    LockfileFormat.BUN: LockfileHandler(LockfileFormat.BUN, bun_lock.parse, bun_lock.find_line),
}

# Detection order when a workspace holds more than one lockfile
SUPPORTED_LOCKFILES = ("pnpm-lock.yaml", "package-lock.json", "yarn.lock", "bun.lock")


def sniff_format(path: str | PurePath, content: str | None = None) -> LockfileFormat | None:
    """Return the lockfile format for ``path``, or None when unsupported."""
    name = str(path)
    if name.endswith("package-lock.json"):
        return LockfileFormat.NPM
    if name.endswith("pnpm-lock.yaml"):
        return LockfileFormat.PNPM
    if name.endswith("yarn.lock"):
        if content is not None and V1_MARKER in content:
            return LockfileFormat.YARN_V1
        return LockfileFormat.YARN_BERRY
    if name.endswith("bun.lock"):
        return LockfileFormat.BUN
    return None


def parse_lockfile(path: str | PurePath, content: str) -> VersionsSet:
    """Parse ``content`` with the parser matching ``path``; unknown formats give {}."""
    fmt = sniff_format(path, content)
    if fmt is None:
        return {}
    return HANDLERS[fmt].parse(content)


def find_lockfile_line(
    path: str | PurePath, content: str, name: str, version: str
) -> int | None:
    """Best-effort 1-based line of the ``name@version`` declaration."""
    fmt = sniff_format(path, content)
    if fmt is None:
        return None
    return HANDLERS[fmt].find_line(content, name, version)


__all__ = [
    "HANDLERS",
    "LockfileFormat",
    "LockfileHandler",
    "SUPPORTED_LOCKFILES",
    "find_lockfile_line",
    "parse_lockfile",
    "sniff_format",
    "yarn_berry_specifier_to_name",
    "yarn_v1_specifier_to_name",
]
