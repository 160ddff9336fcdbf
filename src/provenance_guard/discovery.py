"""Lockfile discovery utilities."""

from __future__ import annotations

import logging
from pathlib import Path

from .parsers import SUPPORTED_LOCKFILES

logger = logging.getLogger(__name__)


def detect_lockfile(root: Path) -> str | None:
    """Return the name of the first supported lockfile present in ``root``.

    Candidates are checked in ``SUPPORTED_LOCKFILES`` order, so a workspace
    holding both ``pnpm-lock.yaml`` and ``package-lock.json`` resolves to pnpm.
    """
    for name in SUPPORTED_LOCKFILES:
        if (root / name).is_file():
            return name
    return None


def read_text_file(path: Path) -> str | None:
    """Return the UTF-8 content of ``path``, or None when it cannot be read."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        return None
