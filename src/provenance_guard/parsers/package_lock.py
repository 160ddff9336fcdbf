"""Parse npm package-lock.json to capture resolved transitive dependencies."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..models import VersionsSet, add_version
from ._text import line_number_at

logger = logging.getLogger(__name__)


def _name_from_key(key: str) -> str | None:
    # "node_modules/a/node_modules/@scope/b" -> "@scope/b"
    last = key.rsplit("node_modules/", 1)[-1].rstrip("/")
    return last or None


def _walk_dependencies(deps: Any, result: VersionsSet) -> None:
    if not isinstance(deps, dict):
        return
    for name, meta in deps.items():
        if not isinstance(meta, dict):
            continue
        version = meta.get("version")
        if version:
            add_version(result, name, str(version))
        _walk_dependencies(meta.get("dependencies"), result)


def parse(content: str) -> VersionsSet:
    """Return the package -> versions mapping of a package-lock.json document.

    Supports npm v2+ ("packages" map) and falls back to the v1 nested
    "dependencies" tree when no "packages" map is present.
    """
    result: VersionsSet = {}
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse package-lock.json: %s", exc)
        return result
    if not isinstance(data, dict):
        return result

    packages = data.get("packages")
    if isinstance(packages, dict):
        for key, meta in packages.items():
            # Skip the root project entry
            if key == "" or not isinstance(meta, dict):
                continue
            version = meta.get("version")
            if not version:
                continue
            name = meta.get("name") or _name_from_key(key)
            if not name:
                continue
            add_version(result, str(name), str(version))
        return result

    _walk_dependencies(data.get("dependencies"), result)
    return result


def find_line(content: str, name: str, version: str) -> int | None:
    """Locate the package block of ``name``; the version is not matched."""
    idx = content.find(f'"node_modules/{name}"')
    if idx >= 0:
        return line_number_at(content, idx)
    idx = content.find(f'"name": "{name}"')
    if idx >= 0:
        return line_number_at(content, idx)
    return None
