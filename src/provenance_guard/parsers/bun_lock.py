"""Parse bun.lock (JSON with comments) to capture resolved dependencies."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from ..models import VersionsSet, add_version
from ._text import line_number_at

logger = logging.getLogger(__name__)

_STRING = r'("(?:\\.|[^"\\])*")'
_COMMENTS = re.compile(_STRING + r"|//[^\n]*|/\*.*?\*/", re.DOTALL)
_TRAILING_COMMAS = re.compile(_STRING + r"|,(\s*[}\]])")

# Lines around a "name" entry searched for the matching "version" entry
_PAIR_WINDOW = 3


def strip_jsonc(content: str) -> str:
    """Remove comments and trailing commas outside of JSON strings."""
    content = _COMMENTS.sub(lambda m: m.group(1) or "", content)
    return _TRAILING_COMMAS.sub(lambda m: m.group(1) or m.group(2), content)


def _split_key(key: str) -> tuple[str, str] | None:
    at = key.rfind("@")
    if at <= 0 or at == len(key) - 1:
        return None
    return key[:at], key[at + 1 :]


def _from_object_entry(key: str, value: Any) -> tuple[str, str] | None:
    if isinstance(value, list):
        # bun.lock: "lodash": ["lodash@4.17.21", "", {...}, "sha512-..."]
        if not value or not isinstance(value[0], str):
            return None
        parsed = _split_key(value[0])
        if parsed is None or ":" in parsed[1]:
            # workspace:, github:, file: and link: entries are not registry versions
            return None
        return parsed
    if not isinstance(value, dict):
        return None
    name = value.get("name")
    version = value.get("version")
    if name is None and version is None:
        return _split_key(key)
    if name is None:
        parsed = _split_key(key)
        name = parsed[0] if parsed else None
    if not name or not version:
        return None
    return str(name), str(version)


def parse(content: str) -> VersionsSet:
    """Return the package -> versions mapping of a bun.lock document.

    ``packages`` may be a list of ``{name, version}`` objects or an object
    keyed by ``"<name>@<version>"`` (or by name, with bun's array values).
    """
    result: VersionsSet = {}
    try:
        data = json.loads(strip_jsonc(content))
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse bun.lock: %s", exc)
        return result
    if not isinstance(data, dict):
        return result

    packages = data.get("packages")
    if isinstance(packages, list):
        for entry in packages:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            version = entry.get("version")
            if name and version:
                add_version(result, str(name), str(version))
    elif isinstance(packages, dict):
        for key, value in packages.items():
            parsed = _from_object_entry(key, value)
            if parsed:
                add_version(result, *parsed)
    return result


def find_line(content: str, name: str, version: str) -> int | None:
    idx = content.find(f'"{name}@{version}"')
    if idx >= 0:
        return line_number_at(content, idx)

    name_pattern = re.compile(r'"name"\s*:\s*"' + re.escape(name) + '"')
    version_pattern = re.compile(r'"version"\s*:\s*"' + re.escape(version) + '"')
    lines = content.splitlines()
    for i, line in enumerate(lines):
        if not name_pattern.search(line):
            continue
        window = lines[max(0, i - _PAIR_WINDOW) : i + _PAIR_WINDOW + 1]
        if any(version_pattern.search(candidate) for candidate in window):
            return i + 1

    # Imprecise: the first matching version after the package is mentioned
    start = content.find(f'"{name}')
    if start < 0:
        return None
    match = version_pattern.search(content, start)
    if match:
        return line_number_at(content, match.start())
    return None
