"""Parse pnpm-lock.yaml to capture resolved dependencies.

The file is scanned line by line instead of being loaded as YAML: only the
package headers of the top-level ``packages:`` section matter, and a line scan
keeps working on lockfiles that a strict YAML loader rejects.
"""

from __future__ import annotations

import re

from ..models import VersionsSet, add_version
from ._text import strip_quotes

_PACKAGES_SECTION = re.compile(r"^packages:\s*$")
_TOP_LEVEL_SECTION = re.compile(r"^\S.*:$")
_PACKAGE_HEADER = re.compile(r"^\s{2}(\S.*?):\s*$")


def _split_key(key: str) -> tuple[str, str] | None:
    # Keys look like "/name@1.2.3", "/@scope/name@1.2.3(peer@2.0.0)" or, since
    # lockfile v9, "name@1.2.3". Quoted keys keep their leading slash.
    if key.startswith("/"):
        key = key[1:]
    key = strip_quotes(key)
    core = key.split("(", 1)[0]
    at = core.rfind("@")
    if at <= 0:
        return None
    version = core[at + 1 :].strip()
    if not version:
        return None
    return core[:at], version


def parse(content: str) -> VersionsSet:
    """Return the package -> versions mapping of the ``packages:`` section."""
    result: VersionsSet = {}
    in_packages = False
    for line in content.splitlines():
        if not in_packages:
            in_packages = bool(_PACKAGES_SECTION.match(line))
            continue
        if _TOP_LEVEL_SECTION.match(line):
            in_packages = bool(_PACKAGES_SECTION.match(line))
            continue
        match = _PACKAGE_HEADER.match(line)
        if not match:
            continue
        parsed = _split_key(match.group(1))
        if parsed:
            add_version(result, *parsed)
    return result


def find_line(content: str, name: str, version: str) -> int | None:
    lines = content.splitlines()
    needle = f"/{name}@{version}"
    for number, line in enumerate(lines, start=1):
        if needle in line and line.rstrip().endswith(":"):
            return number
    for number, line in enumerate(lines, start=1):
        if line.lstrip().startswith(needle):
            return number
    # v9 keys carry no leading slash
    bare = f"{name}@{version}"
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not line.startswith(" ") or not stripped.endswith(":"):
            continue
        key = strip_quotes(stripped[:-1].rstrip())
        if key == bare or key.startswith(bare + "("):
            return number
    return None
