"""Parse Yarn Berry (v2+) yarn.lock to capture resolved dependencies."""

from __future__ import annotations

import re

from ..models import VersionsSet, add_version
from ._text import is_indented
from .yarn_lock import find_block_line

_VERSION_LINE = re.compile(r"""^\s+version:\s*(?:"([^"]+)"|'([^']+)'|([^\s#'"]+))""")


def yarn_berry_specifier_to_name(spec: str) -> str | None:
    """Return the package name of a descriptor such as ``@scope/name@npm:^1.0.0``."""
    spec = spec.strip().strip("\"'")
    if spec.startswith("@"):
        at = spec.find("@", 1)
    else:
        at = spec.find("@")
    if at <= 0:
        return None
    return spec[:at]


def _version_of(line: str) -> str | None:
    match = _VERSION_LINE.match(line)
    if not match:
        return None
    return next(g for g in match.groups() if g is not None)


def parse(content: str) -> VersionsSet:
    """Return the package -> versions mapping of a Yarn Berry lockfile."""
    result: VersionsSet = {}
    lines = content.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if not line.strip() or line.startswith("#") or is_indented(line):
            continue
        header = line.rstrip()
        if not header.endswith(":"):
            continue

        version: str | None = None
        while i < len(lines):
            body = lines[i]
            if body and not is_indented(body):
                break
            version = version or _version_of(body)
            i += 1
        if not version:
            continue

        # '"a@npm:^1.0.0, a@npm:^1.1.0":' lists every descriptor in one string
        for spec in header[:-1].split(","):
            name = yarn_berry_specifier_to_name(spec)
            if name:
                add_version(result, name, version)
    return result


def find_line(content: str, name: str, version: str) -> int | None:
    return find_block_line(content, name, version, _VERSION_LINE)
