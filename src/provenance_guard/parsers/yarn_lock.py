"""Parse classic (v1) yarn.lock to capture resolved dependencies."""

from __future__ import annotations

import re

from ..models import VersionsSet, add_version
from ._text import is_indented, strip_quotes

V1_MARKER = "yarn lockfile v1"

_VERSION_LINE = re.compile(r'^\s{2}version\s+"([^"]+)"')


def yarn_v1_specifier_to_name(spec: str) -> str | None:
    """Return the package name of a specifier such as ``@scope/name@^1.0.0``.

    Everything before the last ``@`` is the name; a specifier without one (or
    with only the scope marker) has no name.
    """
    at = spec.rfind("@")
    if at <= 0:
        return None
    return spec[:at]


def _split_specifiers(header: str) -> list[str]:
    specifiers: list[str] = []
    for part in header.split(","):
        spec = part.strip()
        if spec.endswith(":"):
            spec = spec[:-1].rstrip()
        spec = strip_quotes(spec)
        if spec:
            specifiers.append(spec)
    return specifiers


def parse(content: str) -> VersionsSet:
    """Return the package -> versions mapping of a yarn v1 lockfile."""
    result: VersionsSet = {}
    lines = content.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i]
        if not line or is_indented(line) or line.startswith("#"):
            i += 1
            continue
        # Headers may continue over several lines ("a@^1",\n"a@^2":)
        header_lines = [line]
        while header_lines[-1].rstrip().endswith(",") and i + 1 < len(lines):
            i += 1
            header_lines.append(lines[i])
        i += 1
        if not header_lines[-1].rstrip().endswith(":"):
            continue

        version: str | None = None
        while i < len(lines):
            body = lines[i]
            if body and not is_indented(body):
                break
            match = _VERSION_LINE.match(body)
            if match:
                version = match.group(1)
            i += 1
        if not version:
            continue

        for spec in _split_specifiers("\n".join(header_lines)):
            name = yarn_v1_specifier_to_name(spec)
            if name:
                add_version(result, name, version)
    return result


def _names_package(header: str, name: str) -> bool:
    """True when a descriptor in ``header`` starts with ``name@``."""
    return re.search(rf"(?:^|[\s,\"']){re.escape(name)}@", header) is not None


def find_block_line(
    content: str, name: str, version: str, version_pattern: re.Pattern[str]
) -> int | None:
    """Find the version line of the ``name`` block resolving to ``version``.

    Shared by the v1 and berry locators; only the version line syntax differs.
    """
    lines = content.splitlines()
    for i, header in enumerate(lines):
        if not header or is_indented(header) or not header.rstrip().endswith(":"):
            continue
        if not _names_package(header, name):
            continue
        for j in range(i + 1, len(lines)):
            line = lines[j]
            if line and not is_indented(line):
                break
            match = version_pattern.match(line)
            if match and next(g for g in match.groups() if g is not None) == version:
                return j + 1
    return None


def find_line(content: str, name: str, version: str) -> int | None:
    return find_block_line(content, name, version, _VERSION_LINE)
