"""Small text helpers shared by the lockfile parsers and line locators."""

from __future__ import annotations


def line_number_at(content: str, index: int) -> int:
    """Return the 1-based line number of the character at ``index``."""
    return content.count("\n", 0, max(index, 0)) + 1


def strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def is_indented(line: str) -> bool:
    return line[:1] in {" ", "\t"}
