"""GitHub Actions runner I/O: inputs, outputs, step summary and annotations."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import TextIO

OUTPUT_DELIMITER = "__EOF__"


def input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").replace("-", "_").upper()


def get_input(name: str, environ: Mapping[str, str] | None = None) -> str | None:
    """Return the raw value of action input ``name``, or None when unset."""
    env = os.environ if environ is None else environ
    return env.get(input_env_name(name))


def _append(path: str, text: str) -> None:
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(text)


def set_output(name: str, value: str, environ: Mapping[str, str] | None = None) -> None:
    """Append a step output to ``$GITHUB_OUTPUT``; a no-op outside a runner."""
    env = os.environ if environ is None else environ
    path = env.get("GITHUB_OUTPUT")
    if not path:
        return
    _append(path, f"{name}<<{OUTPUT_DELIMITER}\n{value}\n{OUTPUT_DELIMITER}\n")


def append_summary(text: str, environ: Mapping[str, str] | None = None) -> None:
    env = os.environ if environ is None else environ
    path = env.get("GITHUB_STEP_SUMMARY")
    if not path:
        return
    _append(path, f"{text}\n")


def escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_annotation(level: str, file: str, line: int, col: int, message: str) -> str:
    return f"::{level} file={file},line={line},col={col}::{escape_data(message)}"


def annotate(
    level: str,
    file: str,
    line: int,
    col: int,
    message: str,
    stream: TextIO | None = None,
) -> None:
    """Print a workflow command that the runner turns into a file annotation."""
    print(format_annotation(level, file, line, col, message), file=stream or sys.stdout)
