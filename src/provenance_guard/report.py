"""Messages, annotations and the machine-readable report of a check."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from jsonschema import Draft202012Validator

from .models import ChangeType, ChangeWarning, DowngradeEvent, DowngradeType
from .parsers import find_lockfile_line

REPORT_VERSION = "1"

_NULLABLE_STRING = {"type": ["string", "null"]}

REPORT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["version", "hasDowngrades", "hasChanges", "downgraded", "changed", "totals"],
    "additionalProperties": False,
    "properties": {
        "version": {"type": "string", "const": REPORT_VERSION},
        "hasDowngrades": {"type": "boolean"},
        "hasChanges": {"type": "boolean"},
        "downgraded": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "from", "to", "downgradeType"],
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "from": {"type": "string", "minLength": 1},
                    "to": {"type": "string", "minLength": 1},
                    "downgradeType": {"enum": [t.value for t in DowngradeType]},
                    "keptProvenance": {"type": "boolean"},
                },
            },
        },
        "changed": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "from", "to", "type"],
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "from": {"type": "string", "minLength": 1},
                    "to": {"type": "string", "minLength": 1},
                    "type": {"enum": [t.value for t in ChangeType]},
                    "previousRepository": _NULLABLE_STRING,
                    "newRepository": _NULLABLE_STRING,
                    "previousBranch": _NULLABLE_STRING,
                    "newBranch": _NULLABLE_STRING,
                },
            },
        },
        "totals": {
            "type": "object",
            "required": ["downgrades", "changes"],
            "properties": {
                "downgrades": {"type": "integer", "minimum": 0},
                "changes": {"type": "integer", "minimum": 0},
            },
        },
    },
}


def event_message(event: DowngradeEvent) -> str:
    if event.downgrade_type is DowngradeType.PROVENANCE:
        return f"{event.name} lost npm provenance: {event.from_version} -> {event.to_version}"
    extra = " (kept provenance)" if event.kept_provenance else ""
    return (
        f"{event.name} lost trusted publisher: "
        f"{event.from_version} -> {event.to_version}{extra}"
    )


def warning_message(warning: ChangeWarning) -> str:
    if warning.type is ChangeType.REPO_CHANGED:
        return (
            f"{warning.name} provenance repository changed: "
            f"{warning.prev_repo} -> {warning.new_repo}"
        )
    return (
        f"{warning.name} provenance branch changed: "
        f"{warning.prev_branch} -> {warning.new_branch}"
    )


@dataclass(frozen=True)
class Annotation:
    """A workflow annotation anchored to a line of the lockfile."""

    level: str
    file: str
    line: int
    message: str
    col: int = 1


def annotation_line(lockfile: str, content: str, name: str, version: str) -> int:
    """Line of ``name@version`` in the lockfile; 1 when it cannot be located."""
    return find_lockfile_line(lockfile, content, name, version) or 1


def build_annotations(
    lockfile: str,
    content: str,
    events: Iterable[DowngradeEvent],
    warnings: Iterable[ChangeWarning],
    *,
    failing_event: Callable[[DowngradeEvent], bool] = lambda event: False,
    fail_on_change: bool = False,
) -> list[Annotation]:
    """Return one annotation per event and per warning, events first.

    An annotation is an ``error`` when its finding fails the check and a
    ``warning`` otherwise.
    """
    annotations: list[Annotation] = []
    for event in events:
        annotations.append(
            Annotation(
                level="error" if failing_event(event) else "warning",
                file=lockfile,
                line=annotation_line(lockfile, content, event.name, event.to_version),
                message=event_message(event),
            )
        )
    for warning in warnings:
        annotations.append(
            Annotation(
                level="error" if fail_on_change else "warning",
                file=lockfile,
                line=annotation_line(lockfile, content, warning.name, warning.to_version),
                message=warning_message(warning),
            )
        )
    return annotations


def build_report(
    events: Sequence[DowngradeEvent], warnings: Sequence[ChangeWarning]
) -> dict[str, Any]:
    """Aggregate detection results into a schema-compatible report."""
    return {
        "version": REPORT_VERSION,
        "hasDowngrades": bool(events),
        "hasChanges": bool(warnings),
        "downgraded": [event.to_dict() for event in events],
        "changed": [warning.to_dict() for warning in warnings],
        "totals": {
            "downgrades": len(events),
            "changes": len(warnings),
        },
    }


def _format_errors(errors: Iterable) -> str:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return "\n".join(messages)


def validate_report(report: dict[str, Any]) -> None:
    """Raise ValueError listing every way ``report`` violates the report schema."""
    validator = Draft202012Validator(REPORT_SCHEMA)
    errors = sorted(validator.iter_errors(report), key=lambda e: [str(p) for p in e.path])
    if errors:
        raise ValueError("Report failed validation:\n" + _format_errors(errors))
