"""Human-readable summary rendering for $GITHUB_STEP_SUMMARY."""

from __future__ import annotations

from collections.abc import Sequence

from .models import ChangeType, ChangeWarning, DowngradeEvent, DowngradeType


def event_line(event: DowngradeEvent) -> str:
    label = event.downgrade_type.value
    if event.downgrade_type is DowngradeType.TRUSTED_PUBLISHER and event.kept_provenance:
        label += ", kept provenance"
    return f"- {event.name}: {event.from_version} -> {event.to_version} [{label}]"


def warning_line(warning: ChangeWarning) -> str:
    if warning.type is ChangeType.REPO_CHANGED:
        detail = f"provenance repository changed: {warning.prev_repo} -> {warning.new_repo}"
    else:
        detail = f"provenance branch changed: {warning.prev_branch} -> {warning.new_branch}"
    return f"- {warning.name}: {warning.from_version} -> {warning.to_version} [{detail}]"


def render_summary(
    events: Sequence[DowngradeEvent], warnings: Sequence[ChangeWarning]
) -> str:
    """Return the Markdown sections for downgrades and provenance changes.

    Sections without entries are left out; an empty string means there is
    nothing to report.
    """
    sections = []
    if events:
        sections.append("\n".join(["Dependency downgrades:", *map(event_line, events)]))
    if warnings:
        sections.append("\n".join(["Provenance changes:", *map(warning_line, warnings)]))
    return "\n".join(sections)
