"""Core check entrypoint.

Compares the lockfile of the workspace with its version at the base ref and
reports every newly introduced package version that lost npm provenance or
trusted publishing. Runner I/O goes through ``provenance_guard.github`` so the
same flow works inside a GitHub Action and from the command line.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from . import git, github
from .config import Settings
from .detector import DetectionResult, detect_downgrades
from .diff import diff_dependency_sets
from .discovery import detect_lockfile, read_text_file
from .parsers import SUPPORTED_LOCKFILES, parse_lockfile
from .registry import ProvenanceCaches, RegistryClient
from .report import build_annotations, build_report, validate_report
from .summary import render_summary

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Outcome of one check; ``exit_code`` is the process status to report."""

    exit_code: int = 0
    lockfile: str | None = None
    base_ref: str | None = None
    detection: DetectionResult = field(default_factory=DetectionResult)
    report: dict[str, Any] | None = None

    @property
    def compared(self) -> bool:
        return self.report is not None


def _resolve_base_ref(settings: Settings) -> str:
    if settings.base_ref:
        return settings.base_ref
    return git.guess_default_base_ref(settings.workspace_path)


def _write_outputs(report: dict[str, Any]) -> None:
    github.set_output("downgraded", json.dumps(report["downgraded"]))
    github.set_output("changed", json.dumps(report["changed"]))


def _exit_code(settings: Settings, detection: DetectionResult) -> int:
    if any(settings.fail_on_downgrade.fails_on(event) for event in detection.events):
        return 1
    if settings.fail_on_provenance_change and detection.warnings:
        return 1
    return 0


def run_check(
    settings: Settings,
    *,
    session: requests.Session | None = None,
) -> CheckResult:
    """Run the downgrade check described by ``settings``."""
    workspace = settings.workspace_path
    lockfile = settings.lockfile or detect_lockfile(workspace)
    if not lockfile:
        logger.info("No supported lockfile found. Supported: %s", ", ".join(SUPPORTED_LOCKFILES))
        return CheckResult()

    head_content = read_text_file(workspace / lockfile)
    if head_content is None:
        logger.info("Could not read %s. Nothing to compare.", lockfile)
        return CheckResult(lockfile=lockfile)

    base_ref = _resolve_base_ref(settings)
    base_content = git.show_file(base_ref, lockfile, cwd=workspace)
    if not base_content:
        logger.info('Could not read base lockfile from ref "%s". Nothing to compare.', base_ref)
        return CheckResult(lockfile=lockfile, base_ref=base_ref)

    current = parse_lockfile(lockfile, head_content)
    previous = parse_lockfile(lockfile, base_content)
    changes = diff_dependency_sets(previous, current)
    if not changes:
        logger.info("No dependency version changes detected in lockfile.")
        report = build_report([], [])
        _write_outputs(report)
        return CheckResult(lockfile=lockfile, base_ref=base_ref, report=report)

    logger.info("%d package(s) changed versions in %s", len(changes), lockfile)
    client = RegistryClient(
        settings.registry_url,
        session=session,
        timeout=settings.request_timeout,
        attempts=settings.retries,
    )
    detection = detect_downgrades(changes, client=client, caches=ProvenanceCaches())

    summary = render_summary(detection.events, detection.warnings)
    if summary:
        for line in summary.splitlines():
            logger.info("%s", line)
        github.append_summary(summary)
    else:
        logger.info("No downgrades detected.")

    for annotation in build_annotations(
        lockfile,
        head_content,
        detection.events,
        detection.warnings,
        failing_event=settings.fail_on_downgrade.fails_on,
        fail_on_change=settings.fail_on_provenance_change,
    ):
        github.annotate(
            annotation.level, annotation.file, annotation.line, annotation.col, annotation.message
        )

    report = build_report(detection.events, detection.warnings)
    validate_report(report)
    _write_outputs(report)

    return CheckResult(
        exit_code=_exit_code(settings, detection),
        lockfile=lockfile,
        base_ref=base_ref,
        detection=detection,
        report=report,
    )
