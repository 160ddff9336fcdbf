"""Read lockfile snapshots from git history."""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

DEFAULT_BASE_REF = "origin/main"
FALLBACK_REF = "HEAD^"

_ORIGIN_HEAD = re.compile(r"refs/remotes/origin/(.*)$")

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when a git command fails."""


def run_git(args: list[str], cwd: Path | str | None = None) -> str:
    """Run ``git`` with ``args`` and return its stdout decoded as UTF-8."""
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise GitError("git executable not found") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
        raise GitError(f"git {' '.join(args)} failed: {stderr}") from exc
    try:
        return completed.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise GitError(f"git {' '.join(args)} output is not valid UTF-8: {exc}") from exc


def guess_default_base_ref(cwd: Path | str | None = None) -> str:
    """Return ``origin/<default branch>``, or ``origin/main`` when unknown."""
    try:
        output = run_git(["symbolic-ref", "refs/remotes/origin/HEAD"], cwd=cwd)
    except GitError as exc:
        logger.debug("Could not read origin/HEAD: %s", exc)
        return DEFAULT_BASE_REF
    match = _ORIGIN_HEAD.search(output.strip())
    return f"origin/{match.group(1)}" if match else DEFAULT_BASE_REF


def show_file(ref: str, path: str, cwd: Path | str | None = None) -> str | None:
    """Return ``path`` as of ``ref``, falling back to the parent commit.

    Returns None when neither revision holds the file.
    """
    for revision in (ref, FALLBACK_REF):
        try:
            return run_git(["show", f"{revision}:{path}"], cwd=cwd)
        except GitError as exc:
            logger.debug("Could not read %s at %s: %s", path, revision, exc)
    return None
