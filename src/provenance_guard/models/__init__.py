"""Data models for lockfile diffs and provenance downgrade detection."""

from __future__ import annotations

from .events import ChangeType, ChangeWarning, DowngradeEvent, DowngradeType
from .provenance import NO_PROVENANCE, ProvenanceDetails
from .versions import PackageChange, VersionsSet, add_version, ordered_versions

__all__ = [
    "ChangeType",
    "ChangeWarning",
    "DowngradeEvent",
    "DowngradeType",
    "NO_PROVENANCE",
    "PackageChange",
    "ProvenanceDetails",
    "VersionsSet",
    "add_version",
    "ordered_versions",
]
