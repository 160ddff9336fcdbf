"""Compare two lockfile snapshots package by package."""

from __future__ import annotations

from .models import PackageChange, VersionsSet


def diff_dependency_sets(previous: VersionsSet, current: VersionsSet) -> list[PackageChange]:
    """Return a change for every package whose version set differs.

    Packages are reported in the order they appear in ``previous``, followed
    by packages only present in ``current``. A package missing on one side is
    compared against an empty set, so removals and additions are reported too.
    """
    names = list(previous)
    names.extend(name for name in current if name not in previous)

    changes: list[PackageChange] = []
    for name in names:
        before = previous.get(name, set())
        after = current.get(name, set())
        if set(before) != set(after):
            changes.append(PackageChange.from_iterables(name, before, after))
    return changes
