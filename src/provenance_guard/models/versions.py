"""Version set model shared by the lockfile parsers and the differ."""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Iterable

from packaging.version import InvalidVersion, Version

VersionsSet = dict[str, set[str]]


def add_version(result: VersionsSet, name: str, version: str) -> None:
    result.setdefault(name, set()).add(version)


def _version_key(version: str) -> tuple[int, Version | str]:
    try:
        return (1, Version(version))
    except InvalidVersion:
        return (0, version)


def ordered_versions(versions: Iterable[str], *, descending: bool = False) -> list[str]:
    """Return versions in semantic order.

    Versions that ``packaging`` cannot parse sort below every parseable one and
    are ordered among themselves as plain strings.
    """
    return sorted(versions, key=_version_key, reverse=descending)


@dataclass(frozen=True)
class PackageChange:
    """Versions of one package before and after a lockfile change."""

    name: str
    previous: frozenset[str]
    current: frozenset[str]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Package name must be non-empty")

    @property
    def added(self) -> frozenset[str]:
        return self.current - self.previous

    @property
    def removed(self) -> frozenset[str]:
        return self.previous - self.current

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "previous": ordered_versions(self.previous),
            "current": ordered_versions(self.current),
        }

    @classmethod
    def from_iterables(
        cls, name: str, previous: Iterable[str], current: Iterable[str]
    ) -> PackageChange:
        return cls(name=name, previous=frozenset(previous), current=frozenset(current))
