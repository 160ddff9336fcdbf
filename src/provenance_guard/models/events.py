"""Downgrade events and change warnings produced by the detector."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DowngradeType(str, Enum):
    PROVENANCE = "provenance"
    TRUSTED_PUBLISHER = "trusted_publisher"


class ChangeType(str, Enum):
    REPO_CHANGED = "repo_changed"
    BRANCH_CHANGED = "branch_changed"


def _check_transition(name: str, from_version: str, to_version: str) -> None:
    if not name:
        raise ValueError("Package name must be non-empty")
    if not from_version or not to_version:
        raise ValueError("Versions must be non-empty strings")


@dataclass(frozen=True)
class DowngradeEvent:
    """A new version lost a trust signal an older version of the package held.

    ``kept_provenance`` is only meaningful for trusted publisher downgrades.
    """

    name: str
    from_version: str
    to_version: str
    downgrade_type: DowngradeType
    kept_provenance: bool | None = None

    def __post_init__(self) -> None:
        _check_transition(self.name, self.from_version, self.to_version)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "name": self.name,
            "from": self.from_version,
            "to": self.to_version,
            "downgradeType": self.downgrade_type.value,
        }
        if self.downgrade_type is DowngradeType.TRUSTED_PUBLISHER:
            data["keptProvenance"] = bool(self.kept_provenance)
        return data


@dataclass(frozen=True)
class ChangeWarning:
    """The attested source repository or branch moved between versions."""

    name: str
    from_version: str
    to_version: str
    type: ChangeType
    prev_repo: str | None = None
    new_repo: str | None = None
    prev_branch: str | None = None
    new_branch: str | None = None

    def __post_init__(self) -> None:
        _check_transition(self.name, self.from_version, self.to_version)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "from": self.from_version,
            "to": self.to_version,
            "type": self.type.value,
            "previousRepository": self.prev_repo,
            "newRepository": self.new_repo,
            "previousBranch": self.prev_branch,
            "newBranch": self.new_branch,
        }
