"""Provenance details resolved for a single package version."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProvenanceDetails:
    """What the registry attests about how a package version was built.

    ``branch`` is only set when ``ref`` names a branch (``refs/heads/...``);
    tag and commit refs leave it empty.
    """

    has: bool
    repository: str | None = None
    ref: str | None = None
    branch: str | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"has": self.has}
        if self.repository is not None:
            data["repository"] = self.repository
        if self.ref is not None:
            data["ref"] = self.ref
        if self.branch is not None:
            data["branch"] = self.branch
        return data


NO_PROVENANCE = ProvenanceDetails(has=False)
