"""Find new package versions that lost a trust signal an older version had."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import (
    ChangeType,
    ChangeWarning,
    DowngradeEvent,
    DowngradeType,
    PackageChange,
    ProvenanceDetails,
    ordered_versions,
)
from .registry import (
    ProvenanceCaches,
    RegistryClient,
    get_provenance_details,
    has_provenance,
    has_trusted_publisher,
)

logger = logging.getLogger(__name__)


@dataclass
class DetectionResult:
    events: list[DowngradeEvent] = field(default_factory=list)
    warnings: list[ChangeWarning] = field(default_factory=list)

    @property
    def has_downgrades(self) -> bool:
        return bool(self.events)

    @property
    def has_changes(self) -> bool:
        return bool(self.warnings)


class _Signals:
    """Resolver calls bound to one client and one set of caches."""

    def __init__(self, client: RegistryClient, caches: ProvenanceCaches) -> None:
        self.client = client
        self.caches = caches

    def provenance(self, name: str, version: str) -> bool:
        return has_provenance(name, version, self.caches.provenance, client=self.client)

    def details(self, name: str, version: str) -> ProvenanceDetails:
        return get_provenance_details(name, version, self.caches.details, client=self.client)

    def trusted_publisher(self, name: str, version: str) -> bool:
        return has_trusted_publisher(
            name, version, self.caches.trusted_publisher, client=self.client
        )


def _change_warning(
    signals: _Signals, change: PackageChange, previous: list[str], version: str
) -> ChangeWarning | None:
    new_details = signals.details(change.name, version)
    for old in previous:
        old_details = signals.details(change.name, old)
        if not old_details.has:
            continue
        if (
            old_details.repository
            and new_details.repository
            and old_details.repository != new_details.repository
        ):
            return ChangeWarning(
                change.name,
                old,
                version,
                ChangeType.REPO_CHANGED,
                prev_repo=old_details.repository,
                new_repo=new_details.repository,
            )
        if (
            old_details.branch
            and new_details.branch
            and old_details.branch != new_details.branch
        ):
            return ChangeWarning(
                change.name,
                old,
                version,
                ChangeType.BRANCH_CHANGED,
                prev_branch=old_details.branch,
                new_branch=new_details.branch,
            )
    return None


def _inspect(signals: _Signals, change: PackageChange, result: DetectionResult) -> None:
    name = change.name
    previous = ordered_versions(change.previous, descending=True)

    for version in ordered_versions(change.added):
        provenance_now = signals.provenance(name, version)
        publisher_now = signals.trusted_publisher(name, version)

        if not publisher_now:
            old = next((v for v in previous if signals.trusted_publisher(name, v)), None)
            if old is not None:
                result.events.append(
                    DowngradeEvent(
                        name,
                        old,
                        version,
                        DowngradeType.TRUSTED_PUBLISHER,
                        kept_provenance=provenance_now,
                    )
                )

        if not provenance_now:
            old = next((v for v in previous if signals.provenance(name, v)), None)
            if old is not None:
                result.events.append(DowngradeEvent(name, old, version, DowngradeType.PROVENANCE))
            continue

        warning = _change_warning(signals, change, previous, version)
        if warning is not None:
            result.warnings.append(warning)


def detect_downgrades(
    changes: Iterable[PackageChange],
    *,
    client: RegistryClient,
    caches: ProvenanceCaches | None = None,
) -> DetectionResult:
    """Check every newly introduced version in ``changes`` against its predecessors.

    Changes without versions on both sides (pure additions or removals) are
    skipped. The most recent previous version holding a signal is reported as
    the ``from`` side of an event.
    """
    signals = _Signals(client, caches if caches is not None else ProvenanceCaches())
    result = DetectionResult()
    for change in changes:
        if not change.previous or not change.current:
            continue
        logger.debug("Checking %s", change.to_dict())
        _inspect(signals, change, result)

    logger.info(
        "Detected %d downgrade(s) and %d provenance change(s)",
        len(result.events),
        len(result.warnings),
    )
    return result
