"""Resolve npm provenance and trusted publisher status of package versions.

Every lookup walks the same chain: the two attestation endpoints in order,
then the package metadata document. Each step yields a ``Verdict``; the first
conclusive one ends the chain. Results are memoised in caches owned by the
caller, so one run never asks the registry twice about the same version.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, MutableMapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models import NO_PROVENANCE, ProvenanceDetails
from .attestations import extract_repo_and_ref, normalize_ref_to_branch
from .client import FetchResult, FetchStatus, RegistryClient

GITHUB_ACTIONS_PUBLISHER = "GitHub Actions"
GITHUB_OIDC_EMAIL = "npm-oidc-no-reply@github.com"

logger = logging.getLogger(__name__)


class Verdict(Enum):
    PRESENT = "present"
    ABSENT = "absent"
    INCONCLUSIVE = "inconclusive"


@dataclass
class ProvenanceCaches:
    """Per-run memo of everything resolved about ``name@version`` keys."""

    provenance: dict[str, bool] = field(default_factory=dict)
    trusted_publisher: dict[str, bool] = field(default_factory=dict)
    details: dict[str, ProvenanceDetails] = field(default_factory=dict)


def cache_key(name: str, version: str) -> str:
    return f"{name}@{version}"


def _attestation_count(payload: Any) -> int:
    if not isinstance(payload, dict):
        return 0
    count = payload.get("count")
    if isinstance(count, (int, float)) and not isinstance(count, bool):
        return int(count)
    attestations = payload.get("attestations")
    return len(attestations) if isinstance(attestations, list) else 0


def _endpoint_verdict(result: FetchResult) -> Verdict:
    if result.status is FetchStatus.NOT_FOUND:
        return Verdict.ABSENT
    if result.status is FetchStatus.ERROR:
        return Verdict.INCONCLUSIVE
    return Verdict.PRESENT if _attestation_count(result.payload) > 0 else Verdict.ABSENT


def _metadata_has_provenance(record: Any) -> bool:
    if not isinstance(record, dict):
        return False
    if record.get("provenance"):
        return True
    dist = record.get("dist")
    if not isinstance(dist, dict):
        return False
    return bool(dist.get("provenance")) or isinstance(dist.get("attestations"), (dict, list))


def has_provenance(
    name: str,
    version: str,
    cache: MutableMapping[str, bool],
    *,
    client: RegistryClient,
) -> bool:
    """Return whether ``name@version`` was published with npm provenance."""
    key = cache_key(name, version)
    if key in cache:
        return cache[key]

    for url in client.attestation_urls(name, version):
        verdict = _endpoint_verdict(client.fetch_json(url))
        if verdict is not Verdict.INCONCLUSIVE:
            cache[key] = verdict is Verdict.PRESENT
            return cache[key]

    logger.debug("Attestation endpoints inconclusive for %s, checking metadata", key)
    result = client.fetch_version_metadata(name, version)
    cache[key] = result.ok and _metadata_has_provenance(result.payload)
    return cache[key]


def _details_from(attestations: Iterable[Any]) -> ProvenanceDetails:
    repository: str | None = None
    ref: str | None = None
    branch: str | None = None
    for attestation in attestations:
        found = extract_repo_and_ref(attestation)
        if not found.repository and not found.ref:
            continue
        repository = found.repository or repository
        ref = found.ref or ref
        if ref:
            branch = normalize_ref_to_branch(ref)
        if repository and branch:
            break
    return ProvenanceDetails(has=True, repository=repository, ref=ref, branch=branch)


def _metadata_attestations(record: Any) -> list[Any]:
    if not isinstance(record, dict):
        return []
    dist = record.get("dist")
    attestations = dist.get("attestations") if isinstance(dist, dict) else None
    if not attestations:
        return []
    return attestations if isinstance(attestations, list) else [attestations]


def get_provenance_details(
    name: str,
    version: str,
    cache: MutableMapping[str, ProvenanceDetails],
    *,
    client: RegistryClient,
) -> ProvenanceDetails:
    """Return the repository, ref and branch attested for ``name@version``."""
    key = cache_key(name, version)
    if key in cache:
        return cache[key]

    details = NO_PROVENANCE
    for url in client.attestation_urls(name, version):
        result = client.fetch_json(url)
        if result.status is FetchStatus.NOT_FOUND:
            cache[key] = NO_PROVENANCE
            return NO_PROVENANCE
        if not result.ok:
            continue
        attestations = _get_list(result.payload, "attestations")
        if attestations:
            details = _details_from(attestations)
            break

    if not details.has:
        result = client.fetch_version_metadata(name, version)
        attestations = _metadata_attestations(result.payload) if result.ok else []
        if attestations:
            details = _details_from(attestations)

    logger.debug("Provenance details for %s: %s", key, details.to_dict())
    cache[key] = details
    return details


def _get_list(payload: Any, key: str) -> list[Any]:
    value = payload.get(key) if isinstance(payload, dict) else None
    return value if isinstance(value, list) else []


def _is_trusted_publisher(record: Any) -> bool:
    user = record.get("_npmUser") if isinstance(record, dict) else None
    if not isinstance(user, dict):
        return False
    if user.get("trustedPublisher"):
        return True
    return user.get("name") == GITHUB_ACTIONS_PUBLISHER and user.get("email") == GITHUB_OIDC_EMAIL


def has_trusted_publisher(
    name: str,
    version: str,
    cache: MutableMapping[str, bool],
    *,
    client: RegistryClient,
) -> bool:
    """Return whether ``name@version`` was published through OIDC trusted publishing."""
    key = cache_key(name, version)
    if key in cache:
        return cache[key]
    result = client.fetch_version_metadata(name, version)
    cache[key] = result.ok and _is_trusted_publisher(result.payload)
    return cache[key]
