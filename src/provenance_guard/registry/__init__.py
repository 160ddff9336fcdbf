"""npm registry access: attestation lookups and provenance resolution."""

from .attestations import (
    RepoRef,
    extract_repo_and_ref,
    normalize_ref_to_branch,
    normalize_repository,
    parse_repo_ref_from_uri,
)
from .client import DEFAULT_REGISTRY_URL, FetchResult, FetchStatus, RegistryClient
from .provenance import (
    ProvenanceCaches,
    Verdict,
    cache_key,
    get_provenance_details,
    has_provenance,
    has_trusted_publisher,
)

__all__ = [
    "DEFAULT_REGISTRY_URL",
    "FetchResult",
    "FetchStatus",
    "ProvenanceCaches",
    "RegistryClient",
    "RepoRef",
    "Verdict",
    "cache_key",
    "extract_repo_and_ref",
    "get_provenance_details",
    "has_provenance",
    "has_trusted_publisher",
    "normalize_ref_to_branch",
    "normalize_repository",
    "parse_repo_ref_from_uri",
]
