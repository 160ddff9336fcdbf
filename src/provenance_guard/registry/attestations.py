"""Extract the source repository and ref attested by a provenance statement.

Attestation payloads come in several shapes (SLSA v1 ``buildDefinition``,
SLSA v0.2 ``invocation.configSource``, Sigstore bundles wrapping a DSSE
envelope). Each shape has its own lookup; ``extract_repo_and_ref`` tries them
in priority order and merges the first values found.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any, NamedTuple
from urllib.parse import urlsplit

_OWNER_REPO = re.compile(r"^[^\s/]+/[^\s/]+$")
_GITHUB_URI_HOSTS = {"github.com", "www.github.com"}
_HEADS_PREFIX = "refs/heads/"


class RepoRef(NamedTuple):
    repository: str | None = None
    ref: str | None = None


def _get(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _first(data: Any, *keys: str) -> Any:
    """Return the first truthy value among alternative keys of ``data``."""
    for key in keys:
        value = _get(data, key)
        if value:
            return value
    return None


def _strip_git_suffix(path: str) -> str:
    return path[:-4] if path.endswith(".git") else path


def _decode_dsse_payload(attestation: Any) -> Any:
    payload = _get(attestation, "bundle", "dsseEnvelope", "payload")
    if not isinstance(payload, str):
        return None
    try:
        return json.loads(base64.b64decode(payload))
    except (binascii.Error, ValueError):
        return None


def _predicate(attestation: Any) -> dict[str, Any]:
    statement = (
        _first(attestation, "statement", "envelope")
        or _decode_dsse_payload(attestation)
        or attestation
    )
    predicate = _get(statement, "predicate") or _get(attestation, "predicate")
    return predicate if isinstance(predicate, dict) else {}


def _build_definition(predicate: dict[str, Any]) -> dict[str, Any]:
    build = _first(predicate, "buildDefinition", "buildConfig", "build")
    return build if isinstance(build, dict) else {}


def _from_workflow(predicate: dict[str, Any]) -> RepoRef:
    external = _first(_build_definition(predicate), "externalParameters", "externalParametersJSON")
    workflow = _get(external, "workflow") or _get(external, "github", "workflow")
    repository = _get(workflow, "repository")
    ref = _get(workflow, "ref")
    return RepoRef(
        normalize_repository(repository) if isinstance(repository, str) else None,
        ref if isinstance(ref, str) else None,
    )


def _from_config_source(predicate: dict[str, Any]) -> RepoRef:
    uri = _get(predicate, "invocation", "configSource", "uri")
    if not isinstance(uri, str):
        return RepoRef()
    return parse_repo_ref_from_uri(uri) or RepoRef()


def _from_resolved_dependencies(predicate: dict[str, Any]) -> RepoRef:
    dependencies = _get(_build_definition(predicate), "resolvedDependencies")
    if not isinstance(dependencies, list):
        return RepoRef()
    for dependency in dependencies:
        uri = _get(dependency, "uri")
        parsed = parse_repo_ref_from_uri(uri) if isinstance(uri, str) else None
        if parsed and parsed.repository:
            return RepoRef(parsed.repository)
    return RepoRef()


def extract_repo_and_ref(attestation: Any) -> RepoRef:
    """Return the repository (``owner/repo``) and ref an attestation points at."""
    predicate = _predicate(attestation)
    repository, ref = _from_workflow(predicate)
    if not repository or not ref:
        parsed = _from_config_source(predicate)
        repository = repository or parsed.repository
        ref = ref or parsed.ref
    if not repository:
        repository = _from_resolved_dependencies(predicate).repository
    return RepoRef(repository, ref)


def normalize_repository(repo: str) -> str:
    """Reduce a repository reference to ``owner/repo`` when it names GitHub.

    Values that are neither a bare ``owner/repo`` nor a GitHub URL are returned
    unchanged.
    """
    if _OWNER_REPO.match(repo):
        return _strip_git_suffix(repo)
    url = repo[4:] if repo.startswith("git+") else repo
    try:
        parts = urlsplit(url)
        host = parts.hostname or ""
    except ValueError:
        return repo
    if host == "github.com" or host.endswith(".github.com"):
        segments = [s for s in _strip_git_suffix(parts.path).split("/") if s]
        if len(segments) >= 2:
            return f"{segments[0]}/{segments[1]}"
    return repo


def parse_repo_ref_from_uri(uri: str) -> RepoRef | None:
    """Parse ``git+https://github.com/owner/repo[.git][@ref]``.

    Returns None for non-GitHub hosts and URIs without an owner and a repo.
    """
    cleaned = uri[4:] if uri.startswith("git+") else uri
    ref: str | None = None
    repo_url = cleaned
    at = cleaned.rfind("@")
    if at > cleaned.find("://") + 2:
        repo_url, ref = cleaned[:at], cleaned[at + 1 :]
    try:
        parts = urlsplit(repo_url)
        host = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or host not in _GITHUB_URI_HOSTS:
        return None
    segments = [s for s in _strip_git_suffix(parts.path).split("/") if s]
    if len(segments) < 2:
        return None
    return RepoRef(f"{segments[0]}/{segments[1]}", ref)


def normalize_ref_to_branch(ref: str | None) -> str | None:
    """Return the branch of a ``refs/heads/...`` ref; tags and SHAs have none."""
    if not isinstance(ref, str) or not ref.startswith(_HEADS_PREFIX):
        return None
    return ref[len(_HEADS_PREFIX) :]
