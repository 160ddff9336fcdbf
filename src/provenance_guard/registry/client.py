"""HTTP access to the npm registry attestation and metadata endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import quote

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
REQUEST_TIMEOUT = 30.0
RETRY_ATTEMPTS = 3
RETRY_WAIT_SECONDS = 1.0

USER_AGENT = "provenance-guard (+https://github.com/features/actions)"

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Outcome of a registry request.

    ``NOT_FOUND`` is a definitive answer from the registry; ``ERROR`` covers
    everything inconclusive (transport failures, timeouts, other non-2xx
    statuses and bodies that are not JSON).
    """

    status: FetchStatus
    payload: Any = None
    status_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK


def _encode(value: str) -> str:
    return quote(value, safe="")


class RegistryClient:
    """Fetch JSON documents from an npm registry.

    Transport failures are retried with ``tenacity``; the package metadata
    document is fetched once per package for the lifetime of the client.
    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        *,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        attempts: int = RETRY_ATTEMPTS,
        retry_wait: float = RETRY_WAIT_SECONDS,
    ) -> None:
        self.registry_url = registry_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.attempts = max(1, attempts)
        self.retry_wait = retry_wait
        self._metadata: dict[str, FetchResult] = {}

    def attestation_urls(self, name: str, version: str) -> list[str]:
        spec = f"{_encode(name)}@{_encode(version)}"
        return [
            f"{self.registry_url}/-/npm/v1/attestations/{spec}",
            f"{self.registry_url}/-/v1/attestations/{spec}",
        ]

    def metadata_url(self, name: str) -> str:
        return f"{self.registry_url}/{_encode(name)}"

    def _get(self, url: str) -> requests.Response:
        @retry(
            reraise=True,
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        )
        def _attempt() -> requests.Response:
            return self.session.get(
                url,
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                timeout=self.timeout,
            )

        return _attempt()

    def fetch_json(self, url: str) -> FetchResult:
        """GET ``url`` and classify the response."""
        logger.debug("GET %s", url)
        try:
            response = self._get(url)
        except requests.RequestException as exc:
            logger.debug("Request to %s failed: %s", url, exc)
            return FetchResult(FetchStatus.ERROR, error=str(exc))

        status_code = response.status_code
        if status_code == 404:
            logger.debug("Not found: %s", url)
            return FetchResult(FetchStatus.NOT_FOUND, status_code=status_code)
        if status_code < 200 or status_code >= 300:
            logger.debug("HTTP %s for %s", status_code, url)
            return FetchResult(
                FetchStatus.ERROR, status_code=status_code, error=f"HTTP {status_code} for {url}"
            )

        if not response.text:
            return FetchResult(FetchStatus.OK, payload={}, status_code=status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            logger.debug("Invalid JSON from %s: %s", url, exc)
            return FetchResult(FetchStatus.ERROR, status_code=status_code, error=str(exc))
        return FetchResult(FetchStatus.OK, payload=payload, status_code=status_code)

    def fetch_package_metadata(self, name: str) -> FetchResult:
        cached = self._metadata.get(name)
        if cached is not None:
            return cached
        result = self.fetch_json(self.metadata_url(name))
        if result.ok:
            self._metadata[name] = result
        return result

    def fetch_version_metadata(self, name: str, version: str) -> FetchResult:
        """Return the registry record of ``name@version``.

        The payload is None when the package document has no such version.
        """
        result = self.fetch_package_metadata(name)
        if not result.ok:
            return result
        document = result.payload if isinstance(result.payload, dict) else {}
        versions = document.get("versions")
        record = versions.get(version) if isinstance(versions, dict) else None
        return FetchResult(
            FetchStatus.OK,
            payload=record if isinstance(record, dict) else None,
            status_code=result.status_code,
        )
