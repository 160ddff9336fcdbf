"""Shared fixtures: lockfile samples and a fake registry session."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from provenance_guard.registry import RegistryClient

FIXTURES = Path(__file__).parent / "fixtures"
REGISTRY = "https://registry.npmjs.org"


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        if body is None:
            self.text = ""
        elif isinstance(body, str):
            self.text = body
        else:
            self.text = json.dumps(body)

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Answer GET requests from a URL -> response map; unknown URLs are 404."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append(url)
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return FakeResponse(404, "not found")
        return route


def attestation_url(name: str, version: str, legacy: bool = False) -> str:
    prefix = "-/v1/attestations" if legacy else "-/npm/v1/attestations"
    encoded = name.replace("@", "%40").replace("/", "%2F")
    return f"{REGISTRY}/{prefix}/{encoded}@{version}"


def metadata_url(name: str) -> str:
    return f"{REGISTRY}/" + name.replace("@", "%40").replace("/", "%2F")


def config_source_attestation(uri: str) -> dict:
    return {"predicate": {"invocation": {"configSource": {"uri": uri}}}}


@pytest.fixture
def read_fixture():
    def _read(relative: str) -> str:
        return (FIXTURES / relative).read_text(encoding="utf-8")

    return _read


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return RegistryClient(REGISTRY, session=session, attempts=1, retry_wait=0)
