"""Settings loader for a provenance check.

Settings come from GitHub Action inputs (``INPUT_<NAME>`` environment
variables) with fallbacks to the runner environment:

- ``workspace-path``: checkout to inspect (``GITHUB_WORKSPACE``, then ``.``)
- ``lockfile``: lockfile path relative to the workspace (auto-detected)
- ``base-ref``: ref holding the previous lockfile (``GITHUB_BASE_REF``)
- ``fail-on-downgrade``: ``true``/``any`` (default), ``only-provenance-loss``
  or ``false``
- ``fail-on-provenance-change``: boolean, default false
- ``registry-url``: npm registry (``PROVENANCE_GUARD_REGISTRY_URL``)
- ``request-timeout`` / ``retries``: per-request timeout and attempt count
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from .github import get_input
from .models import DowngradeEvent, DowngradeType
from .registry.client import DEFAULT_REGISTRY_URL, REQUEST_TIMEOUT, RETRY_ATTEMPTS

REGISTRY_URL_ENV_VAR = "PROVENANCE_GUARD_REGISTRY_URL"

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"", "0", "false", "no", "n", "off"}


class ConfigError(RuntimeError):
    """Raised when an input value is invalid."""


class FailPolicy(str, Enum):
    """Which downgrade events fail the check."""

    ANY = "any"
    PROVENANCE_LOSS = "only-provenance-loss"
    NEVER = "false"

    @classmethod
    def parse(cls, value: str | None) -> FailPolicy:
        normalised = (value or "").strip().lower()
        if normalised in {"", "true", "any"}:
            return cls.ANY
        if normalised == cls.PROVENANCE_LOSS.value:
            return cls.PROVENANCE_LOSS
        if normalised == "false":
            return cls.NEVER
        raise ConfigError(
            f"Invalid fail-on-downgrade value '{value}' "
            "(expected true, any, only-provenance-loss or false)"
        )

    def fails_on(self, event: DowngradeEvent) -> bool:
        if self is FailPolicy.ANY:
            return True
        if self is FailPolicy.PROVENANCE_LOSS:
            return event.downgrade_type is DowngradeType.PROVENANCE
        return False


@dataclass(slots=True, frozen=True)
class Settings:
    """Top-level settings container."""

    workspace_path: Path = Path(".")
    lockfile: str | None = None
    base_ref: str | None = None
    fail_on_downgrade: FailPolicy = FailPolicy.ANY
    fail_on_provenance_change: bool = False
    registry_url: str = DEFAULT_REGISTRY_URL
    request_timeout: float = REQUEST_TIMEOUT
    retries: int = RETRY_ATTEMPTS

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise ConfigError("request-timeout must be a positive number of seconds")
        if self.retries < 1:
            raise ConfigError("retries must be at least 1")
        if not self.registry_url.startswith(("http://", "https://")):
            raise ConfigError(f"registry-url must be an http(s) URL, got '{self.registry_url}'")

    def with_overrides(self, **overrides: object) -> Settings:
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _parse_bool(name: str, value: str | None) -> bool:
    normalised = (value or "").strip().lower()
    if normalised in _TRUE_VALUES:
        return True
    if normalised in _FALSE_VALUES:
        return False
    raise ConfigError(f"Input '{name}' must be a boolean, got '{value}'")


def _parse_number(name: str, value: str | None, kind: type, default):
    if value is None or not value.strip():
        return default
    try:
        return kind(value.strip())
    except ValueError as exc:
        raise ConfigError(f"Input '{name}' must be a number, got '{value}'") from exc


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from action inputs and the runner environment.

    Raises:
        ConfigError: If an input cannot be interpreted.
    """
    env = os.environ if environ is None else environ

    def read(name: str) -> str | None:
        return get_input(name, env)

    workspace = _blank_to_none(read("workspace-path")) or env.get("GITHUB_WORKSPACE") or "."
    registry_url = (
        _blank_to_none(read("registry-url"))
        or _blank_to_none(env.get(REGISTRY_URL_ENV_VAR))
        or DEFAULT_REGISTRY_URL
    )

    return Settings(
        workspace_path=Path(workspace),
        lockfile=_blank_to_none(read("lockfile")),
        base_ref=_blank_to_none(read("base-ref")) or _blank_to_none(env.get("GITHUB_BASE_REF")),
        fail_on_downgrade=FailPolicy.parse(read("fail-on-downgrade")),
        fail_on_provenance_change=_parse_bool(
            "fail-on-provenance-change", read("fail-on-provenance-change")
        ),
        registry_url=registry_url,
        request_timeout=_parse_number(
            "request-timeout", read("request-timeout"), float, REQUEST_TIMEOUT
        ),
        retries=_parse_number("retries", read("retries"), int, RETRY_ATTEMPTS),
    )
