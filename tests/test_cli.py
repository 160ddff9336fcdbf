"""Tests for the command line entrypoint."""

import json

from provenance_guard import cli
from provenance_guard.config import FailPolicy
from provenance_guard.core import CheckResult


def test_flags_override_inputs(monkeypatch, tmp_path):
    seen = {}

    def run_check(settings):
        seen["settings"] = settings
        return CheckResult(exit_code=1, report={"version": "1"})

    monkeypatch.setenv("INPUT_BASE_REF", "origin/main")
    monkeypatch.setattr(cli, "run_check", run_check)
    report = tmp_path / "report.json"

    code = cli.main(
        [
            "--workspace",
            str(tmp_path),
            "--lockfile",
            "yarn.lock",
            "--fail-on-downgrade",
            "only-provenance-loss",
            "--report",
            str(report),
        ]
    )

    assert code == 1
    settings = seen["settings"]
    assert settings.workspace_path == tmp_path
    assert settings.lockfile == "yarn.lock"
    assert settings.base_ref == "origin/main"
    assert settings.fail_on_downgrade is FailPolicy.PROVENANCE_LOSS
    assert settings.fail_on_provenance_change is False
    assert json.loads(report.read_text(encoding="utf-8")) == {"version": "1"}


def test_invalid_configuration(monkeypatch):
    monkeypatch.setenv("INPUT_RETRIES", "zero")
    assert cli.main([]) == 2


def test_unexpected_errors_exit_with_failure(monkeypatch, caplog):
    def run_check(settings):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "run_check", run_check)
    assert cli.main([]) == 1
    assert "Provenance check failed" in caplog.text
