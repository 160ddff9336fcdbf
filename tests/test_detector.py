"""Tests for downgrade detection over package changes."""

from provenance_guard.detector import detect_downgrades
from provenance_guard.models import ChangeType, DowngradeType, PackageChange
from provenance_guard.registry import ProvenanceCaches

from conftest import FakeResponse, attestation_url, config_source_attestation, metadata_url

TRUSTED = {"_npmUser": {"name": "GitHub Actions", "email": "npm-oidc-no-reply@github.com"}}
MAINTAINER = {"_npmUser": {"name": "maintainer", "email": "maintainer@example.com"}}


def attested(uri="git+https://github.com/acme/pkg@refs/heads/main"):
    return FakeResponse(200, {"attestations": [config_source_attestation(uri)]})


def publish(session, name, versions):
    """Register ``version -> (attestation response or None, metadata record)``."""
    records = {}
    for version, (attestation, record) in versions.items():
        if attestation is not None:
            session.routes[attestation_url(name, version)] = attestation
        records[version] = record
    session.routes[metadata_url(name)] = FakeResponse(200, {"versions": records})


def change(name, previous, current):
    return PackageChange.from_iterables(name, previous, current)


def test_lost_provenance(client, session):
    publish(session, "lodash", {"4.17.21": (attested(), MAINTAINER), "4.17.22": (None, MAINTAINER)})

    result = detect_downgrades([change("lodash", {"4.17.21"}, {"4.17.22"})], client=client)

    assert [e.to_dict() for e in result.events] == [
        {"name": "lodash", "from": "4.17.21", "to": "4.17.22", "downgradeType": "provenance"}
    ]
    assert result.warnings == []


def test_lost_trusted_publisher_but_kept_provenance(client, session):
    publish(session, "pkg", {"1.0.0": (attested(), TRUSTED), "1.1.0": (attested(), MAINTAINER)})

    result = detect_downgrades([change("pkg", {"1.0.0"}, {"1.1.0"})], client=client)

    assert len(result.events) == 1
    event = result.events[0]
    assert event.downgrade_type is DowngradeType.TRUSTED_PUBLISHER
    assert (event.from_version, event.to_version, event.kept_provenance) == ("1.0.0", "1.1.0", True)
    assert result.warnings == []


def test_lost_both_signals(client, session):
    publish(session, "pkg", {"1.0.0": (attested(), TRUSTED), "1.1.0": (None, MAINTAINER)})

    result = detect_downgrades([change("pkg", {"1.0.0"}, {"1.1.0"})], client=client)

    assert [e.downgrade_type for e in result.events] == [
        DowngradeType.TRUSTED_PUBLISHER,
        DowngradeType.PROVENANCE,
    ]
    assert result.events[0].kept_provenance is False


def test_repository_change(client, session):
    publish(
        session,
        "pkg",
        {
            "1.0.0": (attested("git+https://github.com/acme/pkg@refs/heads/main"), MAINTAINER),
            "1.1.0": (attested("git+https://github.com/evil/pkg@refs/heads/main"), MAINTAINER),
        },
    )

    result = detect_downgrades([change("pkg", {"1.0.0"}, {"1.1.0"})], client=client)

    assert result.events == []
    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert warning.type is ChangeType.REPO_CHANGED
    assert (warning.prev_repo, warning.new_repo) == ("acme/pkg", "evil/pkg")


def test_branch_change(client, session):
    publish(
        session,
        "pkg",
        {
            "1.0.0": (attested("git+https://github.com/acme/pkg@refs/heads/main"), MAINTAINER),
            "1.1.0": (attested("git+https://github.com/acme/pkg@refs/heads/hotfix"), MAINTAINER),
        },
    )

    result = detect_downgrades([change("pkg", {"1.0.0"}, {"1.1.0"})], client=client)

    assert [w.to_dict() for w in result.warnings] == [
        {
            "name": "pkg",
            "from": "1.0.0",
            "to": "1.1.0",
            "type": "branch_changed",
            "previousRepository": None,
            "newRepository": None,
            "previousBranch": "main",
            "newBranch": "hotfix",
        }
    ]


def test_tag_builds_do_not_warn_about_branches(client, session):
    publish(
        session,
        "pkg",
        {
            "1.0.0": (attested("git+https://github.com/acme/pkg@refs/heads/main"), MAINTAINER),
            "1.1.0": (attested("git+https://github.com/acme/pkg@refs/tags/v1.1.0"), MAINTAINER),
        },
    )

    result = detect_downgrades([change("pkg", {"1.0.0"}, {"1.1.0"})], client=client)

    assert result.events == []
    assert result.warnings == []


def test_most_recent_previous_version_is_reported(client, session):
    publish(
        session,
        "pkg",
        {
            "1.9.0": (attested(), MAINTAINER),
            "1.10.0": (attested(), MAINTAINER),
            "2.0.0": (None, MAINTAINER),
        },
    )

    result = detect_downgrades([change("pkg", {"1.9.0", "1.10.0"}, {"2.0.0"})], client=client)

    assert [(e.from_version, e.to_version) for e in result.events] == [("1.10.0", "2.0.0")]


def test_one_event_per_new_version_in_version_order(client, session):
    publish(
        session,
        "pkg",
        {
            "1.0.0": (attested(), MAINTAINER),
            "1.2.0": (None, MAINTAINER),
            "1.1.0": (None, MAINTAINER),
        },
    )

    result = detect_downgrades([change("pkg", {"1.0.0"}, {"1.0.0", "1.2.0", "1.1.0"})], client=client)

    assert [e.to_version for e in result.events] == ["1.1.0", "1.2.0"]


def test_additions_and_removals_are_skipped(client, session):
    changes = [change("new", set(), {"1.0.0"}), change("gone", {"1.0.0"}, set())]

    result = detect_downgrades(changes, client=client)

    assert not result.has_downgrades
    assert not result.has_changes
    assert session.calls == []


def test_results_are_grouped_by_package_order(client, session):
    for name in ("b", "a"):
        publish(session, name, {"1.0.0": (attested(), MAINTAINER), "2.0.0": (None, MAINTAINER)})

    result = detect_downgrades(
        [change("b", {"1.0.0"}, {"2.0.0"}), change("a", {"1.0.0"}, {"2.0.0"})], client=client
    )

    assert [e.name for e in result.events] == ["b", "a"]


def test_caches_are_filled_and_reused(client, session):
    publish(session, "lodash", {"4.17.21": (attested(), MAINTAINER), "4.17.22": (None, MAINTAINER)})
    caches = ProvenanceCaches()
    changes = [change("lodash", {"4.17.21"}, {"4.17.22"})]

    detect_downgrades(changes, client=client, caches=caches)
    calls = len(session.calls)
    detect_downgrades(changes, client=client, caches=caches)

    assert caches.provenance == {"lodash@4.17.22": False, "lodash@4.17.21": True}
    assert set(caches.trusted_publisher) == {"lodash@4.17.21", "lodash@4.17.22"}
    assert caches.details == {}
    assert len(session.calls) == calls
