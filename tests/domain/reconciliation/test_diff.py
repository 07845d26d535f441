from __future__ import annotations

from chartsync.domain.reconciliation import new_versions
from tests.helpers.charts import listed


def test_new_versions_keeps_remote_order() -> None:
    fresh = new_versions(listed("3.0.0", "2.0.0", "1.0.0", "0.9.0"), {"2.0.0", "0.9.0"})

    assert [entry.version for entry in fresh] == ["3.0.0", "1.0.0"]


def test_new_versions_emits_duplicates_once() -> None:
    fresh = new_versions(listed("1.0.0", "1.0.0", "0.1.0"), set())

    assert [entry.version for entry in fresh] == ["1.0.0", "0.1.0"]


def test_new_versions_of_empty_listing_is_empty() -> None:
    assert new_versions([], {"1.0.0"}) == []


def test_nothing_new_when_everything_is_persisted() -> None:
    assert new_versions(listed("1.0.0", "2.0.0"), {"2.0.0", "1.0.0", "0.5.0"}) == []
