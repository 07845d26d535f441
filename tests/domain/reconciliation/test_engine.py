from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, cast

import pytest

from chartsync.domain.model import CatalogVersion, TagOrder
from chartsync.domain.reconciliation import (
    ReconciliationEngine,
    ReconciliationOptions,
    SourceSelection,
    SyncReport,
)
from tests.helpers.catalog import (
    FakeArtifactSource,
    FakeArtifactSources,
    FakeStore,
    FakeUnitOfWork,
    make_chart_repo,
    make_oci_registry,
)
from tests.helpers.charts import listed

if TYPE_CHECKING:
    from chartsync.domain.model import ChartArtifact

NOW = datetime(2026, 3, 1, 12, tzinfo=UTC)


def _run(
    store: FakeStore,
    sources: FakeArtifactSources,
    options: ReconciliationOptions | None = None,
    selection: SourceSelection | None = None,
) -> SyncReport:
    engine = ReconciliationEngine(
        unit_of_work_factory=lambda: FakeUnitOfWork(store),
        artifact_sources=sources,
        options=options,
        clock=lambda: NOW,
    )
    return asyncio.run(engine.run(selection))


def _http_listing() -> dict[str, list[CatalogVersion]]:
    return {
        "nginx": [
            CatalogVersion(version="2.0.0", created=datetime(2026, 1, 1, tzinfo=UTC)),
            CatalogVersion(version="1.5.0", created=datetime(2026, 2, 1, tzinfo=UTC)),
            CatalogVersion(version="1.0.0", created=datetime(2025, 6, 1, tzinfo=UTC)),
        ]
    }


def test_chart_repo_versions_are_persisted_and_latest_is_most_recently_created() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    source = FakeArtifactSource(_http_listing())

    report = _run(store, FakeArtifactSources({repo.ref: source}))

    application = store.application("nginx")
    assert sorted(r.version for r in store.versions_of(application)) == ["1.0.0", "1.5.0", "2.0.0"]
    assert store.latest_versions("nginx") == ["1.5.0"]
    assert report.inserted == 3
    assert report.sources[0].applications[0].latest == "1.5.0"
    assert source.entered == source.exited == 1


def test_second_run_without_new_versions_writes_nothing() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    sources = FakeArtifactSources({repo.ref: FakeArtifactSource(_http_listing())})
    _run(store, sources)
    saves, updates = list(store.save_calls), store.version_updates

    report = _run(store, sources)

    assert store.save_calls == saves
    assert store.version_updates == updates
    assert report.inserted == 0
    assert report.sources[0].applications[0].new_versions == 0
    assert store.latest_versions("nginx") == ["1.5.0"]


def test_new_version_moves_latest_flag() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    listing = _http_listing()
    source = FakeArtifactSource(listing)
    sources = FakeArtifactSources({repo.ref: source})
    _run(store, sources)

    listing["nginx"].insert(
        0, CatalogVersion(version="2.1.0", created=datetime(2026, 2, 20, tzinfo=UTC))
    )
    source.fetched.clear()
    _run(store, sources)

    assert source.fetched == [("nginx", "2.1.0")]
    assert store.latest_versions("nginx") == ["2.1.0"]


def test_versions_are_saved_in_chunks() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    source = FakeArtifactSource({"redis": listed("5", "4", "3", "2", "1")})

    _run(store, FakeArtifactSources({repo.ref: source}), ReconciliationOptions(chunk_size=2))

    assert store.save_calls == [2, 2, 1]


def test_failed_fetch_skips_only_that_version() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    source = FakeArtifactSource(
        {"redis": listed("3.0.0", "2.0.0", "1.0.0")}, failing={("redis", "2.0.0")}
    )

    report = _run(store, FakeArtifactSources({repo.ref: source}))

    versions = sorted(r.version for r in store.versions_of(store.application("redis")))
    assert versions == ["1.0.0", "3.0.0"]
    application_report = report.sources[0].applications[0]
    assert application_report.failed_versions == ["2.0.0"]
    assert application_report.ok


def test_missing_source_timestamp_falls_back_to_fetch_time() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    source = FakeArtifactSource(
        {"redis": [CatalogVersion(version="1.0.0", created=datetime(1, 1, 1, tzinfo=UTC))]}
    )

    _run(store, FakeArtifactSources({repo.ref: source}))

    (record,) = store.versions
    assert record.created == NOW


def test_oci_latest_is_first_listed_tag() -> None:
    registry = make_oci_registry(repositories="app")
    store = FakeStore(oci_registries=[registry])
    source = FakeArtifactSource({"app": listed("1.2.0", "2.0.0", "1.0.0")})

    _run(store, FakeArtifactSources({registry.ref: source}))

    assert store.latest_versions("app") == ["1.2.0"]


def test_oci_semver_order_picks_highest_tag() -> None:
    registry = make_oci_registry(repositories="app")
    store = FakeStore(oci_registries=[registry])
    source = FakeArtifactSource({"app": listed("1.2.0", "2.0.0", "latest", "1.0.0")})

    _run(
        store,
        FakeArtifactSources({registry.ref: source}),
        ReconciliationOptions(oci_tag_order=TagOrder.SEMVER),
    )

    assert store.latest_versions("app") == ["2.0.0"]


def test_bounded_parallel_fetch_respects_limit() -> None:
    registry = make_oci_registry(repositories="app")
    store = FakeStore(oci_registries=[registry])
    tags = [f"1.0.{patch}" for patch in range(10)]
    source = FakeArtifactSource({"app": listed(*tags)}, delay=0.01)

    report = _run(
        store,
        FakeArtifactSources({registry.ref: source}),
        ReconciliationOptions(parallelism_limit=3, chunk_size=4),
    )

    assert source.max_in_flight == 3
    assert len(source.fetched) == 10
    assert sorted(r.version for r in store.versions) == sorted(tags)
    assert sum(store.save_calls) == 10
    assert report.sources[0].applications[0].inserted == 10
    assert store.latest_versions("app") == ["1.0.0"]


def test_chart_repos_are_fetched_sequentially_even_with_parallelism() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    source = FakeArtifactSource({"redis": listed("3", "2", "1")}, delay=0.01)

    _run(
        store,
        FakeArtifactSources({repo.ref: source}),
        ReconciliationOptions(parallelism_limit=3),
    )

    assert source.max_in_flight == 1
    assert source.fetched == [("redis", "3"), ("redis", "2"), ("redis", "1")]


def test_unfetchable_latest_tag_fails_application_after_persisting_others() -> None:
    registry = make_oci_registry(repositories="app,db")
    store = FakeStore(oci_registries=[registry])
    source = FakeArtifactSource(
        {"app": listed("2.0.0", "1.0.0"), "db": listed("9.0.0")},
        failing={("app", "2.0.0")},
    )

    report = _run(store, FakeArtifactSources({registry.ref: source}))

    app_report, db_report = report.sources[0].applications
    assert app_report.error is not None
    assert [r.version for r in store.versions_of(store.application("app"))] == ["1.0.0"]
    assert store.latest_versions("app") == []
    assert db_report.ok
    assert store.latest_versions("db") == ["9.0.0"]


def test_persistence_failure_is_contained_to_the_application() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    source = FakeArtifactSource({"broken": listed("1.0.0"), "fine": listed("1.0.0")})
    store.fail_save_for.add(1)

    report = _run(store, FakeArtifactSources({repo.ref: source}))

    broken, fine = report.sources[0].applications
    assert broken.error is not None
    assert "database is locked" in broken.error
    assert fine.ok
    assert store.latest_versions("fine") == ["1.0.0"]
    assert store.rollbacks >= 1


def test_listing_failure_is_contained_to_the_source() -> None:
    broken_repo = make_chart_repo(1, "broken")
    repo = make_chart_repo(2, "stable")
    store = FakeStore(chart_repos=[broken_repo, repo])
    sources = FakeArtifactSources(
        {
            broken_repo.ref: FakeArtifactSource({}, listing_error=True),
            repo.ref: FakeArtifactSource({"redis": listed("1.0.0")}),
        }
    )

    report = _run(store, sources)

    assert [source.ok for source in report.sources] == [False, True]
    assert len(report.failed_sources) == 1
    assert store.latest_versions("redis") == ["1.0.0"]


def test_oci_registries_are_reconciled_before_chart_repos() -> None:
    repo = make_chart_repo()
    registry = make_oci_registry(repositories="app")
    store = FakeStore(chart_repos=[repo], oci_registries=[registry])
    sources = FakeArtifactSources(
        {
            repo.ref: FakeArtifactSource({"redis": listed("1.0.0")}),
            registry.ref: FakeArtifactSource({"app": listed("1.0.0")}),
        }
    )

    _run(store, sources)

    assert sources.requested == [registry.ref, repo.ref]


def test_single_source_selection() -> None:
    repo = make_chart_repo(1, "stable")
    other = make_chart_repo(2, "incubator")
    store = FakeStore(chart_repos=[repo, other])
    sources = FakeArtifactSources(
        {
            repo.ref: FakeArtifactSource({"redis": listed("1.0.0")}),
            other.ref: FakeArtifactSource({"kafka": listed("1.0.0")}),
        }
    )

    _run(store, sources, selection=SourceSelection(chart_repo_id=2))

    assert sources.requested == [other.ref]
    assert [app.name for app in store.applications] == ["kafka"]


def test_removed_oci_repository_is_deactivated_and_later_reactivated() -> None:
    registry = make_oci_registry(repositories="app,db")
    store = FakeStore(oci_registries=[registry])
    source = FakeArtifactSource({"app": listed("1.0.0"), "db": listed("1.0.0")})
    sources = FakeArtifactSources({registry.ref: source})
    _run(store, sources)
    db_id = store.application("db").id

    registry.repository_list = "app"
    source.listing = {"app": listed("1.0.0")}
    report = _run(store, sources)

    assert report.sources[0].inactivated == ["db"]
    assert not store.application("db").active
    assert store.application("app").active

    registry.repository_list = "app, db"
    source.listing = {"app": listed("1.0.0"), "db": listed("1.0.0")}
    _run(store, sources)

    assert store.application("db").active
    assert store.application("db").id == db_id
    assert len(store.applications) == 2


def test_chart_repo_apps_are_only_deactivated_when_enabled() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    source = FakeArtifactSource({"redis": listed("1.0.0"), "kafka": listed("1.0.0")})
    sources = FakeArtifactSources({repo.ref: source})
    _run(store, sources)

    source.listing = {"redis": listed("1.0.0")}
    _run(store, sources)
    assert store.application("kafka").active

    _run(store, sources, ReconciliationOptions(inactivate_missing_chart_repo_apps=True))
    assert not store.application("kafka").active


def test_duplicate_latest_flags_are_repaired_when_latest_is_recomputed() -> None:
    registry = make_oci_registry(repositories="app")
    store = FakeStore(oci_registries=[registry])
    source = FakeArtifactSource({"app": listed("2.0.0", "1.0.0")})
    sources = FakeArtifactSources({registry.ref: source})
    _run(store, sources)
    for record in store.versions:
        record.latest = True

    _run(store, sources, ReconciliationOptions(repair_latest_on_unchanged=True))

    assert store.latest_versions("app") == ["2.0.0"]


def test_unchanged_application_keeps_latest_untouched_by_default() -> None:
    registry = make_oci_registry(repositories="app")
    store = FakeStore(oci_registries=[registry])
    source = FakeArtifactSource({"app": listed("2.0.0", "1.0.0")})
    sources = FakeArtifactSources({registry.ref: source})
    _run(store, sources)
    for record in store.versions:
        record.latest = True
    updates = store.version_updates

    _run(store, sources)

    assert store.version_updates == updates
    assert store.latest_versions("app") == ["2.0.0", "1.0.0"]


@pytest.mark.parametrize("repositories", ["", " , "])
def test_registry_without_repository_list_is_skipped(repositories: str) -> None:
    registry = make_oci_registry(repositories=repositories)
    store = FakeStore(oci_registries=[registry])
    sources = FakeArtifactSources({})

    report = _run(store, sources)

    assert report.sources == []
    assert sources.requested == []


class MixedKeyChartSource(FakeArtifactSource):
    """Serves a Chart.yaml whose keys mix integers and strings for one version."""

    def __init__(self, listing: dict[str, list[CatalogVersion]], broken: str) -> None:
        super().__init__(listing)
        self.broken = broken

    async def fetch_artifact(self, name: str, version: CatalogVersion) -> ChartArtifact:
        artifact = await super().fetch_artifact(name, version)
        if version.version != self.broken:
            return artifact
        raw = cast("dict[str, object]", {1: "one", "name": name})
        return replace(artifact, metadata=replace(artifact.metadata, raw=raw))


def test_unusable_chart_metadata_skips_only_that_version() -> None:
    repo = make_chart_repo()
    store = FakeStore(chart_repos=[repo])
    source = MixedKeyChartSource({"redis": listed("3.0.0", "2.0.0", "1.0.0")}, broken="2.0.0")

    report = _run(store, FakeArtifactSources({repo.ref: source}))

    versions = sorted(r.version for r in store.versions_of(store.application("redis")))
    assert versions == ["1.0.0", "3.0.0"]
    assert source.fetched == [("redis", "3.0.0"), ("redis", "2.0.0"), ("redis", "1.0.0")]
    assert report.sources[0].applications[0].failed_versions == ["2.0.0"]
