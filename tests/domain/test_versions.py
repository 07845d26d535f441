from __future__ import annotations

from chartsync.domain.versions import highest_version, parse_version, sort_newest_first


def test_parse_version_accepts_v_prefix() -> None:
    assert parse_version("v1.2.3") == parse_version("1.2.3")
    assert parse_version("latest") is None


def test_highest_version_ranks_unparseable_tags_last() -> None:
    assert highest_version(["latest", "1.9.0", "1.10.0", "1.10.0-rc.1"]) == "1.10.0"


def test_highest_version_falls_back_to_first_value() -> None:
    assert highest_version(["stable", "edge"]) == "stable"
    assert highest_version([]) is None


def test_sort_newest_first_keeps_unparseable_at_the_end() -> None:
    ordered = sort_newest_first(["0.1.0", "nightly", "2.0.0", "1.0.0"], key=str)

    assert ordered == ["2.0.0", "1.0.0", "0.1.0", "nightly"]
