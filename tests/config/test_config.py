from __future__ import annotations

import logging

import pytest

from chartsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_bool,
    env_int,
    get_sync_config,
    parse_source_selection,
    parse_tag_order,
    require_env_vars,
)
from chartsync.config.logging import get_log_level
from chartsync.domain.model import TagOrder

_SYNC_VARS = (
    "CHART_PROVIDER_ID",
    "IS_OCI_REGISTRY",
    "APP_STORE_APPLICATION_VERSIONS_SAVE_CHUNK_SIZE",
    "PARALLELISM_LIMIT_FOR_TAG_PROCESSING",
    "OCI_TAG_ORDER",
    "INACTIVATE_MISSING_CHART_REPO_APPS",
    "REPAIR_LATEST_ON_UNCHANGED",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _SYNC_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_raises_for_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLANK_VAR", "   ")
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR", "BLANK_VAR"])

    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)


@pytest.mark.parametrize(("raw", "expected"), [("true", True), ("0", False), ("Yes", True)])
def test_env_bool_parses_common_spellings(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("FLAG", raw)

    assert env_bool("FLAG", not expected) is expected


def test_env_bool_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG", "maybe")

    with pytest.raises(ConfigurationError):
        env_bool("FLAG", False)


def test_env_int_enforces_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COUNT", "-1")

    with pytest.raises(ConfigurationError, match="COUNT must be >= 0"):
        env_int("COUNT", 5, minimum=0)


def test_parse_source_selection_wildcard_selects_everything() -> None:
    assert parse_source_selection("*", is_oci_registry=True).select_all
    assert parse_source_selection("", is_oci_registry=False).select_all


def test_parse_source_selection_single_sources() -> None:
    oci = parse_source_selection("ghcr", is_oci_registry=True)
    repo = parse_source_selection(" 12 ", is_oci_registry=False)

    assert oci.oci_registry_id == "ghcr"
    assert oci.chart_repo_id is None
    assert repo.chart_repo_id == 12
    assert repo.oci_registry_id is None


def test_parse_source_selection_rejects_non_numeric_repo_id() -> None:
    with pytest.raises(ConfigurationError, match="Invalid chart repository id"):
        parse_source_selection("abc", is_oci_registry=False)


def test_parse_tag_order() -> None:
    assert parse_tag_order("Semver") is TagOrder.SEMVER

    with pytest.raises(ConfigurationError, match="OCI_TAG_ORDER"):
        parse_tag_order("alphabetical")


def test_get_sync_config_defaults(clean_env: pytest.MonkeyPatch) -> None:
    config = get_sync_config()

    assert config.selection.select_all
    assert config.options.chunk_size == 20
    assert config.options.parallelism_limit == 0
    assert config.options.oci_tag_order is TagOrder.REGISTRY
    assert not config.options.inactivate_missing_chart_repo_apps
    assert not config.options.repair_latest_on_unchanged


def test_get_sync_config_reads_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CHART_PROVIDER_ID", "3")
    clean_env.setenv("IS_OCI_REGISTRY", "false")
    clean_env.setenv("APP_STORE_APPLICATION_VERSIONS_SAVE_CHUNK_SIZE", "50")
    clean_env.setenv("PARALLELISM_LIMIT_FOR_TAG_PROCESSING", "4")
    clean_env.setenv("INACTIVATE_MISSING_CHART_REPO_APPS", "true")

    config = get_sync_config()

    assert config.selection.chart_repo_id == 3
    assert config.options.chunk_size == 50
    assert config.options.parallelism_limit == 4
    assert config.options.inactivate_missing_chart_repo_apps


def test_get_sync_config_rejects_zero_chunk_size(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("APP_STORE_APPLICATION_VERSIONS_SAVE_CHUNK_SIZE", "0")

    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_log_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert get_log_level() == logging.DEBUG

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ConfigurationError, match="Unknown LOG_LEVEL"):
        get_log_level()
