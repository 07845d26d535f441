"""Reconciliation settings read from the environment."""

from __future__ import annotations

from dataclasses import dataclass, field

from chartsync.domain.model import TagOrder
from chartsync.domain.reconciliation import ReconciliationOptions, SourceSelection

from .env import env_bool, env_int, env_str
from .errors import ConfigurationError

ALL_PROVIDERS = "*"
DEFAULT_CHUNK_SIZE = 20


@dataclass(frozen=True, slots=True)
class SyncConfig:
    selection: SourceSelection = field(default_factory=SourceSelection)
    options: ReconciliationOptions = field(default_factory=ReconciliationOptions)


def parse_source_selection(provider_id: str, *, is_oci_registry: bool) -> SourceSelection:
    """Interpret ``CHART_PROVIDER_ID`` / ``IS_OCI_REGISTRY``.

    ``*`` selects every provider. Otherwise the id names one OCI registry, or
    one chart repository whose id must be an integer.
    """

    value = provider_id.strip()
    if not value or value == ALL_PROVIDERS:
        return SourceSelection()
    if is_oci_registry:
        return SourceSelection(oci_registry_id=value)
    try:
        return SourceSelection(chart_repo_id=int(value))
    except ValueError as exc:
        raise ConfigurationError(f"Invalid chart repository id: {value!r}") from exc


def parse_tag_order(value: str) -> TagOrder:
    try:
        return TagOrder(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(order.value for order in TagOrder)
        raise ConfigurationError(f"OCI_TAG_ORDER must be one of {allowed}, got {value!r}") from exc


def get_sync_config() -> SyncConfig:
    selection = parse_source_selection(
        env_str("CHART_PROVIDER_ID", ALL_PROVIDERS),
        is_oci_registry=env_bool("IS_OCI_REGISTRY", True),
    )
    options = ReconciliationOptions(
        chunk_size=env_int(
            "APP_STORE_APPLICATION_VERSIONS_SAVE_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, minimum=1
        ),
        parallelism_limit=env_int("PARALLELISM_LIMIT_FOR_TAG_PROCESSING", 0, minimum=0),
        oci_tag_order=parse_tag_order(env_str("OCI_TAG_ORDER", TagOrder.REGISTRY.value)),
        inactivate_missing_chart_repo_apps=env_bool("INACTIVATE_MISSING_CHART_REPO_APPS", False),
        repair_latest_on_unchanged=env_bool("REPAIR_LATEST_ON_UNCHANGED", False),
    )
    return SyncConfig(selection=selection, options=options)
