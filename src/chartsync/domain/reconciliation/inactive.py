"""Soft deletion and reactivation of applications."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from chartsync.domain.model import Application

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import datetime

    from chartsync.domain.model import SourceRef
    from chartsync.domain.ports import ApplicationRepository

log = getLogger(__name__)


def deactivate_missing(
    applications: ApplicationRepository,
    ref: SourceRef,
    declared: Collection[str],
    *,
    now: datetime,
) -> list[Application]:
    """Flag every active application of ``ref`` not in ``declared`` as inactive."""

    wanted = set(declared)
    retired = [
        application
        for application in applications.find_by_source(ref)
        if application.active and application.name not in wanted
    ]
    if not retired:
        return []

    for application in retired:
        application.deactivate(now=now)
    applications.update(retired)
    log.info(
        "Marked %s applications of %s inactive: %s",
        len(retired),
        ref,
        ", ".join(sorted(application.name for application in retired)),
    )
    return retired


def resolve_application(
    applications: ApplicationRepository,
    ref: SourceRef,
    name: str,
    known: dict[str, Application],
    *,
    now: datetime,
) -> Application:
    """Return the stored application for ``name``, creating or reactivating it."""

    existing = known.get(name)
    if existing is not None and existing.active:
        return existing

    inactive = applications.find_inactive_by_name(ref, name)
    if inactive is not None:
        inactive.reactivate(now=now)
        applications.update([inactive])
        log.info("Reactivated application %s of %s", name, ref)
        known[name] = inactive
        return inactive

    created = applications.save(Application.for_source(ref, name, now=now))
    known[name] = created
    return created
