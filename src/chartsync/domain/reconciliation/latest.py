"""Maintenance of the per-application latest version flag.

The flag is a soft invariant: at most one record per application should carry
it. It is always re-derived from persisted data, which also repairs any
duplicates left behind by earlier runs.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from chartsync.domain.errors import LatestPointerError
from chartsync.domain.model import SourceKind, TagOrder
from chartsync.domain.versions import highest_version

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from chartsync.domain.model import Application, VersionRecord
    from chartsync.domain.ports import VersionRepository

log = getLogger(__name__)


def latest_candidate(
    versions: VersionRepository,
    application: Application,
    *,
    remote_tags: Sequence[str] = (),
    tag_order: TagOrder = TagOrder.REGISTRY,
) -> VersionRecord:
    """Return the record that should carry the latest flag.

    Chart repositories pick the most recently created record. OCI registries
    pick the first tag as listed by the registry, or the highest semantic
    version with ``TagOrder.SEMVER``.
    """

    if application.id is None:
        raise LatestPointerError(f"Application {application.name!r} has not been persisted")

    if application.source_ref.kind is SourceKind.CHART_REPO:
        candidate = versions.find_most_recently_created(application.id)
        if candidate is None:
            raise LatestPointerError(f"No stored versions for {application.name!r}")
        return candidate

    if not remote_tags:
        raise LatestPointerError(f"No tags listed for {application.name!r}")
    tag = remote_tags[0] if tag_order is TagOrder.REGISTRY else highest_version(remote_tags)
    candidate = versions.find_by_application_and_version(application.id, tag) if tag else None
    if candidate is None:
        raise LatestPointerError(f"Latest tag {tag!r} of {application.name!r} is not stored")
    return candidate


def swap_latest(
    versions: VersionRepository,
    application: Application,
    candidate: VersionRecord,
    *,
    now: datetime,
) -> bool:
    """Flag ``candidate`` and clear every other flag; returns whether anything changed."""

    if application.id is None:
        raise LatestPointerError(f"Application {application.name!r} has not been persisted")

    flagged = versions.find_latest(application.id)
    stale = [record for record in flagged if record.id != candidate.id]
    already_flagged = any(record.id == candidate.id for record in flagged)
    if already_flagged and not stale:
        return False

    if len(flagged) > 1:
        log.warning("Repairing %s duplicate latest flags for %s", len(flagged), application.name)

    changes: list[VersionRecord] = []
    if not already_flagged:
        candidate.mark_latest(now=now)
        changes.append(candidate)
    for record in stale:
        record.unmark_latest(now=now)
        changes.append(record)
    versions.update(changes)
    return True
