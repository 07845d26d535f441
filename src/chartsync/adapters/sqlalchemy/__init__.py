"""SQLAlchemy adapter package for chartsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyApplicationRepository,
    SqlAlchemySourceRepository,
    SqlAlchemyVersionRepository,
)
from .unit_of_work import SqlAlchemyChartSyncUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyApplicationRepository",
    "SqlAlchemyChartSyncUnitOfWork",
    "SqlAlchemySourceRepository",
    "SqlAlchemyVersionRepository",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
