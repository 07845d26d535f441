"""SQLAlchemy mapping metadata for the chartsync domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)

from chartsync.domain.model import Application, ChartRepository, OciRegistry, VersionRecord

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Sources ---------------------------------------------------------------------

chart_repo_table = Table(
    "chart_repo",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(250), nullable=False),
    Column("url", String(500), nullable=False),
    Column("username", String(250)),
    Column("password", String(250)),
    Column("allow_insecure_connection", Boolean, nullable=False, default=False),
    Column("active", Boolean, nullable=False, default=True),
    Column("deleted", Boolean, nullable=False, default=False),
)

oci_registry_table = Table(
    "oci_registry",
    mapper_registry.metadata,
    Column("id", String(250), primary_key=True),
    Column("registry_url", String(500), nullable=False),
    Column("repository_list", Text, nullable=False, default=""),
    Column("username", String(250)),
    Column("password", Text),
    Column("is_public", Boolean, nullable=False, default=False),
    Column("insecure", Boolean, nullable=False, default=False),
    Column("proxy_url", String(500)),
    Column("active", Boolean, nullable=False, default=True),
)

# Catalog ---------------------------------------------------------------------

application_table = Table(
    "application",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(250), nullable=False),
    Column("chart_repo_id", Integer, ForeignKey("chart_repo.id")),
    Column("oci_registry_id", String(250), ForeignKey("oci_registry.id")),
    Column("active", Boolean, nullable=False, default=True),
    Column("created_on", UTCDateTime(), nullable=False),
    Column("updated_on", UTCDateTime(), nullable=False),
    UniqueConstraint("chart_repo_id", "name"),
    UniqueConstraint("oci_registry_id", "name"),
    CheckConstraint(
        "(chart_repo_id IS NULL) <> (oci_registry_id IS NULL)",
        name="single_source",
    ),
)

application_version_table = Table(
    "application_version",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("application_id", Integer, ForeignKey("application.id"), nullable=False),
    Column("version", String(250), nullable=False),
    Column("name", String(250), nullable=False, default=""),
    Column("app_version", String(250)),
    Column("description", Text),
    Column("digest", String(250)),
    Column("icon", Text),
    Column("home", Text),
    Column("deprecated", Boolean, nullable=False, default=False),
    Column("values_yaml", Text),
    Column("chart_yaml", Text),
    Column("raw_values", Text),
    Column("readme", Text),
    Column("values_schema_json", Text),
    Column("notes", Text),
    Column("latest", Boolean, nullable=False, default=False),
    Column("created", UTCDateTime(), nullable=False),
    Column("created_on", UTCDateTime(), nullable=False),
    Column("updated_on", UTCDateTime(), nullable=False),
    UniqueConstraint("application_id", "version"),
    Index("ix_application_version_application_id_latest", "application_id", "latest"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(ChartRepository, chart_repo_table)
    mapper_registry.map_imperatively(OciRegistry, oci_registry_table)
    mapper_registry.map_imperatively(Application, application_table)
    mapper_registry.map_imperatively(VersionRecord, application_version_table)

    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
