"""Create source, application and version tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from chartsync.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "chart_repo",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(250), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("username", sa.String(250), nullable=True),
        sa.Column("password", sa.String(250), nullable=True),
        sa.Column("allow_insecure_connection", sa.Boolean(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_chart_repo"),
    )
    op.create_table(
        "oci_registry",
        sa.Column("id", sa.String(250), nullable=False),
        sa.Column("registry_url", sa.String(500), nullable=False),
        sa.Column("repository_list", sa.Text(), nullable=False),
        sa.Column("username", sa.String(250), nullable=True),
        sa.Column("password", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("insecure", sa.Boolean(), nullable=False),
        sa.Column("proxy_url", sa.String(500), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_oci_registry"),
    )
    op.create_table(
        "application",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(250), nullable=False),
        sa.Column("chart_repo_id", sa.Integer(), nullable=True),
        sa.Column("oci_registry_id", sa.String(250), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_on", UTCDateTime(), nullable=False),
        sa.Column("updated_on", UTCDateTime(), nullable=False),
        sa.CheckConstraint(
            "(chart_repo_id IS NULL) <> (oci_registry_id IS NULL)",
            name="ck_application_single_source",
        ),
        sa.ForeignKeyConstraint(
            ["chart_repo_id"],
            ["chart_repo.id"],
            name="fk_application_chart_repo_id_chart_repo",
        ),
        sa.ForeignKeyConstraint(
            ["oci_registry_id"],
            ["oci_registry.id"],
            name="fk_application_oci_registry_id_oci_registry",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_application"),
        sa.UniqueConstraint("chart_repo_id", "name", name="uq_application_chart_repo_id_name"),
        sa.UniqueConstraint(
            "oci_registry_id", "name", name="uq_application_oci_registry_id_name"
        ),
    )
    op.create_table(
        "application_version",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("version", sa.String(250), nullable=False),
        sa.Column("name", sa.String(250), nullable=False),
        sa.Column("app_version", sa.String(250), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("digest", sa.String(250), nullable=True),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column("home", sa.Text(), nullable=True),
        sa.Column("deprecated", sa.Boolean(), nullable=False),
        sa.Column("values_yaml", sa.Text(), nullable=True),
        sa.Column("chart_yaml", sa.Text(), nullable=True),
        sa.Column("raw_values", sa.Text(), nullable=True),
        sa.Column("readme", sa.Text(), nullable=True),
        sa.Column("values_schema_json", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("latest", sa.Boolean(), nullable=False),
        sa.Column("created", UTCDateTime(), nullable=False),
        sa.Column("created_on", UTCDateTime(), nullable=False),
        sa.Column("updated_on", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["application.id"],
            name="fk_application_version_application_id_application",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_application_version"),
        sa.UniqueConstraint(
            "application_id", "version", name="uq_application_version_application_id_version"
        ),
    )
    op.create_index(
        "ix_application_version_application_id_latest",
        "application_version",
        ["application_id", "latest"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_application_version_application_id_latest", table_name="application_version"
    )
    op.drop_table("application_version")
    op.drop_table("application")
    op.drop_table("oci_registry")
    op.drop_table("chart_repo")
