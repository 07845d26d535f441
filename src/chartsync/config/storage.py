"""Database location settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from .env import env_str
from .errors import ConfigurationError

APP_DIR_NAME: Final[str] = "chartsync"
DEFAULT_DB_FILENAME: Final[str] = "chartsync.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str

    @property
    def display_uri(self) -> str:
        """The URI with any password masked, for log output."""
        return make_url(self.uri).render_as_string(hide_password=True)


def get_data_dir() -> Path:
    """Directory of the default SQLite database.

    ``CHARTSYNC_DATA_DIR`` wins; otherwise ``$XDG_DATA_HOME/chartsync``.
    """

    env_dir = os.getenv("CHARTSYNC_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    base = os.getenv("XDG_DATA_HOME")
    base_path = Path(base) if base else Path.home() / ".local" / "share"
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_database_config() -> DatabaseConfig:
    """Read ``DATABASE_URI``, falling back to a SQLite file in the data dir."""

    uri = env_str("DATABASE_URI", "")
    if not uri:
        data_dir = get_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return DatabaseConfig(uri=f"sqlite+pysqlite:///{data_dir / DEFAULT_DB_FILENAME}")
    try:
        make_url(uri)
    except ArgumentError as exc:
        raise ConfigurationError(f"DATABASE_URI is not a valid database URL: {uri!r}") from exc
    return DatabaseConfig(uri=uri)
