"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from .env import env_flag, optional_env_var
from .errors import ConfigurationError

APP_DIR_NAME: Final[str] = "provcat"
DEFAULT_DB_FILENAME: Final[str] = "provcat.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+aiosqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("PROVCAT_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Resolve the database URI; ``DATABASE_URI`` wins over the data directory default."""

    echo = env_flag("PROVCAT_SQL_ECHO")
    env_uri = optional_env_var("DATABASE_URI", "")
    if not env_uri:
        storage_config = storage or get_storage_config()
        return DatabaseConfig(uri=storage_config.database_uri(), echo=echo)

    try:
        make_url(env_uri)
    except ArgumentError as exc:
        raise ConfigurationError(f"DATABASE_URI is not a valid database URL: {env_uri!r}") from exc
    return DatabaseConfig(uri=env_uri, echo=echo)
