"""Where the pipeline database lives.

``DATABASE_URI`` wins when set. Otherwise spellkit keeps a SQLite file in
``SPELLKIT_DATA_DIR``, falling back to ``$XDG_DATA_HOME/spellkit``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "spellkit"
DEFAULT_DB_FILENAME: Final[str] = "spellkit.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def database_path(self) -> Path:
        return self.data_dir / self.database_filename

    def database_uri(self) -> str:
        """SQLite URI of the database file; creates ``data_dir`` if needed."""

        self.data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{self.database_path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    configured = optional_env_var("SPELLKIT_DATA_DIR")
    if configured is not None:
        data_dir = Path(configured)
    else:
        data_home = optional_env_var("XDG_DATA_HOME")
        base = Path(data_home) if data_home is not None else Path.home() / ".local" / "share"
        data_dir = base / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir.expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    uri = optional_env_var("DATABASE_URI")
    if uri is None:
        uri = (storage or get_storage_config()).database_uri()
    return DatabaseConfig(uri=uri)
