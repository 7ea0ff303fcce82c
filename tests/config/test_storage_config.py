from __future__ import annotations

from typing import TYPE_CHECKING

from spellkit.config import StorageConfig, get_database_config, get_storage_config

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def test_storage_config_uses_data_dir_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("SPELLKIT_DATA_DIR", str(tmp_path / "data"))

    config = get_storage_config()

    assert config.data_dir == (tmp_path / "data").resolve()
    assert config.database_path == (tmp_path / "data" / "spellkit.db").resolve()


def test_storage_config_falls_back_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("SPELLKIT_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_storage_config().data_dir == (tmp_path / "spellkit").resolve()


def test_database_uri_env_takes_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_database_uri_defaults_to_sqlite_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("SPELLKIT_DATA_DIR", str(tmp_path / "nested"))

    uri = get_database_config().uri

    assert uri.startswith("sqlite+pysqlite:///")
    assert uri.endswith("spellkit.db")
    assert (tmp_path / "nested").is_dir()


def test_explicit_storage_is_used_without_database_uri(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    storage = StorageConfig(data_dir=tmp_path, database_filename="audit.db")

    uri = get_database_config(storage=storage).uri

    assert uri == f"sqlite+pysqlite:///{tmp_path / 'audit.db'}"
