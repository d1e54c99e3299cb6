"""Tests for configuration management."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from tableseed.config import Config, DatabaseConfig, SeedConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep TABLESEED_* variables of the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("TABLESEED_"):
            monkeypatch.delenv(name)


def test_default_config() -> None:
    """Test default configuration values."""
    config = Config()

    assert config.database.url == "postgresql://localhost/myproject_dev"
    assert config.database.schema_name == "public"
    assert config.database.connection_name == "app"
    assert config.seed.base_dir == "priv"
    assert config.seed.directory is None
    assert config.seed.chunk_size == 1000
    assert config.seed.timestamp_columns == ["inserted_at", "updated_at"]
    assert config.logging.level == "INFO"


def test_from_toml(tmp_path: Path) -> None:
    """Test loading config from TOML file."""
    config_file = tmp_path / "tableseed.toml"
    config_file.write_text(
        """
[database]
url = "postgresql://legacy-host/shop"
schema = "sales"
connection_name = "Shop.Repo"

[seed]
directory = "fixtures/seeds"
chunk_size = 250
"""
    )

    config = Config.from_toml(config_file)

    assert config.database.url == "postgresql://legacy-host/shop"
    assert config.database.schema_name == "sales"
    assert config.database.connection_name == "Shop.Repo"
    assert config.seed.directory == "fixtures/seeds"
    assert config.seed.chunk_size == 250
    assert config.seed.base_dir == "priv"


def test_from_toml_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        Config.from_toml(tmp_path / "nope.toml")


def test_from_toml_invalid_syntax(tmp_path: Path) -> None:
    config_file = tmp_path / "tableseed.toml"
    config_file.write_text("[database\nurl = ")

    with pytest.raises(ValueError, match="Invalid config file"):
        Config.from_toml(config_file)


def test_invalid_chunk_size(tmp_path: Path) -> None:
    config_file = tmp_path / "tableseed.toml"
    config_file.write_text("[seed]\nchunk_size = 0\n")

    with pytest.raises(ValidationError):
        Config.from_toml(config_file)


def test_find_and_load_walks_up(tmp_path: Path) -> None:
    """Test finding config in a parent directory."""
    (tmp_path / "tableseed.toml").write_text('[database]\nconnection_name = "Found.Repo"\n')
    nested = tmp_path / "lib" / "deep"
    nested.mkdir(parents=True)

    config = Config.find_and_load(nested)

    assert config.database.connection_name == "Found.Repo"


def test_find_and_load_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="tableseed init"):
        Config.find_and_load(tmp_path)


def test_to_toml_round_trip(tmp_path: Path) -> None:
    """Test writing config and reading it back."""
    config = Config(
        database=DatabaseConfig(
            url="postgresql://db/app", schema="app", connection_name="MyProject.Repo"
        ),
        seed=SeedConfig(directory="seeds", chunk_size=500, timestamp_columns=["created_at"]),
    )
    config_file = tmp_path / "tableseed.toml"

    config.to_toml(config_file)
    loaded = Config.from_toml(config_file)

    assert loaded.database == config.database
    assert loaded.seed == config.seed
    assert loaded.logging == config.logging


def test_to_toml_default_has_commented_directory(tmp_path: Path) -> None:
    config_file = tmp_path / "tableseed.toml"

    Config().to_toml(config_file)

    assert '# directory = "priv/seeds"' in config_file.read_text()
    assert Config.from_toml(config_file).seed.directory is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test nested settings come from TABLESEED_* variables."""
    monkeypatch.setenv("TABLESEED_SEED__CHUNK_SIZE", "250")
    monkeypatch.setenv("TABLESEED_DATABASE__URL", "postgresql://env-host/db")

    config = Config()

    assert config.seed.chunk_size == 250
    assert config.database.url == "postgresql://env-host/db"


def test_get_store(tmp_path: Path) -> None:
    config = Config(seed=SeedConfig(base_dir=str(tmp_path)))

    store = config.get_store()

    assert store.resolve_path("MyProject.Repo", "persons") == (
        tmp_path / "my_project" / "seeds" / "persons.seed.gz"
    )
