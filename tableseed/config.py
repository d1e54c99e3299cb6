"""
Configuration management for tableseed.

Loads and validates configuration from tableseed.toml files using Pydantic.
Environment variables (e.g. TABLESEED_DATABASE__URL, TABLESEED_SEED__CHUNK_SIZE)
fill in whatever the file leaves unset.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tableseed.introspection import DEFAULT_TIMESTAMP_COLUMNS
from tableseed.models import DEFAULT_CHUNK_SIZE
from tableseed.store import SeedStore

CONFIG_FILENAME = "tableseed.toml"


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default="postgresql://localhost/myproject_dev",
        description="PostgreSQL connection URL",
    )
    schema_name: str = Field(
        default="public", alias="schema", description="Schema holding the seeded tables"
    )
    connection_name: str = Field(
        default="app",
        description="Connection identity; its first dotted part names the seeds namespace",
    )

    model_config = {"populate_by_name": True}


class SeedConfig(BaseModel):
    """Seed file configuration."""

    base_dir: str = Field(
        default="priv", description="Root of the <namespace>/seeds directories"
    )
    directory: Optional[str] = Field(
        default=None, description="Explicit seeds directory (overrides base_dir)"
    )
    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE, gt=0, description="Rows per bulk insert when loading"
    )
    timestamp_columns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TIMESTAMP_COLUMNS),
        description="Columns never written to seed files",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Root log level")


class Config(BaseSettings):
    """Main configuration for tableseed."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="TABLESEED_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def from_toml(cls, path: Path | str) -> Config:
        """
        Load configuration from TOML file.

        Args:
            path: Path to tableseed.toml file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            try:
                data: dict[str, Any] = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid config file {config_path}: {e}") from e

        return cls(**data)

    @classmethod
    def find_and_load(cls, start_dir: Optional[Path] = None) -> Config:
        """
        Find and load configuration from tableseed.toml.

        Searches for tableseed.toml starting from start_dir and walking up
        parent directories until found or reaching filesystem root.

        Args:
            start_dir: Directory to start search (defaults to current directory)

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If no config file found
        """
        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()

        # Walk up directory tree
        while True:
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return cls.from_toml(config_path)

            parent = current.parent
            if parent == current:
                break
            current = parent

        raise FileNotFoundError(
            f"No {CONFIG_FILENAME} found in {start_dir} or parent directories. "
            f"Run 'tableseed init' to create one."
        )

    def to_toml(self, path: Path | str) -> None:
        """
        Write configuration to TOML file.

        Args:
            path: Path to write tableseed.toml
        """
        config_path = Path(path)

        directory_line = (
            f'directory = "{self.seed.directory}"\n'
            if self.seed.directory
            else '# directory = "priv/seeds"\n'
        )
        timestamp_columns = ", ".join(f'"{col}"' for col in self.seed.timestamp_columns)

        toml_content = f"""# tableseed configuration

[database]
url = "{self.database.url}"
schema = "{self.database.schema_name}"
connection_name = "{self.database.connection_name}"

[seed]
base_dir = "{self.seed.base_dir}"
{directory_line}chunk_size = {self.seed.chunk_size}
timestamp_columns = [{timestamp_columns}]

[logging]
level = "{self.logging.level}"
"""

        config_path.write_text(toml_content)

    def get_store(self) -> SeedStore:
        """Get the seed store for the configured directories."""
        return SeedStore(base_dir=self.seed.base_dir, directory=self.seed.directory)

