"""Pytest configuration and shared fixtures."""

import datetime as dt
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from tableseed.backends import StagingBackend
from tableseed.config import Config, SeedConfig
from tableseed.models import TableDescriptor
from tableseed.seeds import SeedManager
from tableseed.store import SeedStore

CONNECTION_NAME = "MyProject.Repo"


@pytest.fixture
def persons_table() -> TableDescriptor:
    """Table with an association and timestamp columns that never get dumped."""
    return TableDescriptor(
        name="persons",
        primary_key=["id"],
        columns=[
            "id",
            "name",
            "email",
            "born_on",
            "balance",
            "organization",
            "inserted_at",
            "updated_at",
        ],
        associations=["organization"],
        autogenerated=["inserted_at", "updated_at"],
    )


@pytest.fixture
def person_rows() -> list[dict[str, Any]]:
    """Rows as stored in the table, deliberately not in primary key order."""
    stamp = dt.datetime(2024, 1, 15, 9, 30)
    return [
        {
            "id": 3,
            "name": "Grace Hopper",
            "email": "grace@example.com",
            "born_on": dt.date(1906, 12, 9),
            "balance": Decimal("1024.00"),
            "organization": {"name": "US Navy"},
            "inserted_at": stamp,
            "updated_at": stamp,
        },
        {
            "id": 1,
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "born_on": dt.date(1815, 12, 10),
            "balance": Decimal("12.50"),
            "organization": None,
            "inserted_at": stamp,
            "updated_at": stamp,
        },
        {
            "id": 2,
            "name": "Alan Turing",
            "email": None,
            "born_on": dt.date(1912, 6, 23),
            "balance": Decimal("-3.10"),
            "organization": {"name": "GCHQ"},
            "inserted_at": stamp,
            "updated_at": stamp,
        },
    ]


@pytest.fixture
def backend(persons_table: TableDescriptor, person_rows: list[dict[str, Any]]) -> StagingBackend:
    """Staging backend holding the persons table."""
    backend = StagingBackend(name=CONNECTION_NAME)
    backend.create_table(persons_table, person_rows)
    return backend


@pytest.fixture
def seeds_root(tmp_path: Path) -> Path:
    """Base directory for per-project seeds directories."""
    return tmp_path / "priv"


@pytest.fixture
def seeds_dir(seeds_root: Path) -> Path:
    """Seeds directory of the test connection (not created)."""
    return seeds_root / "my_project" / "seeds"


@pytest.fixture
def store(seeds_root: Path) -> SeedStore:
    return SeedStore(base_dir=seeds_root)


@pytest.fixture
def config(seeds_root: Path) -> Config:
    return Config(seed=SeedConfig(base_dir=str(seeds_root)))


@pytest.fixture
def manager(backend: StagingBackend, store: SeedStore, config: Config) -> SeedManager:
    return SeedManager(backend, store=store, config=config)
