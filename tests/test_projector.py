"""Tests for turning live records into seed rows."""

import datetime as dt
from collections import namedtuple
from dataclasses import dataclass, field

import pytest

from tableseed.projector import project_row, project_rows

PersonTuple = namedtuple("PersonTuple", ["id", "name", "inserted_at"])


@dataclass
class PersonRecord:
    id: int
    name: str
    settings: dict = field(default_factory=dict)
    inserted_at: dt.datetime | None = None


class PersonObject:
    def __init__(self, id: int, name: str):
        self.id = id
        self.name = name
        self._state = "loaded"


class TestProjectRow:
    """Tests for project_row()."""

    def test_mapping(self) -> None:
        record = {"id": 1, "name": "Ada", "inserted_at": dt.datetime(2024, 1, 1)}

        assert project_row(record, {"inserted_at"}) == {"id": 1, "name": "Ada"}

    def test_mapping_keeps_underscore_keys(self) -> None:
        """Test mapping keys are real columns, even with a leading underscore."""
        assert project_row({"id": 1, "_legacy": "x"}) == {"id": 1, "_legacy": "x"}

    def test_named_tuple(self) -> None:
        record = PersonTuple(1, "Ada", dt.datetime(2024, 1, 1))

        assert project_row(record, ["inserted_at"]) == {"id": 1, "name": "Ada"}

    def test_dataclass_keeps_nested_values(self) -> None:
        """Test nested values stay the same objects, not recursive copies."""
        settings = {"theme": "dark"}
        record = PersonRecord(1, "Ada", settings)

        row = project_row(record, ["inserted_at"])

        assert row == {"id": 1, "name": "Ada", "settings": {"theme": "dark"}}
        assert row["settings"] is settings

    def test_plain_object_drops_private_state(self) -> None:
        assert project_row(PersonObject(1, "Ada")) == {"id": 1, "name": "Ada"}

    def test_record_not_modified(self) -> None:
        record = {"id": 1, "name": "Ada"}

        project_row(record, ["name"])

        assert record == {"id": 1, "name": "Ada"}

    def test_excluding_unknown_fields(self) -> None:
        """Test excluded fields the record doesn't have are ignored."""
        assert project_row({"id": 1}, ["organization"]) == {"id": 1}

    def test_unsupported_record(self) -> None:
        with pytest.raises(TypeError, match="Cannot project record of type int"):
            project_row(42)


class TestProjectRows:
    """Tests for project_rows()."""

    def test_order_preserved(self) -> None:
        records = [{"id": 3}, {"id": 1}, {"id": 2}]

        assert [row["id"] for row in project_rows(records)] == [3, 1, 2]

    def test_empty(self) -> None:
        assert project_rows([]) == []

    def test_generator_input(self) -> None:
        records = ({"id": n, "secret": "x"} for n in range(3))

        assert project_rows(records, ["secret"]) == [{"id": 0}, {"id": 1}, {"id": 2}]
