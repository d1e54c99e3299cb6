"""Interface every backend provides to the seed manager."""

from collections.abc import Iterable, Sequence
from typing import Any, Protocol, runtime_checkable

from tableseed.models import Row, TableDescriptor

ON_CONFLICT_CHOICES = ("nothing", "update")


@runtime_checkable
class SeedBackend(Protocol):
    """
    Data access handle for one database connection.

    Attributes:
        name: Connection identity; picks the seeds directory for its tables
    """

    name: str

    def describe_table(self, table_name: str) -> TableDescriptor:
        """Get descriptor for a table."""
        ...

    def fetch_all(self, table: TableDescriptor) -> Iterable[Any]:
        """Get all records of a table in ascending primary key order."""
        ...

    def insert_all(
        self,
        table: TableDescriptor,
        rows: Sequence[Row],
        *,
        on_conflict: str | None = None,
        conflict_target: Sequence[str] | None = None,
        overriding_system_value: bool = False,
    ) -> int:
        """Insert rows in one bulk operation and return the number inserted."""
        ...


def validate_on_conflict(on_conflict: str | None) -> None:
    """Raise ValueError for an unknown on_conflict directive."""
    if on_conflict is not None and on_conflict not in ON_CONFLICT_CHOICES:
        raise ValueError(
            f"Unknown on_conflict {on_conflict!r}. "
            f"Available: {', '.join(ON_CONFLICT_CHOICES)} (or None to raise on conflict)"
        )
