"""Project live records into plain seed rows."""

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any

from tableseed.models import Row


def _record_fields(record: Any) -> dict[str, Any]:
    """Get a record's fields as a dict, whatever kind of record it is."""
    if isinstance(record, Mapping):
        return dict(record)

    # Named tuples (e.g. psycopg namedtuple_row)
    if isinstance(record, tuple) and hasattr(record, "_asdict"):
        return dict(record._asdict())

    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        # Not dataclasses.asdict(): nested values keep their native types
        fields = {f.name: getattr(record, f.name) for f in dataclasses.fields(record)}
    else:
        try:
            fields = dict(vars(record))
        except TypeError:
            raise TypeError(
                f"Cannot project record of type {type(record).__name__}: "
                f"expected a mapping, named tuple, dataclass or object with __dict__"
            ) from None

    # Leading underscore marks internal bookkeeping (ORM state and the like)
    return {name: value for name, value in fields.items() if not name.startswith("_")}


def project_row(record: Any, excluded_fields: Iterable[str] = ()) -> Row:
    """
    Convert one record into a seed row.

    Args:
        record: Mapping, named tuple, dataclass instance or plain object
        excluded_fields: Field names to drop

    Returns:
        Dict of the remaining fields with their native values
    """
    excluded = frozenset(excluded_fields)
    return {
        name: value
        for name, value in _record_fields(record).items()
        if name not in excluded
    }


def project_rows(records: Iterable[Any], excluded_fields: Iterable[str] = ()) -> list[Row]:
    """
    Convert records (already in primary key order) into seed rows.

    Order is preserved; an empty input gives an empty list.
    """
    excluded = frozenset(excluded_fields)
    return [project_row(record, excluded) for record in records]
