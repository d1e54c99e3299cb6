"""Chunked bulk loading of seed rows."""

import logging
from collections.abc import Callable, Iterator, Sequence
from typing import Any

from tableseed.exceptions import ChunkInsertError
from tableseed.models import DEFAULT_CHUNK_SIZE, Row, TableDescriptor

logger = logging.getLogger(__name__)

InsertFunction = Callable[..., Any]


def _validate_chunk_size(chunk_size: int | None) -> int:
    if chunk_size is None:
        return DEFAULT_CHUNK_SIZE
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")
    return chunk_size


def iter_chunks(rows: Sequence[Row], chunk_size: int | None = None) -> Iterator[Sequence[Row]]:
    """
    Split rows into consecutive chunks of at most chunk_size rows.

    Args:
        rows: Rows to split (never reordered)
        chunk_size: Maximum rows per chunk (default: 1000)

    Raises:
        ValueError: If chunk_size is not a positive integer
    """
    size = _validate_chunk_size(chunk_size)
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


def load_rows(
    insert: InsertFunction,
    table: TableDescriptor | str,
    rows: Sequence[Row],
    chunk_size: int | None = None,
    insert_options: dict[str, Any] | None = None,
) -> int:
    """
    Insert rows with one bulk insert call per chunk.

    Chunks are inserted strictly in order. When a chunk fails no further
    chunks are attempted; chunks already inserted stay inserted (wrap the
    call in a database transaction to get all-or-nothing loading).

    Args:
        insert: Bulk insert operation, called as insert(table, chunk, **insert_options)
        table: Table passed through to insert
        rows: Rows to insert
        chunk_size: Maximum rows per insert call (default: 1000)
        insert_options: Options passed verbatim to every insert call

    Returns:
        Number of rows inserted

    Raises:
        ValueError: If chunk_size is not a positive integer
        ChunkInsertError: If an insert call fails (carries the chunk index)
    """
    table_name = table.name if isinstance(table, TableDescriptor) else str(table)
    options = insert_options or {}
    size = _validate_chunk_size(chunk_size)

    inserted = 0
    for index, chunk in enumerate(iter_chunks(rows, size)):
        logger.debug(f"Inserting chunk {index} ({len(chunk)} rows) into '{table_name}'")
        try:
            insert(table, chunk, **options)
        except Exception as e:
            raise ChunkInsertError(table_name, index, len(chunk), inserted, e) from e
        inserted += len(chunk)

    return inserted
