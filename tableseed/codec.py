"""
Seed archive codec.

An archive is the gzip-compressed UTF-8 text of an optional comment followed
by the rows serialized as a YAML sequence of mappings:

    # Snapshot of the legacy customers table
    # taken before the 2024 migration
    - email: ada@example.com
      id: 1
      joined: 2021-03-04
      balance: !decimal '12.50'
    - ...

Comment lines start with ``# `` so the whole text stays a valid YAML document.
Types YAML has no plain form for use local tags (``!decimal``, ``!uuid``,
``!datetime``, ``!time``, ``!timedelta``). Decoding uses a safe loader that
knows only these tags, so archives never execute code.
"""

import datetime as dt
import gzip
import io
import re
import uuid
import zlib
from collections.abc import Iterable, Mapping
from decimal import Decimal
from pathlib import Path
from typing import IO, Any, NamedTuple

import yaml

from tableseed.exceptions import SeedEncodeError, SeedParseError
from tableseed.models import Row

COMMENT_PREFIX = "# "

# Highest level; mtime=0 keeps unchanged data byte-identical across dumps
COMPRESS_LEVEL = 9

_DECOMPRESS_ERRORS = (gzip.BadGzipFile, EOFError, zlib.error, UnicodeDecodeError)

# Constructors for tagged values raise plain Python errors on bad input;
# deeply nested literals exhaust the parser's recursion
_LITERAL_ERRORS = (yaml.YAMLError, ValueError, TypeError, ArithmeticError, RecursionError)

# YAML treats these as line breaks; strings holding them are written
# double-quoted so they come back as escapes rather than folded newlines
_YAML_ONLY_BREAKS = ("\x85", "\u2028", "\u2029")

# Only these end a comment line; other characters str.splitlines() breaks on
# stay inside the line
_COMMENT_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class DecodedArchive(NamedTuple):
    """Rows and comment recovered from a seed archive."""

    rows: list[Row]
    comment: str | None


class SeedDumper(yaml.SafeDumper):
    """YAML dumper for seed rows."""

    def ignore_aliases(self, data: Any) -> bool:
        # Shared values are written out in full, never as &anchors
        return True


class SeedLoader(yaml.SafeLoader):
    """Safe YAML loader that understands the seed value tags."""


def _represent_decimal(dumper: SeedDumper, data: Decimal) -> yaml.Node:
    return dumper.represent_scalar("!decimal", str(data))


def _represent_uuid(dumper: SeedDumper, data: uuid.UUID) -> yaml.Node:
    return dumper.represent_scalar("!uuid", str(data))


def _represent_datetime(dumper: SeedDumper, data: dt.datetime) -> yaml.Node:
    return dumper.represent_scalar("!datetime", data.isoformat())


def _represent_time(dumper: SeedDumper, data: dt.time) -> yaml.Node:
    return dumper.represent_scalar("!time", data.isoformat())


def _represent_timedelta(dumper: SeedDumper, data: dt.timedelta) -> yaml.Node:
    return dumper.represent_mapping(
        "!timedelta",
        {"days": data.days, "seconds": data.seconds, "microseconds": data.microseconds},
        flow_style=True,
    )


def _represent_tuple(dumper: SeedDumper, data: tuple) -> yaml.Node:
    return dumper.represent_list(list(data))


def _represent_str(dumper: SeedDumper, data: str) -> yaml.Node:
    if any(char in data for char in _YAML_ONLY_BREAKS):
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
    return dumper.represent_str(data)


def _construct_timedelta(loader: SeedLoader, node: yaml.Node) -> dt.timedelta:
    return dt.timedelta(**loader.construct_mapping(node))


SeedDumper.add_representer(Decimal, _represent_decimal)
SeedDumper.add_representer(uuid.UUID, _represent_uuid)
SeedDumper.add_representer(dt.datetime, _represent_datetime)
SeedDumper.add_representer(dt.time, _represent_time)
SeedDumper.add_representer(dt.timedelta, _represent_timedelta)
SeedDumper.add_representer(tuple, _represent_tuple)
SeedDumper.add_representer(str, _represent_str)

SeedLoader.add_constructor(
    "!decimal", lambda loader, node: Decimal(loader.construct_scalar(node))
)
SeedLoader.add_constructor(
    "!uuid", lambda loader, node: uuid.UUID(loader.construct_scalar(node))
)
SeedLoader.add_constructor(
    "!datetime", lambda loader, node: dt.datetime.fromisoformat(loader.construct_scalar(node))
)
SeedLoader.add_constructor(
    "!time", lambda loader, node: dt.time.fromisoformat(loader.construct_scalar(node))
)
SeedLoader.add_constructor("!timedelta", _construct_timedelta)


def format_comment(comment: str | None) -> str:
    """
    Turn free text into comment lines.

    Every line gets the ``# `` prefix; blank lines are dropped so multi-line
    string literals don't leave empty comment lines behind. Lines end only at
    ``\\r\\n``, ``\\r`` or ``\\n``, the breaks the decoder recognises.

    Args:
        comment: Free text, possibly multi-line

    Returns:
        Newline-terminated comment lines, or "" when there is no comment
    """
    if not comment:
        return ""
    return "".join(
        f"{COMMENT_PREFIX}{line}\n"
        for line in _COMMENT_LINE_BREAK.split(comment)
        if line.strip()
    )


def _check_rows(rows: Any) -> str | None:
    """Return what is wrong with a row sequence, or None if it is valid."""
    if not isinstance(rows, list):
        return f"expected a sequence of rows, got {type(rows).__name__}"

    columns: set[str] | None = None
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            return f"row {index} is a {type(row).__name__}, expected a mapping"
        if not all(isinstance(key, str) for key in row):
            return f"row {index} has non-string column names"
        if columns is None:
            columns = set(row)
        elif set(row) != columns:
            return (
                f"row {index} has columns {sorted(row)}, "
                f"expected the same columns as row 0: {sorted(columns)}"
            )
    return None


def serialize_rows(rows: Iterable[Row]) -> str:
    """
    Serialize rows into the YAML text stored in archives.

    Raises:
        SeedEncodeError: If rows are malformed or hold unsupported values
    """
    rows = [dict(row) if isinstance(row, Mapping) else row for row in rows]
    problem = _check_rows(rows)
    if problem is not None:
        raise SeedEncodeError(f"Invalid seed rows: {problem}")

    try:
        return yaml.dump(
            rows,
            Dumper=SeedDumper,
            sort_keys=True,
            default_flow_style=False,
            allow_unicode=True,
            width=float("inf"),
        )
    except yaml.YAMLError as e:
        raise SeedEncodeError(f"Cannot serialize seed rows: {e}") from e


def encode_archive(rows: Iterable[Row], comment: str | None = None) -> bytes:
    """
    Serialize rows (and an optional comment) into compressed archive bytes.

    Args:
        rows: Rows sharing one column set
        comment: Free text for the top of the archive

    Returns:
        Gzip-compressed archive content

    Raises:
        SeedEncodeError: If rows are malformed or hold unsupported values
    """
    text = format_comment(comment) + serialize_rows(rows)
    return gzip.compress(text.encode("utf-8"), compresslevel=COMPRESS_LEVEL, mtime=0)


def _split_comment(text: str) -> tuple[str | None, str]:
    """Split decompressed text into (comment, literal)."""
    lines = []
    pos = 0
    while text.startswith(COMMENT_PREFIX, pos):
        end = text.find("\n", pos)
        if end == -1:
            end = len(text)
        lines.append(text[pos + len(COMMENT_PREFIX) : end])
        pos = end + 1
    comment = "\n".join(lines) if lines else None
    return comment, text[pos:]


def decode_archive(data: bytes, path: Path | str | None = None) -> DecodedArchive:
    """
    Decompress and parse archive bytes.

    Args:
        data: Archive content as written by encode_archive()
        path: Where the content was read from, named in parse errors

    Returns:
        DecodedArchive(rows, comment)

    Raises:
        SeedParseError: If the content is not a well-formed archive
    """
    try:
        text = gzip.decompress(data).decode("utf-8")
    except _DECOMPRESS_ERRORS as e:
        raise SeedParseError(f"not a gzip-compressed UTF-8 archive ({e})", path) from e

    comment, literal = _split_comment(text)
    if not literal.strip():
        raise SeedParseError("archive holds no row data", path)

    try:
        rows = yaml.load(literal, Loader=SeedLoader)
    except _LITERAL_ERRORS as e:
        raise SeedParseError(f"malformed row data ({type(e).__name__}: {e})", path) from e

    problem = _check_rows(rows)
    if problem is not None:
        raise SeedParseError(problem, path)

    return DecodedArchive(rows=rows, comment=comment)


def decode_comment(
    source: bytes | IO[bytes], path: Path | str | None = None
) -> str | None:
    """
    Extract only the comment of an archive.

    Decompresses line by line and stops at the first non-comment line, so
    the row data is never parsed (or fully decompressed).

    Args:
        source: Archive bytes or a binary file object positioned at its start
        path: Where the content was read from, named in parse errors

    Returns:
        The comment, or None if the archive has none

    Raises:
        SeedParseError: If the content is not gzip-compressed UTF-8
    """
    fileobj = io.BytesIO(source) if isinstance(source, bytes) else source
    lines = []
    try:
        with gzip.GzipFile(fileobj=fileobj, mode="rb") as gz:
            reader = io.TextIOWrapper(gz, encoding="utf-8", newline="\n")
            for line in reader:
                if not line.startswith(COMMENT_PREFIX):
                    break
                lines.append(line[len(COMMENT_PREFIX) :].rstrip("\n"))
            # Leave the caller's file object open
            reader.detach()
    except _DECOMPRESS_ERRORS as e:
        raise SeedParseError(f"not a gzip-compressed UTF-8 archive ({e})", path) from e

    return "\n".join(lines) if lines else None
