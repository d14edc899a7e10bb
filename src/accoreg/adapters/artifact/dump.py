"""Best-effort record recovery from SQL statement dumps.

This is a heuristic text scan, not a SQL parser: only ``INSERT INTO`` statements
for tracked collections are considered, and any statement that cannot be read
is logged and skipped. An ``INSERT`` without a column list is only read when the
descriptor carries the persisted column order. Temporal values come back as raw
strings and are canonicalised like every other incoming record.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from accoreg.domain.backup.contracts import Record
    from accoreg.domain.model import CollectionDescriptor

log = logging.getLogger(__name__)

INSERT_PROBE: Final[re.Pattern[str]] = re.compile(r"\bINSERT\s+INTO\b", re.IGNORECASE)

_HEADER_RE: Final[re.Pattern[str]] = re.compile(
    r"^\s*INSERT\s+INTO\s+(?P<table>[^\s(]+)\s*"
    r"(?:\((?P<columns>[^)]*)\))?\s*VALUES\s*(?P<values>.*)$",
    re.IGNORECASE | re.DOTALL,
)

_TOKEN_RE: Final[re.Pattern[str]] = re.compile(
    r"""\s*(?:
        (?P<string>[Ee]?'(?:[^']|'')*')
      | (?P<null>NULL)\b
      | (?P<bool>TRUE|FALSE)\b
      | (?P<number>[-+]?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)
      | (?P<cast>::\s*[A-Za-z_][\w ]*(?:\(\d+\))?)
      | (?P<open>\()
      | (?P<close>\))
      | (?P<comma>,)
    )""",
    re.IGNORECASE | re.VERBOSE,
)

_IDENTIFIER_QUOTES: Final[str] = "\"`[]"


class DumpParseError(ValueError):
    """One statement could not be read."""


def looks_like_dump(text: str) -> bool:
    return INSERT_PROBE.search(text) is not None


def split_statements(text: str) -> Iterator[str]:
    """Yield ``;``-terminated statements, ignoring ``--`` comment lines and quoted ``;``."""

    lines = (line for line in text.splitlines() if not line.lstrip().startswith("--"))
    body = "\n".join(lines)
    start = 0
    in_string = False
    for position, char in enumerate(body):
        if char == "'":
            in_string = not in_string
        elif char == ";" and not in_string:
            statement = body[start:position].strip()
            if statement:
                yield statement
            start = position + 1
    tail = body[start:].strip()
    if tail:
        yield tail


def _unquote_identifier(identifier: str) -> str:
    return identifier.strip().strip(_IDENTIFIER_QUOTES)


def _table_name(raw: str) -> str:
    return _unquote_identifier(raw.rsplit(".", 1)[-1]).lower()


def normalize_field_name(column: str, descriptor: CollectionDescriptor) -> str:
    """Map ``"updatedAt"`` style names onto the descriptor's snake_case fields."""

    return descriptor.field_name(_unquote_identifier(column))


def _literal(match: re.Match[str]) -> object:
    kind = match.lastgroup
    token = match.group(kind or 0).strip()
    if kind == "string":
        if token[0] in "Ee":
            token = token[1:]
        return token[1:-1].replace("''", "'")
    if kind == "null":
        return None
    if kind == "bool":
        return token.lower() == "true"
    if any(marker in token for marker in ".eE"):
        return float(token)
    return int(token)


def parse_values(text: str) -> list[list[object]]:
    """Parse ``(v1, v2), (v3, v4)`` into rows of Python values."""

    rows: list[list[object]] = []
    current: list[object] | None = None
    expect_value = False
    position = 0
    while True:
        match = _TOKEN_RE.match(text, position)
        if match is None:
            if text[position:].strip():
                raise DumpParseError(f"Unexpected input at offset {position}")
            break
        position = match.end()
        kind = match.lastgroup

        if current is None:
            if kind == "open":
                current = []
                expect_value = True
            elif kind != "comma" or not rows:
                raise DumpParseError(f"Expected a value tuple at offset {match.start()}")
            continue

        if kind == "cast":
            if expect_value:
                raise DumpParseError(f"Dangling cast at offset {match.start()}")
        elif kind == "close":
            if expect_value:
                raise DumpParseError(f"Missing value before offset {match.start()}")
            rows.append(current)
            current = None
        elif kind == "comma":
            if expect_value:
                raise DumpParseError(f"Missing value before offset {match.start()}")
            expect_value = True
        elif kind == "open" or not expect_value:
            raise DumpParseError(f"Unexpected token at offset {match.start()}")
        else:
            current.append(_literal(match))
            expect_value = False

    if current is not None:
        raise DumpParseError("Unterminated value tuple")
    if not rows:
        raise DumpParseError("No value tuples found")
    return rows


def _records_from_statement(
    statement: str,
    descriptor: CollectionDescriptor,
    columns: str | None,
    values: str,
) -> list[Record]:
    if columns is not None:
        names = [normalize_field_name(column, descriptor) for column in columns.split(",")]
    elif descriptor.columns:
        names = list(descriptor.columns)
    else:
        raise DumpParseError(
            f"{descriptor.name} statement has no column list and the column order is unknown"
        )

    records: list[Record] = []
    for row in parse_values(values):
        if len(row) != len(names):
            raise DumpParseError(
                f"Expected {len(names)} values, got {len(row)} in {statement[:60]!r}"
            )
        record: Record = dict(zip(names, row, strict=True))
        if record.get(descriptor.primary_key) is None:
            raise DumpParseError(f"Row without {descriptor.primary_key!r} value")
        records.append(record)
    return records


def recover_records(
    text: str,
    collections: Iterable[CollectionDescriptor],
) -> dict[str, list[Record]]:
    """Collect records per tracked collection, skipping unreadable statements."""

    by_alias: Mapping[str, CollectionDescriptor] = {
        alias.lower(): descriptor
        for descriptor in collections
        for alias in descriptor.aliases
    }
    recovered: dict[str, list[Record]] = {}
    skipped = 0

    for statement in split_statements(text):
        header = _HEADER_RE.match(statement)
        if header is None:
            continue
        descriptor = by_alias.get(_table_name(header.group("table")))
        if descriptor is None:
            continue
        try:
            records = _records_from_statement(
                statement, descriptor, header.group("columns"), header.group("values")
            )
        except DumpParseError as exc:
            skipped += 1
            log.warning("Skipping unparseable %s statement: %s", descriptor.name, exc)
            continue
        recovered.setdefault(descriptor.name, []).extend(records)

    if skipped:
        log.warning("Skipped %s unparseable statements while reading dump", skipped)
    return recovered
