"""
Serialize labeled 2-D coordinates as a `title,x,y` text table.

Numbers always use '.' as the decimal separator (repr-based, so the process locale never
applies). Labels are quoted only when they contain a comma, a double quote or a newline.
"""

from __future__ import annotations

import csv
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from .samples import ResultRow

LOG = logging.getLogger(__name__)

HEADER = "title,x,y"
_NEEDS_QUOTES = (",", '"', "\n")


def escape_label(label: str | None) -> str:
    if label is None:
        return ""
    if any(ch in label for ch in _NEEDS_QUOTES):
        return '"' + label.replace('"', '""') + '"'
    return label


def format_number(value: float) -> str:
    """Shortest round-trip decimal text; integral values drop the trailing '.0'."""
    value = float(value)
    if value == 0.0:
        value = 0.0  # no "-0"
    text = repr(value)
    if text.endswith(".0"):
        text = text[:-2]
    return text


def render_lines(rows: Iterable[ResultRow]) -> Iterator[str]:
    """Yield the header followed by one line per row (without line terminators)."""
    yield HEADER
    for row in rows:
        yield f"{escape_label(row.label)},{format_number(row.x)},{format_number(row.y)}"


def render_table(rows: Sequence[ResultRow]) -> str:
    """Return the whole table as text; an empty sequence renders as an empty string."""
    if not rows:
        return ""
    return "".join(line + "\n" for line in render_lines(rows))


def write_table(rows: Sequence[ResultRow], path: str | Path | None) -> bool:
    """
    Write rows to path (UTF-8, '\\n' line endings). None or "-" writes to stdout.

    Returns:
        True if a table was written; False when rows is empty, in which case nothing is
        opened or written.
    """
    if not rows:
        LOG.info("No vectors to project.")
        return False

    if path is None or str(path) == "-":
        for line in render_lines(rows):
            sys.stdout.write(line + "\n")
        sys.stdout.flush()
        return True

    with open(path, "w", encoding="utf-8", newline="") as f:
        for line in render_lines(rows):
            f.write(line + "\n")
    LOG.info("Wrote %d rows to %s", len(rows), path)
    return True


def read_table(path: str | Path) -> list[ResultRow]:
    """
    Parse a table written by write_table() back into ResultRows.

    Raises:
        ValueError: If the header is not `title,x,y` or a row does not have three fields.
    """
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None:
            return []
        if header != HEADER.split(","):
            raise ValueError(f"{path}: expected header {HEADER!r}, got {','.join(header)!r}")
        rows: list[ResultRow] = []
        for index, record in enumerate(reader, start=1):
            if len(record) != 3:
                raise ValueError(f"{path}: record {index} has {len(record)} fields, expected 3")
            label, x, y = record
            rows.append(ResultRow(label=label, x=float(x), y=float(y)))
    return rows
