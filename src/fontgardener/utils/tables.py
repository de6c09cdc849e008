"""Tab-separated table encoding shared by every on-disk file.

Rows are written with a fixed dialect (tab delimiter, ``\\n`` line ends,
minimal quoting) so output is byte-stable across platforms. Trailing empty
fields are dropped on write and restored on read.
"""

import csv
import io
from collections.abc import Iterable, Sequence


class TableDialect(csv.Dialect):
    delimiter = "\t"
    quotechar = '"'
    escapechar = None
    doublequote = True
    skipinitialspace = False
    lineterminator = "\n"
    quoting = csv.QUOTE_MINIMAL
    strict = True


def encode_rows(rows: Iterable[Sequence[str]]) -> str:
    """Encode rows as table text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, dialect=TableDialect)
    for row in rows:
        row = list(row)
        while row and row[-1] == "":
            row.pop()
        writer.writerow(row)
    return buffer.getvalue()


def decode_rows(text: str, width: int | None = None) -> list[list[str]]:
    """Decode table text into rows.

    Args:
        text: Table text
        width: If given, pad every row with empty fields to this width

    Returns:
        List of rows, blank lines skipped

    Raises:
        ValueError: If the text is not a valid table
    """
    rows = []
    reader = csv.reader(io.StringIO(text, newline=""), dialect=TableDialect)
    try:
        for row in reader:
            if not row:
                continue
            if width is not None and len(row) < width:
                row = row + [""] * (width - len(row))
            rows.append(row)
    except csv.Error as e:
        raise ValueError(f"line {reader.line_num}: {e}") from e
    return rows


def optional(value: str | None) -> str:
    return "" if value is None else value


def or_none(value: str) -> str | None:
    return value if value != "" else None
