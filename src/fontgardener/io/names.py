"""Glyph name list files: one glyph name per line."""

from pathlib import Path

from fontgardener.exceptions import CodecError


def parse_name_list(path: Path) -> list[str]:
    """Read a glyph name list.

    Surrounding whitespace is stripped, blank lines are ignored and
    duplicates are dropped keeping the first occurrence.

    Raises:
        CodecError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CodecError(str(path), str(e)) from e

    names = dict.fromkeys(line.strip() for line in text.splitlines())
    names.pop("", None)
    return list(names)
