# src/lib/line_parser.py - Line classification for key/value resource files
"""Line classification and value normalization for single-level YAML resources."""

from dataclasses import dataclass
from typing import Union

QUOTE_CHARS = ("'", '"')


@dataclass(frozen=True)
class Passthrough:
    """A line without key/value structure, copied to output unchanged."""
    line: str


@dataclass(frozen=True)
class Entry:
    """A `key: value` line whose normalized value needs translation."""
    key: str
    value: str


@dataclass(frozen=True)
class EmptyEntry:
    """A `key:` line whose normalized value is empty."""
    key: str


ParsedLine = Union[Passthrough, Entry, EmptyEntry]


def normalize_value(raw: str) -> str:
    """Trim a raw value and strip one matching pair of surrounding quotes."""
    value = raw.strip()
    if len(value) >= 2 and value[0] in QUOTE_CHARS and value[-1] == value[0]:
        value = value[1:-1].strip()
    return value


def classify_line(line: str) -> ParsedLine:
    """
    Classify a raw source line.

    Lines without a colon are passthrough. Otherwise the line is split on the
    first colon only; the remainder (including any further colons) is the
    raw value.
    """
    if ":" not in line:
        return Passthrough(line)

    raw_key, raw_value = line.split(":", 1)
    key = raw_key.strip()
    value = normalize_value(raw_value)
    if not value:
        return EmptyEntry(key)
    return Entry(key, value)


def format_entry(key: str, value: str) -> str:
    """Render an output entry line as a single-quoted YAML scalar."""
    escaped = value.replace("'", "''")
    return f"  {key}: '{escaped}'"


def format_empty_entry(key: str) -> str:
    return f"  {key}: ''"
