"""Naive CSV serialization of uniform record lists.

The header comes from the first record's keys, so every record is expected
to share that schema; later records with other keys are rendered against the
first header (missing keys become empty cells, extra keys are ignored).

Only one quoting rule applies: a text value containing a comma is wrapped in
double quotes. Embedded quotes and newlines are written as-is, which is what
the downstream discrepancy tooling reads.
"""
from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Sequence

FIELD_SEPARATOR = ","
ROW_SEPARATOR = "\n"


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        text = json.dumps(value, separators=(",", ":"), default=str)
    elif isinstance(value, str):
        text = value
    else:
        return str(value)
    if FIELD_SEPARATOR in text:
        return f'"{text}"'
    return text


def _row(values: Iterable[Any]) -> str:
    return FIELD_SEPARATOR.join(format_cell(v) for v in values)


def to_csv(records: Sequence[Mapping[str, Any]]) -> str:
    """Serialize records to CSV text; an empty list yields an empty string."""
    if not records:
        return ""
    headers = list(records[0].keys())
    lines = [FIELD_SEPARATOR.join(headers)]
    for record in records:
        lines.append(_row(record.get(header) for header in headers))
    return ROW_SEPARATOR.join(lines)


__all__ = ["to_csv", "format_cell"]
