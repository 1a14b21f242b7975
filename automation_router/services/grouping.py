"""Order-preserving grouping of records by a key field."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from automation_router.errors import MissingGroupingKeyError

GROUPING_FIELD = "io_id"


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def group_by(records: Sequence[Mapping[str, Any]], key_field: str = GROUPING_FIELD) -> Dict[str, List[Mapping[str, Any]]]:
    """Bucket records by `key_field`.

    Keys are the text form of the field value, so 5 and "5" share a bucket
    (and an object key). They appear in first-seen order and each bucket keeps
    input order. Records without a usable key are rejected up front so no file
    is written for an undefined brand.
    """
    missing = [idx for idx, record in enumerate(records) if _is_missing(record.get(key_field))]
    if missing:
        raise MissingGroupingKeyError(key_field, missing)

    grouped: Dict[str, List[Mapping[str, Any]]] = {}
    for record in records:
        grouped.setdefault(str(record[key_field]), []).append(record)
    return grouped


__all__ = ["GROUPING_FIELD", "group_by"]
