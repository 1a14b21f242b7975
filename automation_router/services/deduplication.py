"""Deduplication gate against the `scraper_tokens` table.

One batched lookup per invocation: the batch's trx_ids go into a single
`IN (...)` query and anything already stored is held back from delivery.
Store errors are not caught here; they abort the invocation.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Sequence, Set, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from automation_router.models.db.scraper_tokens import ScraperToken
from automation_router.utils import get_logger

logger = get_logger(__name__)

DEDUP_FIELD = "trx_id"


def find_existing_trx_ids(session: Session, trx_ids: Iterable[Any]) -> Set[str]:
    """Return the subset of `trx_ids` already present in the store."""
    candidates = sorted({str(t) for t in trx_ids if t is not None})
    if not candidates:
        return set()
    rows = session.execute(select(ScraperToken.trx_id).where(ScraperToken.trx_id.in_(candidates))).scalars().all()
    logger.debug("Dedup lookup completed", candidates=len(candidates), existing=len(rows))
    return set(rows)


def split_duplicates(
    records: Sequence[Mapping[str, Any]],
    existing: Set[str],
) -> Tuple[List[Mapping[str, Any]], List[Any]]:
    """Partition records into (to_send, duplicate_ids).

    duplicate_ids lists each stored trx_id once, in first-seen batch order.
    """
    to_send: List[Mapping[str, Any]] = []
    duplicate_ids: List[Any] = []
    seen: Set[str] = set()
    for record in records:
        trx_id = record.get(DEDUP_FIELD)
        key = str(trx_id) if trx_id is not None else None
        if key is not None and key in existing:
            if key not in seen:
                seen.add(key)
                duplicate_ids.append(trx_id)
            continue
        to_send.append(record)
    return to_send, duplicate_ids


__all__ = ["DEDUP_FIELD", "find_existing_trx_ids", "split_duplicates"]
