"""Persistence writer: idempotent token upsert + brand group lookup.

Both operations take a session supplied by the caller (see
`StoreConnector.session_scope`) so connection lifetime is owned by the
orchestrator phase, not by the individual query.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from automation_router.config import SCRAPER_STREAM
from automation_router.models.db.brands import BrandsGroup, OutBrand
from automation_router.models.db.scraper_tokens import ScraperToken
from automation_router.utils import get_logger

logger = get_logger(__name__)

UNKNOWN_BRAND_GROUP_ID = 0
UNKNOWN_BRAND_GROUP_NAME = "Unknown"


@dataclass(frozen=True)
class BrandInfo:
    brand_group_id: int
    brand_group_name: str

    @classmethod
    def unknown(cls) -> "BrandInfo":
        return cls(UNKNOWN_BRAND_GROUP_ID, UNKNOWN_BRAND_GROUP_NAME)


def _as_text(value: Any) -> str | None:
    return None if value is None else str(value)


def _token_rows(records: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    # One row per trx_id; the first delivered record wins
    rows: Dict[str, Dict[str, Any]] = {}
    for r in records:
        if r.get("trx_id") is None:
            continue
        trx_id = str(r["trx_id"])
        if trx_id in rows:
            continue
        rows[trx_id] = {
            "trx_id": trx_id,
            "amount": _as_text(r.get("amount")),
            "commission_amount": _as_text(r.get("commission_amount")),
            "stream": SCRAPER_STREAM,
            "created_at": func.now(),
        }
    return list(rows.values())


def _upsert_statement(dialect_name: str, rows: List[Dict[str, Any]]):
    table = ScraperToken.__table__
    if dialect_name == "mysql" or dialect_name == "mariadb":
        stmt = mysql.insert(table).values(rows)
        # No-op update: a conflicting trx_id keeps its original row
        return stmt.on_duplicate_key_update(trx_id=table.c.trx_id)
    if dialect_name == "postgresql":
        stmt = postgresql.insert(table).values(rows)
        return stmt.on_conflict_do_update(index_elements=[table.c.trx_id], set_={"trx_id": stmt.excluded.trx_id})
    if dialect_name == "sqlite":
        stmt = sqlite.insert(table).values(rows)
        return stmt.on_conflict_do_update(index_elements=[table.c.trx_id], set_={"trx_id": stmt.excluded.trx_id})
    raise ValueError(f"Unsupported dialect for scraper token upsert: {dialect_name}")


def upsert_scraper_tokens(session: Session, records: Sequence[Mapping[str, Any]]) -> int:
    """Insert delivered records into scraper_tokens; re-inserting a trx_id is a no-op.

    Returns the driver-reported affected row count.
    """
    rows = _token_rows(records)
    if not rows:
        return 0
    stmt = _upsert_statement(session.get_bind().dialect.name, rows)
    result = session.execute(stmt)
    affected = int(result.rowcount or 0)
    logger.info("Scraper tokens upserted", rows=len(rows), affected=affected)
    return affected


def lookup_brand_groups(session: Session, io_ids: Iterable[Any]) -> Dict[Any, BrandInfo]:
    """Resolve brand groups for many io_ids in one query.

    The first out_brands row per mongodb_id wins. Ids without a row, or whose
    brand has no group, resolve to BrandInfo.unknown().
    """
    wanted = list(dict.fromkeys(io_ids))
    if not wanted:
        return {}
    stmt = (
        select(OutBrand.mongodb_id, BrandsGroup.id, BrandsGroup.name)
        .outerjoin(BrandsGroup, OutBrand.brands_group_id == BrandsGroup.id)
        .where(OutBrand.mongodb_id.in_([str(i) for i in wanted]))
        .order_by(OutBrand.id)
    )
    found: Dict[str, BrandInfo] = {}
    for mongodb_id, group_id, group_name in session.execute(stmt):
        if mongodb_id in found:
            continue
        if group_id is None:
            found[mongodb_id] = BrandInfo.unknown()
        else:
            found[mongodb_id] = BrandInfo(int(group_id), group_name or UNKNOWN_BRAND_GROUP_NAME)

    resolved = {io_id: found.get(str(io_id), BrandInfo.unknown()) for io_id in wanted}
    unknown = [io_id for io_id, info in resolved.items() if info.brand_group_id == UNKNOWN_BRAND_GROUP_ID]
    if unknown:
        logger.warning("Brand group not found; using fallback", io_ids=unknown)
    return resolved


__all__ = [
    "BrandInfo",
    "UNKNOWN_BRAND_GROUP_ID",
    "UNKNOWN_BRAND_GROUP_NAME",
    "upsert_scraper_tokens",
    "lookup_brand_groups",
]
