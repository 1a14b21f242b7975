"""Execution mode resolution.

`auto` only turns into the monthly path when an explicit day-of-month rule is
configured; without one it behaves exactly like `forceRegular`.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from automation_router.models.db.enums import ExecutionMode, ResolvedMode


def resolve_mode(now: datetime, override: ExecutionMode | str, monthly_day: Optional[int] = None) -> ResolvedMode:
    mode = ExecutionMode(override)
    if mode == ExecutionMode.FORCE_MONTHLY:
        return ResolvedMode.MONTHLY
    if mode == ExecutionMode.FORCE_REGULAR:
        return ResolvedMode.REGULAR
    if monthly_day is not None and now.day == monthly_day:
        return ResolvedMode.MONTHLY
    return ResolvedMode.REGULAR


__all__ = ["resolve_mode"]
