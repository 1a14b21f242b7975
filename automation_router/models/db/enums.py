"""Central Enum definitions for router states.

These replace scattered string literals so the orchestrator, schemas and
report all agree on the exact wire values.
"""
from __future__ import annotations
import enum


class ExecutionMode(str, enum.Enum):
    AUTO = "auto"
    FORCE_REGULAR = "forceRegular"
    FORCE_MONTHLY = "forceMonthly"


class ResolvedMode(str, enum.Enum):
    REGULAR = "regular"
    MONTHLY = "monthly"


class UploadKind(str, enum.Enum):
    TRANSLATED = "Translated"
    PROCESSED = "Processed"


class RunStatus(str, enum.Enum):
    DRY_RUN_SKIPPED = "DRY_RUN_SKIPPED"


class DeliveryStatus(str, enum.Enum):
    OK = "OK"

__all__ = [
    "ExecutionMode",
    "ResolvedMode",
    "UploadKind",
    "RunStatus",
    "DeliveryStatus",
]
