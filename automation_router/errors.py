"""Router exception hierarchy.

Only per-record delivery failures are recovered locally; every other error
travels up to the orchestrator, which wraps it into a single
`RouterExecutionError` for the caller.
"""
from __future__ import annotations

from typing import Sequence

DEFAULT_ERROR_DESCRIPTION = "An error occurred during execution"


class RouterError(Exception):
    """Base class for errors raised by the router itself."""

    def __init__(self, message: str, *, description: str | None = None):
        super().__init__(message)
        self.message = message
        self.description = description


class ConfigurationError(RouterError):
    """A required parameter or credential set is missing."""


class MissingGroupingKeyError(RouterError):
    """Records cannot be grouped because their grouping field is absent."""

    def __init__(self, key_field: str, indexes: Sequence[int]):
        self.key_field = key_field
        self.indexes = list(indexes)
        super().__init__(
            f"Missing grouping key '{key_field}' on {len(self.indexes)} record(s)",
            description=f"Record indexes without '{key_field}': {self.indexes}",
        )


class RouterExecutionError(RouterError):
    """User-facing wrapper for any failure that aborted an invocation."""

    def __init__(self, message: str, *, description: str | None = None, item_index: int = 0):
        super().__init__(message, description=description or DEFAULT_ERROR_DESCRIPTION)
        self.item_index = item_index

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "description": self.description,
            "item_index": self.item_index,
        }


__all__ = [
    "DEFAULT_ERROR_DESCRIPTION",
    "RouterError",
    "ConfigurationError",
    "MissingGroupingKeyError",
    "RouterExecutionError",
]
