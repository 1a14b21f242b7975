"""
Base schemas used across the application.
"""
from typing import Optional
from pydantic import BaseModel

class ErrorResponse(BaseModel):
    """Structured failure surfaced when a router invocation aborts."""
    success: bool = False
    message: str
    description: Optional[str] = None
    item_index: int = 0
    request_id: Optional[str] = None
