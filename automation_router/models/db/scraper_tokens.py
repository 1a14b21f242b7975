from __future__ import annotations
"""SQLAlchemy model for tokens already forwarded to the pixel endpoint."""
from datetime import datetime
from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from automation_router.database import Base

class ScraperToken(Base):
    __tablename__ = "scraper_tokens"
    # trx_id is the dedup key; the primary key makes re-insertion idempotent
    trx_id: Mapped[str] = mapped_column(String(191), primary_key=True)
    amount: Mapped[str | None] = mapped_column(String(64), nullable=True)
    commission_amount: Mapped[str | None] = mapped_column(String(64), nullable=True)
    stream: Mapped[str] = mapped_column(String(32), default="scraper")
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
