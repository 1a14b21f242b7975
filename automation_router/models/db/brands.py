from __future__ import annotations
"""SQLAlchemy models for the back-office brand lookup tables."""
from sqlalchemy import Integer, String, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column
from automation_router.database import Base

class BrandsGroup(Base):
    __tablename__ = "brands_groups"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))

    brands: Mapped[list["OutBrand"]] = relationship("OutBrand", back_populates="brands_group")

class OutBrand(Base):
    __tablename__ = "out_brands"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # External (Mongo) identifier; this is what records carry as io_id
    mongodb_id: Mapped[str] = mapped_column(String(64), index=True)
    brands_group_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("brands_groups.id"), nullable=True)

    brands_group: Mapped[BrandsGroup | None] = relationship("BrandsGroup", back_populates="brands")
