"""Fabric stock ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Float, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sewflow.models.base import Base


class PrdFabric(Base):
    """Represents the fabric stock table (``prd_fabric``), one row per name/color."""

    __tablename__ = "prd_fabric"
    __table_args__ = (
        UniqueConstraint("name", "color", name="uq_prd_fabric_name_color"),
        CheckConstraint("stock_rolls >= 0", name="stock_rolls_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    color: Mapped[str] = mapped_column(String(255), nullable=False)
    color_hex: Mapped[str] = mapped_column(String(16), nullable=False, default="#000000")
    stock_rolls: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
