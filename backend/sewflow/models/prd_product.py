"""Product reference ORM model."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sewflow.models.base import Base


class PrdProduct(Base):
    __tablename__ = "prd_product"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    code: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    default_fabric: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    default_colors: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    default_grid: Mapped[str] = mapped_column(String(16), nullable=False, default="STANDARD")
    estimated_pieces_per_roll: Mapped[Optional[int]] = mapped_column(Integer)
