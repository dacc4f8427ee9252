"""Production order ORM model.

The order aggregate (planned items, the active cut balance and the split
ledger) is stored as one JSON document; status and timestamps are also kept
as plain columns so they can be filtered on.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from sewflow.models.base import Base


class PrdOrder(Base):
    __tablename__ = "prd_order"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    reference_code: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    document: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
