"""Pydantic schemas for fabric stock."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Fabric stock is addressed by (name, color): cut lines only know those two.
FabricKey = tuple[str, str]


class FabricStock(BaseModel):
    id: str
    name: str
    color: str
    color_hex: str = "#000000"
    stock_rolls: float = Field(ge=0)
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def key(self) -> FabricKey:
        return (self.name, self.color)


class FabricPayload(BaseModel):
    name: str = Field(min_length=1)
    color: str = Field(min_length=1)
    color_hex: str = "#000000"
    stock_rolls: float = Field(default=0, ge=0)
    notes: Optional[str] = None

    @field_validator("name", "color")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class FabricStockEntryPayload(BaseModel):
    rolls: float = Field(gt=0)
