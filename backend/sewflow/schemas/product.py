"""Pydantic schemas for product references (the catalog orders are planned from)."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class GridType(str, Enum):
    STANDARD = "STANDARD"
    PLUS = "PLUS"
    CUSTOM = "CUSTOM"


class ProductColor(BaseModel):
    name: str = Field(min_length=1)
    hex: str = "#000000"


class ProductReferencePayload(BaseModel):
    code: str = Field(min_length=1)
    description: str = ""
    default_fabric: str = ""
    default_colors: List[ProductColor] = Field(default_factory=list)
    default_grid: GridType = GridType.STANDARD
    estimated_pieces_per_roll: Optional[int] = Field(default=None, ge=0)


class ProductReference(ProductReferencePayload):
    id: str
