"""Pydantic schemas for production orders, their cut lines and sewing splits."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderStatus(str, Enum):
    PLANNED = "PLANNED"
    CUTTING = "CUTTING"
    SEWING = "SEWING"
    FINISHED = "FINISHED"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    OrderStatus.PLANNED: 0,
    OrderStatus.CUTTING: 1,
    OrderStatus.SEWING: 2,
    OrderStatus.FINISHED: 3,
}


class Size(str, Enum):
    P = "P"
    M = "M"
    G = "G"
    GG = "GG"
    G1 = "G1"
    G2 = "G2"
    G3 = "G3"


STANDARD_SIZES: tuple[Size, ...] = (Size.P, Size.M, Size.G, Size.GG)
PLUS_SIZES: tuple[Size, ...] = (Size.G1, Size.G2, Size.G3)


class SizeMap(BaseModel):
    """Piece count per size label.

    Only the seven known labels are accepted; anything else is a validation
    error instead of a key that silently drops out of the totals.
    """

    model_config = ConfigDict(extra="forbid")

    P: int = Field(default=0, ge=0)
    M: int = Field(default=0, ge=0)
    G: int = Field(default=0, ge=0)
    GG: int = Field(default=0, ge=0)
    G1: int = Field(default=0, ge=0)
    G2: int = Field(default=0, ge=0)
    G3: int = Field(default=0, ge=0)

    @field_validator("*", mode="before")
    @classmethod
    def _none_is_zero(cls, value):
        return 0 if value is None else value

    @classmethod
    def uniform(cls, per_size: int, sizes: tuple[Size, ...] = STANDARD_SIZES) -> "SizeMap":
        return cls(**{size.value: per_size for size in sizes})

    def get(self, size: Size) -> int:
        return getattr(self, size.value)

    def counts(self) -> Iterator[tuple[Size, int]]:
        for size in Size:
            yield size, self.get(size)

    @property
    def total(self) -> int:
        return sum(count for _, count in self.counts())

    def minus_clamped(self, other: "SizeMap") -> "SizeMap":
        """Per-size ``max(0, self - other)``."""
        return SizeMap(
            **{size.value: max(0, count - other.get(size)) for size, count in self.counts()}
        )

    def shortfalls(self, requested: "SizeMap") -> list[tuple[Size, int, int]]:
        """Return ``(size, requested, available)`` for every size ``requested`` overdraws."""
        return [
            (size, requested.get(size), available)
            for size, available in self.counts()
            if requested.get(size) > available
        ]


class ProductionOrderItem(BaseModel):
    """One planned cut line: a reference in one color, cut from one fabric."""

    product_id: str = ""
    reference_code: str = ""
    color: str = Field(min_length=1)
    color_hex: Optional[str] = None
    rolls_used: float = Field(default=0, ge=0)
    pieces_per_size_est: int = Field(default=0, ge=0)
    estimated_pieces: int = Field(default=0, ge=0)
    actual_pieces: int = Field(default=0, ge=0)
    sizes: SizeMap = Field(default_factory=SizeMap)
    fabric_name: str = ""


class OrderSplit(BaseModel):
    """One lot of cut pieces handed to one seamstress."""

    id: str
    seamstress_id: str
    seamstress_name: str
    status: OrderStatus = OrderStatus.SEWING
    items: List[ProductionOrderItem]
    created_at: datetime
    finished_at: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def _split_status(cls, value: OrderStatus) -> OrderStatus:
        if value not in (OrderStatus.SEWING, OrderStatus.FINISHED):
            raise ValueError("A split is either SEWING or FINISHED.")
        return value

    @property
    def pieces(self) -> int:
        return sum(item.actual_pieces for item in self.items)


class ProductionOrder(BaseModel):
    id: str
    reference_code: str
    description: str
    fabric: str
    items: List[ProductionOrderItem]
    active_cutting_items: List[ProductionOrderItem] = Field(default_factory=list)
    splits: List[OrderSplit] = Field(default_factory=list)
    status: OrderStatus = OrderStatus.PLANNED
    created_at: datetime
    updated_at: datetime
    finished_at: Optional[datetime] = None
    notes: Optional[str] = None

    @property
    def remaining_pieces(self) -> int:
        return sum(item.sizes.total for item in self.active_cutting_items)

    def active_line(self, color: str) -> ProductionOrderItem | None:
        return next((item for item in self.active_cutting_items if item.color == color), None)

    def planned_line(self, color: str) -> ProductionOrderItem | None:
        return next((item for item in self.items if item.color == color), None)

    def find_split(self, split_id: str) -> OrderSplit | None:
        return next((split for split in self.splits if split.id == split_id), None)


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class OrderCreatePayload(BaseModel):
    id: Optional[str] = None
    reference_code: Optional[str] = None
    description: Optional[str] = None
    fabric: Optional[str] = None
    items: List[ProductionOrderItem]
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class OrderUpdatePayload(BaseModel):
    reference_code: Optional[str] = None
    description: Optional[str] = None
    fabric: Optional[str] = None
    items: List[ProductionOrderItem]
    notes: Optional[str] = None
    expected_updated_at: Optional[datetime] = Field(
        default=None,
        description="Client-side timestamp of the version being updated. Used for optimistic concurrency control.",
    )


class CuttingPayload(BaseModel):
    items: Optional[List[ProductionOrderItem]] = Field(
        default=None,
        description="Operator-confirmed cut lines; the planned items are used when omitted.",
    )
    expected_updated_at: Optional[datetime] = None


class DistributionLine(BaseModel):
    color: str = Field(min_length=1)
    sizes: SizeMap


class DistributionPayload(BaseModel):
    seamstress_id: str = Field(min_length=1)
    items: List[DistributionLine]
    expected_updated_at: Optional[datetime] = None


class OrderSummaryOut(BaseModel):
    order_id: str
    status: OrderStatus
    pieces_cut: int
    pieces_distributed: int
    pieces_sewn: int
    pieces_remaining: int
    rolls_used: float
    open_splits: int
