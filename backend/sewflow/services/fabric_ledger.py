"""Fabric stock ledger keyed by (fabric name, color)."""

from __future__ import annotations

from typing import Iterable, Mapping

from loguru import logger

from sewflow.core.clock import utcnow
from sewflow.core.errors import NotFoundError, StockShortfall, InsufficientStockError
from sewflow.repositories.base import FabricRepository
from sewflow.schemas.fabric import FabricKey, FabricStock
from sewflow.schemas.order import ProductionOrderItem

ROLL_EPSILON = 1e-9


def aggregate_fabric_usage(items: Iterable[ProductionOrderItem]) -> dict[FabricKey, float]:
    """Sum ``rolls_used`` per (fabric_name, color).

    Several cut lines can draw from the same fabric; debiting them one by one
    would check each line against the full stock instead of their sum.
    """

    usage: dict[FabricKey, float] = {}
    for item in items:
        key = (item.fabric_name, item.color)
        usage[key] = usage.get(key, 0.0) + float(item.rolls_used or 0)
    return usage


class FabricLedger:
    """Authoritative stock quantity per (name, color), in fractional rolls."""

    def __init__(self, fabrics: FabricRepository) -> None:
        self.fabrics = fabrics

    async def lookup(self, name: str, color: str) -> float | None:
        fabric = await self.fabrics.get_by_key(name, color)
        return fabric.stock_rolls if fabric is not None else None

    async def _load(
        self, requests: Mapping[FabricKey, float]
    ) -> dict[FabricKey, FabricStock | None]:
        return {
            key: await self.fabrics.get_by_key(*key, for_update=True)
            for key in requests
        }

    async def debit(self, requests: Mapping[FabricKey, float]) -> list[FabricStock]:
        """Take ``requests`` out of stock, all keys or none.

        Every key is checked before anything is written; a missing fabric has
        zero rolls available.  Raises ``InsufficientStockError`` listing every
        key that falls short.
        """

        wanted = {key: rolls for key, rolls in requests.items() if rolls > 0}
        loaded = await self._load(wanted)

        shortfalls = []
        for (name, color), required in wanted.items():
            fabric = loaded[(name, color)]
            available = fabric.stock_rolls if fabric is not None else 0.0
            if available + ROLL_EPSILON < required:
                shortfalls.append(
                    StockShortfall(
                        fabric_name=name, color=color, required=required, available=available
                    )
                )
        if shortfalls:
            logger.bind(
                shortfalls=[(s.fabric_name, s.color, s.required, s.available) for s in shortfalls],
            ).info("fabric_debit_rejected")
            raise InsufficientStockError(shortfalls)

        now = utcnow()
        updated: list[FabricStock] = []
        for key, required in wanted.items():
            fabric = loaded[key]
            assert fabric is not None
            fabric.stock_rolls = max(0.0, fabric.stock_rolls - required)
            fabric.updated_at = now
            updated.append(await self.fabrics.update(fabric))
            logger.bind(
                fabric=key[0], color=key[1], rolls=required, stock_rolls=fabric.stock_rolls
            ).info("fabric_debited")
        return updated

    async def credit(self, requests: Mapping[FabricKey, float]) -> list[FabricStock]:
        """Put rolls back into stock (stock entry, or undoing a debit)."""

        now = utcnow()
        updated: list[FabricStock] = []
        for (name, color), rolls in requests.items():
            if rolls <= 0:
                continue
            fabric = await self.fabrics.get_by_key(name, color, for_update=True)
            if fabric is None:
                raise NotFoundError("fabric", f"{name} - {color}")
            fabric.stock_rolls += rolls
            fabric.updated_at = now
            updated.append(await self.fabrics.update(fabric))
            logger.bind(
                fabric=name, color=color, rolls=rolls, stock_rolls=fabric.stock_rolls
            ).info("fabric_credited")
        return updated
