"""PLANNED -> CUTTING: confirm the cut, consume fabric, open the cut balance."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from loguru import logger

from sewflow.core.clock import utcnow
from sewflow.core.concurrency import order_lock
from sewflow.core.errors import InvalidTransitionError, NotFoundError, ValidationFailure
from sewflow.core.optimistic_lock import ensure_expected_timestamp
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.order import OrderStatus, ProductionOrder, ProductionOrderItem, SizeMap
from sewflow.services.fabric_ledger import FabricLedger, aggregate_fabric_usage
from sewflow.services.order_status import advance_status


def finalize_cut_item(item: ProductionOrderItem) -> ProductionOrderItem:
    """Return a copy of ``item`` with ``actual_pieces`` settled.

    A line left without any size counts falls back to its per-size estimate
    spread over the standard grid (P, M, G, GG).
    """

    finalized = item.model_copy(deep=True)
    total = finalized.sizes.total
    if total == 0 and finalized.pieces_per_size_est > 0:
        finalized.sizes = SizeMap.uniform(finalized.pieces_per_size_est)
        finalized.actual_pieces = finalized.sizes.total
    else:
        finalized.actual_pieces = total
    return finalized


def balance_by_color(items: Sequence[ProductionOrderItem]) -> list[ProductionOrderItem]:
    """One balance line per color: copies of ``items`` with same-color sizes summed."""

    merged: dict[str, ProductionOrderItem] = {}
    for item in items:
        line = merged.get(item.color)
        if line is None:
            merged[item.color] = item.model_copy(deep=True)
            continue
        line.sizes = SizeMap(
            **{size.value: count + item.sizes.get(size) for size, count in line.sizes.counts()}
        )
        line.actual_pieces = line.sizes.total
        line.rolls_used += item.rolls_used
        line.estimated_pieces += item.estimated_pieces
    return list(merged.values())


async def confirm_cutting(
    uow: UnitOfWork,
    order_id: str,
    finalized_items: Sequence[ProductionOrderItem] | None = None,
    *,
    expected_updated_at: datetime | None = None,
) -> ProductionOrder:
    """Record the actual cut of a planned order and debit the fabric it used.

    On ``InsufficientStockError`` neither the ledger nor the order changes.
    If the order write fails after the debit went through, a transactional
    unit of work undoes both on rollback; one that cannot roll back gets the
    debit credited back before the error propagates.  Same-color lines share
    one balance line.
    """

    async with order_lock(order_id):
        order = await uow.orders.get(order_id, for_update=True)
        if order is None:
            raise NotFoundError("order", order_id)
        ensure_expected_timestamp(order.updated_at, expected_updated_at)
        if order.status != OrderStatus.PLANNED:
            raise InvalidTransitionError(order_id, order.status.value, "be cut")

        source = list(finalized_items) if finalized_items is not None else order.items
        if not source:
            raise ValidationFailure("An order needs at least one item to be cut.")
        items = [finalize_cut_item(item) for item in source]
        if sum(item.actual_pieces for item in items) == 0:
            raise ValidationFailure("A cut must produce at least one piece.")

        usage = aggregate_fabric_usage(items)
        ledger = FabricLedger(uow.fabrics)
        debited = await ledger.debit(usage)

        order.items = items
        order.active_cutting_items = balance_by_color(items)
        order.updated_at = utcnow()
        advance_status(order)
        try:
            await uow.orders.update(order)
        except Exception:
            logger.bind(order_id=order_id).exception("cutting_order_write_failed")
            if not uow.compensates_on_failure:
                # the debit is undone by the transaction rollback
                raise
            await ledger.credit({key: rolls for key, rolls in usage.items() if rolls > 0})
            logger.bind(order_id=order_id, fabrics=len(debited)).warning("cutting_compensated")
            raise

        logger.bind(
            order_id=order_id,
            pieces=sum(item.actual_pieces for item in items),
            rolls=sum(usage.values()),
        ).info("cutting_confirmed")
        return order
