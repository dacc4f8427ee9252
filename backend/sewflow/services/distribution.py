"""Hand cut pieces to a seamstress: one new split, a smaller cut balance."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Sequence

from loguru import logger

from sewflow.core.clock import new_id, utcnow
from sewflow.core.concurrency import order_lock
from sewflow.core.config import settings
from sewflow.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    Overdraw,
    OverDistributionError,
    ValidationFailure,
)
from sewflow.core.optimistic_lock import ensure_expected_timestamp
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.order import (
    DistributionLine,
    OrderSplit,
    OrderStatus,
    ProductionOrder,
    ProductionOrderItem,
)
from sewflow.services.order_status import advance_status

OverdrawPolicy = Literal["reject", "clamp"]


def _merge_lines(lines: Sequence[DistributionLine]) -> dict[str, DistributionLine]:
    """Collapse repeated colors into one line each, summing their sizes."""

    merged: dict[str, DistributionLine] = {}
    for line in lines:
        existing = merged.get(line.color)
        if existing is None:
            merged[line.color] = line.model_copy(deep=True)
            continue
        for size, count in line.sizes.counts():
            setattr(existing.sizes, size.value, existing.sizes.get(size) + count)
    return merged


def _check_overdraws(order: ProductionOrder, lines: dict[str, DistributionLine]) -> list[Overdraw]:
    overdraws: list[Overdraw] = []
    for color, line in lines.items():
        active = order.active_line(color)
        assert active is not None
        for size, requested, available in active.sizes.shortfalls(line.sizes):
            overdraws.append(
                Overdraw(color=color, size=size.value, requested=requested, available=available)
            )
    return overdraws


def _split_item(order: ProductionOrder, line: DistributionLine) -> ProductionOrderItem:
    planned = order.planned_line(line.color) or order.active_line(line.color)
    return ProductionOrderItem(
        product_id=planned.product_id if planned else "",
        reference_code=planned.reference_code if planned else "",
        color=line.color,
        color_hex=planned.color_hex if planned else None,
        rolls_used=0,
        pieces_per_size_est=0,
        estimated_pieces=0,
        actual_pieces=line.sizes.total,
        sizes=line.sizes.model_copy(),
        fabric_name=planned.fabric_name if planned else "",
    )


async def distribute(
    uow: UnitOfWork,
    order_id: str,
    lines: Sequence[DistributionLine],
    seamstress_id: str,
    *,
    expected_updated_at: datetime | None = None,
    overdraw_policy: OverdrawPolicy | None = None,
) -> ProductionOrder:
    """Send ``lines`` (color -> pieces per size) of the cut balance to a seamstress.

    Appends one SEWING split and shrinks ``active_cutting_items`` by what was
    sent.  The order moves to SEWING only when that leaves nothing to hand
    out.  Requests beyond the remaining balance are refused under the
    ``reject`` policy and floored at zero under ``clamp``.
    """

    policy = overdraw_policy or settings.OVERDRAW_POLICY

    async with order_lock(order_id):
        order = await uow.orders.get(order_id, for_update=True)
        if order is None:
            raise NotFoundError("order", order_id)
        ensure_expected_timestamp(order.updated_at, expected_updated_at)
        if order.status not in (OrderStatus.CUTTING, OrderStatus.SEWING) or order.remaining_pieces == 0:
            raise InvalidTransitionError(order_id, order.status.value, "be distributed")

        seamstress = await uow.seamstresses.get(seamstress_id)
        if seamstress is None:
            raise NotFoundError("seamstress", seamstress_id)

        merged = _merge_lines(lines)
        if sum(line.sizes.total for line in merged.values()) == 0:
            raise ValidationFailure("A distribution must send at least one piece.")
        unknown = sorted(color for color in merged if order.active_line(color) is None)
        if unknown:
            raise ValidationFailure(
                f"Colors {unknown} have no cut balance on order {order_id!r}."
            )

        overdraws = _check_overdraws(order, merged)
        if overdraws:
            if policy == "reject":
                raise OverDistributionError(overdraws)
            logger.bind(
                order_id=order_id,
                overdraws=[(o.color, o.size, o.requested, o.available) for o in overdraws],
            ).warning("over_distribution_clamped")

        now = utcnow()
        sent = [line for line in merged.values() if line.sizes.total > 0]
        split = OrderSplit(
            id=new_id(),
            seamstress_id=seamstress.id,
            seamstress_name=seamstress.name,
            status=OrderStatus.SEWING,
            items=[_split_item(order, line) for line in sent],
            created_at=now,
        )

        for line in sent:
            active = order.active_line(line.color)
            assert active is not None
            active.sizes = active.sizes.minus_clamped(line.sizes)
            active.actual_pieces = active.sizes.total

        order.splits.append(split)
        order.updated_at = now
        advance_status(order, now)
        await uow.orders.update(order)

        logger.bind(
            order_id=order_id,
            split_id=split.id,
            seamstress_id=seamstress.id,
            pieces=split.pieces,
            remaining=order.remaining_pieces,
            status=order.status.value,
        ).info("distribution_created")
        return order
