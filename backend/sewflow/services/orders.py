"""Order planning: create, edit while planned, delete, numbering, summaries."""

from __future__ import annotations

import re

from loguru import logger

from sewflow.core.clock import utcnow
from sewflow.core.concurrency import order_lock
from sewflow.core.config import settings
from sewflow.core.errors import InvalidTransitionError, NotFoundError, ValidationFailure
from sewflow.core.optimistic_lock import ensure_expected_timestamp
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.order import (
    OrderCreatePayload,
    OrderStatus,
    OrderSummaryOut,
    OrderUpdatePayload,
    ProductionOrder,
    ProductionOrderItem,
)
from sewflow.schemas.product import ProductReference
from sewflow.services.order_status import is_cut

_NON_DIGITS = re.compile(r"\D")


def next_order_id(existing_ids: list[str]) -> str:
    """Next free numeric order number: highest numeric id + 1."""

    numbers = []
    for order_id in existing_ids:
        digits = _NON_DIGITS.sub("", order_id)
        if digits:
            numbers.append(int(digits))
    if not numbers:
        return str(settings.FIRST_ORDER_ID + len(existing_ids))
    return str(max(numbers) + 1)


def _unique_reference_codes(items: list[ProductionOrderItem]) -> list[str]:
    codes: list[str] = []
    for item in items:
        if item.reference_code and item.reference_code not in codes:
            codes.append(item.reference_code)
    return codes


def plan_items_from_reference(reference: ProductReference) -> list[ProductionOrderItem]:
    """One empty planned line per default color of a product reference."""

    return [
        ProductionOrderItem(
            product_id=reference.id,
            reference_code=reference.code,
            color=color.name,
            color_hex=color.hex,
            fabric_name=reference.default_fabric,
        )
        for color in reference.default_colors
    ]


def _apply_planning_fields(
    order: ProductionOrder,
    payload: OrderCreatePayload | OrderUpdatePayload,
) -> None:
    if not payload.items:
        raise ValidationFailure("Add at least one reference to the order.")
    codes = _unique_reference_codes(payload.items)
    order.items = [item.model_copy(deep=True) for item in payload.items]
    order.reference_code = payload.reference_code or ", ".join(codes)
    order.description = payload.description or f"Order with references: {', '.join(codes)}"
    order.fabric = payload.fabric or payload.items[0].fabric_name
    order.notes = payload.notes


async def create_order(uow: UnitOfWork, payload: OrderCreatePayload) -> ProductionOrder:
    if not payload.items:
        raise ValidationFailure("Add at least one reference to the order.")
    existing = await uow.orders.list()
    order_id = payload.id or next_order_id([order.id for order in existing])
    if any(order.id == order_id for order in existing):
        raise ValidationFailure(f"Order {order_id!r} already exists.")

    now = utcnow()
    order = ProductionOrder(
        id=order_id,
        reference_code="",
        description="",
        fabric="",
        items=[],
        created_at=payload.created_at or now,
        updated_at=now,
    )
    _apply_planning_fields(order, payload)
    await uow.orders.add(order)
    logger.bind(order_id=order.id, items=len(order.items)).info("order_created")
    return order


async def update_order(
    uow: UnitOfWork, order_id: str, payload: OrderUpdatePayload
) -> ProductionOrder:
    """Edit the planning record; only allowed before cutting."""

    async with order_lock(order_id):
        order = await uow.orders.get(order_id, for_update=True)
        if order is None:
            raise NotFoundError("order", order_id)
        ensure_expected_timestamp(order.updated_at, payload.expected_updated_at)
        if order.status != OrderStatus.PLANNED:
            raise InvalidTransitionError(order_id, order.status.value, "be edited")
        _apply_planning_fields(order, payload)
        order.updated_at = utcnow()
        await uow.orders.update(order)
        logger.bind(order_id=order_id, items=len(order.items)).info("order_updated")
        return order


async def delete_order(uow: UnitOfWork, order_id: str) -> None:
    async with order_lock(order_id):
        if not await uow.orders.delete(order_id):
            raise NotFoundError("order", order_id)
    logger.bind(order_id=order_id).info("order_deleted")


async def get_order(uow: UnitOfWork, order_id: str) -> ProductionOrder:
    order = await uow.orders.get(order_id)
    if order is None:
        raise NotFoundError("order", order_id)
    return order


def summarize_order(order: ProductionOrder) -> OrderSummaryOut:
    return OrderSummaryOut(
        order_id=order.id,
        status=order.status,
        pieces_cut=sum(item.actual_pieces for item in order.items) if is_cut(order) else 0,
        pieces_distributed=sum(split.pieces for split in order.splits),
        pieces_sewn=sum(
            split.pieces for split in order.splits if split.status == OrderStatus.FINISHED
        ),
        pieces_remaining=order.remaining_pieces,
        rolls_used=sum(float(item.rolls_used or 0) for item in order.items),
        open_splits=sum(1 for split in order.splits if split.status == OrderStatus.SEWING),
    )
