"""Split completion and order closure."""

from __future__ import annotations

from loguru import logger

from sewflow.core.clock import utcnow
from sewflow.core.concurrency import order_lock
from sewflow.core.errors import InvalidTransitionError, NotFoundError
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.order import OrderStatus, ProductionOrder
from sewflow.services.order_status import advance_status


async def complete_split(uow: UnitOfWork, order_id: str, split_id: str) -> ProductionOrder:
    """Mark one split FINISHED; close the order when nothing is left open."""

    async with order_lock(order_id):
        order = await uow.orders.get(order_id, for_update=True)
        if order is None:
            raise NotFoundError("order", order_id)
        split = order.find_split(split_id)
        if split is None:
            raise NotFoundError("split", split_id)
        if split.status != OrderStatus.SEWING:
            raise InvalidTransitionError(order_id, f"split {split_id} {split.status.value}", "be finished again")

        now = utcnow()
        split.status = OrderStatus.FINISHED
        split.finished_at = now
        order.updated_at = now
        previous = order.status
        advance_status(order, now)
        await uow.orders.update(order)

        logger.bind(order_id=order_id, split_id=split_id, pieces=split.pieces).info("split_completed")
        if order.status == OrderStatus.FINISHED and previous != OrderStatus.FINISHED:
            logger.bind(order_id=order_id).info("order_finished")
        return order
