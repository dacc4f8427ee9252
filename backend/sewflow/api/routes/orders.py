"""Production order endpoints: planning CRUD and the lifecycle operations."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from sewflow.api.deps import get_uow, run_in_unit
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.order import (
    CuttingPayload,
    DistributionPayload,
    OrderCreatePayload,
    OrderStatus,
    OrderSummaryOut,
    OrderUpdatePayload,
    ProductionOrder,
)
from sewflow.services import orders as order_service
from sewflow.services.completion import complete_split
from sewflow.services.cutting import confirm_cutting
from sewflow.services.distribution import distribute

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=List[ProductionOrder])
async def list_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    uow: UnitOfWork = Depends(get_uow),
) -> List[ProductionOrder]:
    orders = await uow.orders.list()
    if status_filter is not None:
        orders = [order for order in orders if order.status == status_filter]
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


@router.get("/next-id")
async def get_next_order_id(uow: UnitOfWork = Depends(get_uow)) -> dict[str, str]:
    orders = await uow.orders.list()
    return {"id": order_service.next_order_id([order.id for order in orders])}


@router.get("/{order_id}", response_model=ProductionOrder)
async def get_order(order_id: str, uow: UnitOfWork = Depends(get_uow)) -> ProductionOrder:
    return await order_service.get_order(uow, order_id)


@router.get("/{order_id}/summary", response_model=OrderSummaryOut)
async def get_order_summary(order_id: str, uow: UnitOfWork = Depends(get_uow)) -> OrderSummaryOut:
    order = await order_service.get_order(uow, order_id)
    return order_service.summarize_order(order)


@router.post("", response_model=ProductionOrder, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreatePayload, uow: UnitOfWork = Depends(get_uow)
) -> ProductionOrder:
    return await run_in_unit(uow, lambda: order_service.create_order(uow, payload))


@router.put("/{order_id}", response_model=ProductionOrder)
async def update_order(
    order_id: str, payload: OrderUpdatePayload, uow: UnitOfWork = Depends(get_uow)
) -> ProductionOrder:
    return await run_in_unit(uow, lambda: order_service.update_order(uow, order_id, payload))


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: str, uow: UnitOfWork = Depends(get_uow)) -> Response:
    await run_in_unit(uow, lambda: order_service.delete_order(uow, order_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{order_id}/cutting", response_model=ProductionOrder)
async def confirm_order_cutting(
    order_id: str, payload: CuttingPayload, uow: UnitOfWork = Depends(get_uow)
) -> ProductionOrder:
    return await run_in_unit(
        uow,
        lambda: confirm_cutting(
            uow, order_id, payload.items, expected_updated_at=payload.expected_updated_at
        ),
    )


@router.post("/{order_id}/distributions", response_model=ProductionOrder)
async def distribute_order(
    order_id: str, payload: DistributionPayload, uow: UnitOfWork = Depends(get_uow)
) -> ProductionOrder:
    return await run_in_unit(
        uow,
        lambda: distribute(
            uow,
            order_id,
            payload.items,
            payload.seamstress_id,
            expected_updated_at=payload.expected_updated_at,
        ),
    )


@router.post("/{order_id}/splits/{split_id}/complete", response_model=ProductionOrder)
async def complete_order_split(
    order_id: str, split_id: str, uow: UnitOfWork = Depends(get_uow)
) -> ProductionOrder:
    return await run_in_unit(uow, lambda: complete_split(uow, order_id, split_id))
