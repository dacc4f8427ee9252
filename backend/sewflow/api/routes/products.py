"""Product reference endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from sewflow.api.deps import get_uow, run_in_unit
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.order import ProductionOrderItem
from sewflow.schemas.product import ProductReference, ProductReferencePayload
from sewflow.services import catalog
from sewflow.services.orders import plan_items_from_reference

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductReference])
async def list_products(uow: UnitOfWork = Depends(get_uow)) -> List[ProductReference]:
    return sorted(await uow.products.list(), key=lambda product: product.code)


@router.get("/{product_id}", response_model=ProductReference)
async def get_product(product_id: str, uow: UnitOfWork = Depends(get_uow)) -> ProductReference:
    return await catalog.get_product(uow, product_id)


@router.get("/{product_id}/planned-items", response_model=List[ProductionOrderItem])
async def get_planned_items(
    product_id: str, uow: UnitOfWork = Depends(get_uow)
) -> List[ProductionOrderItem]:
    """Blank order lines for every default color of the reference."""

    product = await catalog.get_product(uow, product_id)
    return plan_items_from_reference(product)


@router.post("", response_model=ProductReference, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductReferencePayload, uow: UnitOfWork = Depends(get_uow)
) -> ProductReference:
    return await run_in_unit(uow, lambda: catalog.save_product(uow, payload))


@router.put("/{product_id}", response_model=ProductReference)
async def update_product(
    product_id: str, payload: ProductReferencePayload, uow: UnitOfWork = Depends(get_uow)
) -> ProductReference:
    return await run_in_unit(uow, lambda: catalog.save_product(uow, payload, product_id))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, uow: UnitOfWork = Depends(get_uow)) -> Response:
    await run_in_unit(uow, lambda: catalog.delete_product(uow, product_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
