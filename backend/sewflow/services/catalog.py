"""Master data: fabrics, seamstresses and product references."""

from __future__ import annotations

from loguru import logger

from sewflow.core.clock import new_id, utcnow
from sewflow.core.errors import NotFoundError, ValidationFailure
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.fabric import FabricPayload, FabricStock
from sewflow.schemas.product import ProductReference, ProductReferencePayload
from sewflow.schemas.seamstress import Seamstress, SeamstressPayload
from sewflow.services.fabric_ledger import FabricLedger


# ---------------------------
# Fabrics
# ---------------------------
async def get_fabric(uow: UnitOfWork, fabric_id: str) -> FabricStock:
    fabric = await uow.fabrics.get(fabric_id)
    if fabric is None:
        raise NotFoundError("fabric", fabric_id)
    return fabric


async def create_fabric(uow: UnitOfWork, payload: FabricPayload) -> FabricStock:
    if await uow.fabrics.get_by_key(payload.name, payload.color) is not None:
        raise ValidationFailure(f'Fabric "{payload.name} - {payload.color}" already exists.')
    now = utcnow()
    fabric = FabricStock(id=new_id(), created_at=now, updated_at=now, **payload.model_dump())
    await uow.fabrics.add(fabric)
    logger.bind(fabric_id=fabric.id, stock_rolls=fabric.stock_rolls).info("fabric_created")
    return fabric


async def update_fabric(uow: UnitOfWork, fabric_id: str, payload: FabricPayload) -> FabricStock:
    fabric = await get_fabric(uow, fabric_id)
    clash = await uow.fabrics.get_by_key(payload.name, payload.color)
    if clash is not None and clash.id != fabric_id:
        raise ValidationFailure(f'Fabric "{payload.name} - {payload.color}" already exists.')
    updated = fabric.model_copy(update={**payload.model_dump(), "updated_at": utcnow()})
    await uow.fabrics.update(updated)
    return updated


async def receive_fabric(uow: UnitOfWork, fabric_id: str, rolls: float) -> FabricStock:
    """Book a stock entry of ``rolls`` for one fabric."""

    if rolls <= 0:
        raise ValidationFailure("A stock entry must add a positive number of rolls.")
    fabric = await get_fabric(uow, fabric_id)
    [updated] = await FabricLedger(uow.fabrics).credit({fabric.key: rolls})
    return updated


async def delete_fabric(uow: UnitOfWork, fabric_id: str) -> None:
    if not await uow.fabrics.delete(fabric_id):
        raise NotFoundError("fabric", fabric_id)


# ---------------------------
# Seamstresses
# ---------------------------
async def get_seamstress(uow: UnitOfWork, seamstress_id: str) -> Seamstress:
    seamstress = await uow.seamstresses.get(seamstress_id)
    if seamstress is None:
        raise NotFoundError("seamstress", seamstress_id)
    return seamstress


async def save_seamstress(
    uow: UnitOfWork, payload: SeamstressPayload, seamstress_id: str | None = None
) -> Seamstress:
    if seamstress_id is None:
        seamstress = Seamstress(id=new_id(), **payload.model_dump())
        return await uow.seamstresses.add(seamstress)
    await get_seamstress(uow, seamstress_id)
    return await uow.seamstresses.update(Seamstress(id=seamstress_id, **payload.model_dump()))


async def delete_seamstress(uow: UnitOfWork, seamstress_id: str) -> None:
    if not await uow.seamstresses.delete(seamstress_id):
        raise NotFoundError("seamstress", seamstress_id)


# ---------------------------
# Product references
# ---------------------------
async def get_product(uow: UnitOfWork, product_id: str) -> ProductReference:
    product = await uow.products.get(product_id)
    if product is None:
        raise NotFoundError("product", product_id)
    return product


async def save_product(
    uow: UnitOfWork, payload: ProductReferencePayload, product_id: str | None = None
) -> ProductReference:
    if product_id is None:
        return await uow.products.add(ProductReference(id=new_id(), **payload.model_dump()))
    await get_product(uow, product_id)
    return await uow.products.update(ProductReference(id=product_id, **payload.model_dump()))


async def delete_product(uow: UnitOfWork, product_id: str) -> None:
    if not await uow.products.delete(product_id):
        raise NotFoundError("product", product_id)
