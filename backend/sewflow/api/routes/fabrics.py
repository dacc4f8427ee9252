"""Fabric stock endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from sewflow.api.deps import get_uow, run_in_unit
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.fabric import FabricPayload, FabricStock, FabricStockEntryPayload
from sewflow.services import catalog

router = APIRouter(prefix="/fabrics", tags=["fabrics"])


@router.get("", response_model=List[FabricStock])
async def list_fabrics(uow: UnitOfWork = Depends(get_uow)) -> List[FabricStock]:
    fabrics = await uow.fabrics.list()
    return sorted(fabrics, key=lambda fabric: (fabric.name, fabric.color))


@router.get("/{fabric_id}", response_model=FabricStock)
async def get_fabric(fabric_id: str, uow: UnitOfWork = Depends(get_uow)) -> FabricStock:
    return await catalog.get_fabric(uow, fabric_id)


@router.post("", response_model=FabricStock, status_code=status.HTTP_201_CREATED)
async def create_fabric(payload: FabricPayload, uow: UnitOfWork = Depends(get_uow)) -> FabricStock:
    return await run_in_unit(uow, lambda: catalog.create_fabric(uow, payload))


@router.put("/{fabric_id}", response_model=FabricStock)
async def update_fabric(
    fabric_id: str, payload: FabricPayload, uow: UnitOfWork = Depends(get_uow)
) -> FabricStock:
    return await run_in_unit(uow, lambda: catalog.update_fabric(uow, fabric_id, payload))


@router.post("/{fabric_id}/entries", response_model=FabricStock)
async def receive_fabric(
    fabric_id: str, payload: FabricStockEntryPayload, uow: UnitOfWork = Depends(get_uow)
) -> FabricStock:
    return await run_in_unit(uow, lambda: catalog.receive_fabric(uow, fabric_id, payload.rolls))


@router.delete("/{fabric_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fabric(fabric_id: str, uow: UnitOfWork = Depends(get_uow)) -> Response:
    await run_in_unit(uow, lambda: catalog.delete_fabric(uow, fabric_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
