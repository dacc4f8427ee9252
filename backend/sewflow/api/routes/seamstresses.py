"""Seamstress endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from sewflow.api.deps import get_uow, run_in_unit
from sewflow.repositories.base import UnitOfWork
from sewflow.schemas.seamstress import Seamstress, SeamstressPayload
from sewflow.services import catalog

router = APIRouter(prefix="/seamstresses", tags=["seamstresses"])


@router.get("", response_model=List[Seamstress])
async def list_seamstresses(uow: UnitOfWork = Depends(get_uow)) -> List[Seamstress]:
    return sorted(await uow.seamstresses.list(), key=lambda seamstress: seamstress.name)


@router.get("/{seamstress_id}", response_model=Seamstress)
async def get_seamstress(seamstress_id: str, uow: UnitOfWork = Depends(get_uow)) -> Seamstress:
    return await catalog.get_seamstress(uow, seamstress_id)


@router.post("", response_model=Seamstress, status_code=status.HTTP_201_CREATED)
async def create_seamstress(
    payload: SeamstressPayload, uow: UnitOfWork = Depends(get_uow)
) -> Seamstress:
    return await run_in_unit(uow, lambda: catalog.save_seamstress(uow, payload))


@router.put("/{seamstress_id}", response_model=Seamstress)
async def update_seamstress(
    seamstress_id: str, payload: SeamstressPayload, uow: UnitOfWork = Depends(get_uow)
) -> Seamstress:
    return await run_in_unit(uow, lambda: catalog.save_seamstress(uow, payload, seamstress_id))


@router.delete("/{seamstress_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_seamstress(seamstress_id: str, uow: UnitOfWork = Depends(get_uow)) -> Response:
    await run_in_unit(uow, lambda: catalog.delete_seamstress(uow, seamstress_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
