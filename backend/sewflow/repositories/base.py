"""Repository and unit-of-work contracts the production services depend on.

The services never talk to a database or an HTTP client directly: they get a
``UnitOfWork`` exposing one repository per entity.  A write either fully
replaces/creates the stored entity or raises; a read returns the latest
persisted value or ``None``.
"""

from __future__ import annotations

from typing import Protocol, TypeVar

from sewflow.schemas.fabric import FabricStock
from sewflow.schemas.order import ProductionOrder
from sewflow.schemas.product import ProductReference
from sewflow.schemas.seamstress import Seamstress

T = TypeVar("T")


class Repository(Protocol[T]):
    async def get(self, entity_id: str, *, for_update: bool = False) -> T | None: ...

    async def list(self) -> list[T]: ...

    async def add(self, entity: T) -> T: ...

    async def update(self, entity: T) -> T: ...

    async def delete(self, entity_id: str) -> bool: ...


class FabricRepository(Repository[FabricStock], Protocol):
    async def get_by_key(
        self, name: str, color: str, *, for_update: bool = False
    ) -> FabricStock | None: ...


class UnitOfWork(Protocol):
    # True when rollback cannot undo writes, so multi-step operations must
    # compensate by hand
    compensates_on_failure: bool
    fabrics: FabricRepository
    orders: Repository[ProductionOrder]
    seamstresses: Repository[Seamstress]
    products: Repository[ProductReference]

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
