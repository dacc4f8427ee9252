"""In-process repositories.

Used by the ``memory`` storage backend and as the fakes in tests.  Entities are
copied on the way in and on the way out so that callers mutating a returned
object never change what is stored, the same as with a real database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pydantic import BaseModel

from sewflow.schemas.fabric import FabricStock
from sewflow.schemas.order import ProductionOrder
from sewflow.schemas.product import ProductReference
from sewflow.schemas.seamstress import Seamstress

M = TypeVar("M", bound=BaseModel)


class MemoryRepository(Generic[M]):
    def __init__(self, rows: dict[str, M] | None = None) -> None:
        self.rows: dict[str, M] = rows if rows is not None else {}

    async def get(self, entity_id: str, *, for_update: bool = False) -> M | None:
        row = self.rows.get(entity_id)
        return row.model_copy(deep=True) if row is not None else None

    async def list(self) -> list[M]:
        return [row.model_copy(deep=True) for row in self.rows.values()]

    async def add(self, entity: M) -> M:
        self.rows[entity.id] = entity.model_copy(deep=True)  # type: ignore[attr-defined]
        return entity

    async def update(self, entity: M) -> M:
        entity_id = entity.id  # type: ignore[attr-defined]
        if entity_id not in self.rows:
            raise KeyError(entity_id)
        self.rows[entity_id] = entity.model_copy(deep=True)
        return entity

    async def delete(self, entity_id: str) -> bool:
        return self.rows.pop(entity_id, None) is not None


class MemoryFabricRepository(MemoryRepository[FabricStock]):
    async def get_by_key(
        self, name: str, color: str, *, for_update: bool = False
    ) -> FabricStock | None:
        for row in self.rows.values():
            if row.name == name and row.color == color:
                return row.model_copy(deep=True)
        return None


@dataclass
class MemoryStore:
    """Backing dictionaries shared by every unit of work of one process."""

    fabrics: dict[str, FabricStock] = field(default_factory=dict)
    orders: dict[str, ProductionOrder] = field(default_factory=dict)
    seamstresses: dict[str, Seamstress] = field(default_factory=dict)
    products: dict[str, ProductReference] = field(default_factory=dict)


class MemoryUnitOfWork:
    """Unit of work over a ``MemoryStore``.

    Writes land immediately, so ``rollback`` cannot undo them; the cutting
    saga compensates explicitly instead.
    """

    compensates_on_failure = True

    def __init__(self, store: MemoryStore | None = None) -> None:
        self.store = store or MemoryStore()
        self.fabrics = MemoryFabricRepository(self.store.fabrics)
        self.orders: MemoryRepository[ProductionOrder] = MemoryRepository(self.store.orders)
        self.seamstresses: MemoryRepository[Seamstress] = MemoryRepository(self.store.seamstresses)
        self.products: MemoryRepository[ProductReference] = MemoryRepository(self.store.products)
        self.committed = 0

    async def commit(self) -> None:
        self.committed += 1

    async def rollback(self) -> None:
        return None
