"""SQLAlchemy-backed repositories sharing one ``AsyncSession``.

All repositories of a ``SqlUnitOfWork`` write through the same session, so the
fabric debit and the order update of a cutting confirmation commit (or roll
back) together.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sewflow.core.config import settings
from sewflow.models import PrdFabric, PrdOrder, PrdProduct, PrdSeamstress
from sewflow.models.base import Base
from sewflow.schemas.fabric import FabricStock
from sewflow.schemas.order import ProductionOrder
from sewflow.schemas.product import ProductReference
from sewflow.schemas.seamstress import Seamstress

M = TypeVar("M", bound=BaseModel)
R = TypeVar("R", bound=Base)


class SqlRepository(Generic[M, R]):
    """Maps one schema type onto one ORM table through two converter callables."""

    def __init__(
        self,
        session: AsyncSession,
        row_type: type[R],
        to_entity: Callable[[R], M],
        to_values: Callable[[M], dict[str, Any]],
    ) -> None:
        self.session = session
        self.row_type = row_type
        self._to_entity = to_entity
        self._to_values = to_values

    async def _row(self, entity_id: str, *, for_update: bool = False) -> R | None:
        stmt = select(self.row_type).where(self.row_type.id == entity_id)  # type: ignore[attr-defined]
        if for_update:
            stmt = stmt.with_for_update(nowait=settings.DB_NOWAIT_LOCKS)
        return await self.session.scalar(stmt)

    async def get(self, entity_id: str, *, for_update: bool = False) -> M | None:
        row = await self._row(entity_id, for_update=for_update)
        return self._to_entity(row) if row is not None else None

    async def list(self) -> list[M]:
        result = await self.session.execute(
            select(self.row_type).order_by(self.row_type.id)  # type: ignore[attr-defined]
        )
        return [self._to_entity(row) for row in result.scalars().all()]

    async def add(self, entity: M) -> M:
        self.session.add(self.row_type(**self._to_values(entity)))
        await self.session.flush()
        return entity

    async def update(self, entity: M) -> M:
        row = await self._row(entity.id)  # type: ignore[attr-defined]
        if row is None:
            raise KeyError(entity.id)  # type: ignore[attr-defined]
        for column, value in self._to_values(entity).items():
            setattr(row, column, value)
        await self.session.flush()
        return entity

    async def delete(self, entity_id: str) -> bool:
        row = await self._row(entity_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True


def _fabric_entity(row: PrdFabric) -> FabricStock:
    return FabricStock(
        id=row.id,
        name=row.name,
        color=row.color,
        color_hex=row.color_hex,
        stock_rolls=row.stock_rolls,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _order_values(order: ProductionOrder) -> dict[str, Any]:
    return {
        "id": order.id,
        "reference_code": order.reference_code,
        "status": order.status.value,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "document": order.model_dump(mode="json"),
    }


class SqlFabricRepository(SqlRepository[FabricStock, PrdFabric]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PrdFabric, _fabric_entity, lambda fabric: fabric.model_dump())

    async def get_by_key(
        self, name: str, color: str, *, for_update: bool = False
    ) -> FabricStock | None:
        stmt = select(PrdFabric).where(PrdFabric.name == name, PrdFabric.color == color)
        if for_update:
            stmt = stmt.with_for_update(nowait=settings.DB_NOWAIT_LOCKS)
        row = await self.session.scalar(stmt)
        return _fabric_entity(row) if row is not None else None


class SqlUnitOfWork:
    compensates_on_failure = False

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.fabrics = SqlFabricRepository(session)
        self.orders: SqlRepository[ProductionOrder, PrdOrder] = SqlRepository(
            session,
            PrdOrder,
            lambda row: ProductionOrder.model_validate(row.document),
            _order_values,
        )
        self.seamstresses: SqlRepository[Seamstress, PrdSeamstress] = SqlRepository(
            session,
            PrdSeamstress,
            lambda row: Seamstress.model_validate(row, from_attributes=True),
            lambda seamstress: seamstress.model_dump(),
        )
        self.products: SqlRepository[ProductReference, PrdProduct] = SqlRepository(
            session,
            PrdProduct,
            lambda row: ProductReference.model_validate(row, from_attributes=True),
            lambda product: product.model_dump(mode="json"),
        )

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
