import anyio
import pytest

from factories import make_fabric, make_order, make_seamstress, seed
from sewflow.core.concurrency import _order_locks, order_lock
from sewflow.core.errors import InvalidTransitionError, SewflowError
from sewflow.repositories.memory import MemoryRepository
from sewflow.schemas.order import DistributionLine, OrderStatus, SizeMap
from sewflow.services.cutting import confirm_cutting
from sewflow.services.distribution import distribute
from sewflow.services.orders import delete_order


class YieldingOrderRepository(MemoryRepository):
    """Hands control back to the event loop on every read."""

    async def get(self, entity_id, *, for_update=False):
        await anyio.sleep(0)
        return await super().get(entity_id, for_update=for_update)


@pytest.mark.anyio
async def test_lock_entry_is_dropped_once_released():
    order_trail = []

    async def hold(name):
        async with order_lock("1001"):
            order_trail.append(f"{name}-in")
            await anyio.sleep(0)
            order_trail.append(f"{name}-out")

    async with anyio.create_task_group() as tg:
        tg.start_soon(hold, "a")
        tg.start_soon(hold, "b")

    assert order_trail in (
        ["a-in", "a-out", "b-in", "b-out"],
        ["b-in", "b-out", "a-in", "a-out"],
    )
    assert "1001" not in _order_locks


@pytest.mark.anyio
async def test_deleted_order_leaves_no_lock_behind(uow):
    await seed(uow, orders=[make_order()])
    await delete_order(uow, "1001")
    assert "1001" not in _order_locks


@pytest.mark.anyio
async def test_concurrent_distributions_of_one_order_are_serialized(uow):
    await seed(
        uow,
        fabrics=[make_fabric()],
        orders=[make_order()],
        seamstresses=[make_seamstress(), make_seamstress("w-2", "Bia")],
    )
    await confirm_cutting(uow, "1001")
    uow.orders = YieldingOrderRepository(uow.store.orders)
    everything = [DistributionLine(color="Azul", sizes=SizeMap(P=10, M=10, G=10, GG=10))]
    outcomes = []

    async def send(seamstress_id):
        try:
            outcomes.append(await distribute(uow, "1001", everything, seamstress_id))
        except SewflowError as exc:
            outcomes.append(exc)

    async with anyio.create_task_group() as tg:
        tg.start_soon(send, "w-1")
        tg.start_soon(send, "w-2")

    errors = [outcome for outcome in outcomes if isinstance(outcome, SewflowError)]
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidTransitionError)
    stored = await uow.orders.get("1001")
    assert len(stored.splits) == 1
    assert stored.remaining_pieces == 0
    assert stored.status == OrderStatus.SEWING
