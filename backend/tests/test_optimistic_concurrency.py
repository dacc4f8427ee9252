from datetime import timedelta

import pytest

from factories import make_fabric, make_item, make_order, make_seamstress, seed
from sewflow.core.errors import ConflictError
from sewflow.core.optimistic_lock import ensure_expected_timestamp
from sewflow.schemas.order import DistributionLine, OrderUpdatePayload, SizeMap
from sewflow.services.cutting import confirm_cutting
from sewflow.services.distribution import distribute
from sewflow.services.orders import update_order


def test_matching_or_missing_timestamp_passes():
    order = make_order()
    ensure_expected_timestamp(order.updated_at, order.updated_at)
    ensure_expected_timestamp(order.updated_at, None)


def test_stale_timestamp_raises_conflict():
    order = make_order()
    with pytest.raises(ConflictError) as excinfo:
        ensure_expected_timestamp(order.updated_at + timedelta(seconds=5), order.updated_at)
    assert excinfo.value.status_code == 409
    assert "updated" in excinfo.value.detail.lower()


@pytest.mark.anyio
async def test_stale_order_edit_is_rejected(uow):
    order = make_order()
    await seed(uow, orders=[order])
    payload = OrderUpdatePayload(
        items=[make_item(color="Preto")],
        expected_updated_at=order.updated_at - timedelta(minutes=1),
    )

    with pytest.raises(ConflictError):
        await update_order(uow, order.id, payload)

    stored = await uow.orders.get(order.id)
    assert [item.color for item in stored.items] == ["Azul"]


@pytest.mark.anyio
async def test_stale_cutting_leaves_stock_untouched(uow):
    order = make_order()
    await seed(uow, fabrics=[make_fabric(stock_rolls=5)], orders=[order])

    with pytest.raises(ConflictError):
        await confirm_cutting(
            uow, order.id, expected_updated_at=order.updated_at + timedelta(seconds=1)
        )

    fabric = await uow.fabrics.get_by_key("Malha", "Azul")
    assert fabric.stock_rolls == 5


@pytest.mark.anyio
async def test_distribution_with_previous_version_is_rejected(uow):
    order = make_order()
    await seed(uow, fabrics=[make_fabric()], orders=[order], seamstresses=[make_seamstress()])
    cut = await confirm_cutting(uow, order.id)
    line = DistributionLine(color="Azul", sizes=SizeMap(P=1))

    first = await distribute(uow, order.id, [line], "w-1", expected_updated_at=cut.updated_at)
    assert first.remaining_pieces == 39

    # second client still holds the post-cutting version
    with pytest.raises(ConflictError):
        await distribute(uow, order.id, [line], "w-1", expected_updated_at=cut.updated_at)
