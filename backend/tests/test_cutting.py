import pytest

from factories import make_fabric, make_item, make_order, seed
from sewflow.core.errors import (
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    ValidationFailure,
)
from sewflow.repositories.memory import MemoryRepository
from sewflow.schemas.order import OrderStatus
from sewflow.services.cutting import confirm_cutting, finalize_cut_item


class BrokenOrderRepository(MemoryRepository):
    async def update(self, entity):
        raise RuntimeError("disk full")


@pytest.mark.anyio
async def test_cutting_debits_fabric_and_opens_balance(uow):
    await seed(uow, fabrics=[make_fabric(stock_rolls=5)], orders=[make_order()])

    order = await confirm_cutting(uow, "1001")

    assert order.status == OrderStatus.CUTTING
    assert order.active_cutting_items == order.items
    assert order.remaining_pieces == 40
    fabric = await uow.fabrics.get_by_key("Malha", "Azul")
    assert fabric.stock_rolls == 3


@pytest.mark.anyio
async def test_short_stock_rejects_and_changes_nothing(uow):
    await seed(uow, fabrics=[make_fabric(stock_rolls=1)], orders=[make_order()])

    with pytest.raises(InsufficientStockError) as excinfo:
        await confirm_cutting(uow, "1001")

    [shortfall] = excinfo.value.shortfalls
    assert (shortfall.color, shortfall.required, shortfall.available) == ("Azul", 2, 1)
    assert "Azul" in excinfo.value.message
    stored = await uow.orders.get("1001")
    assert stored.status == OrderStatus.PLANNED
    assert stored.active_cutting_items == []
    assert (await uow.fabrics.get_by_key("Malha", "Azul")).stock_rolls == 1


@pytest.mark.anyio
async def test_lines_sharing_a_fabric_are_checked_together(uow):
    items = [make_item(rolls_used=2), make_item(rolls_used=2, sizes={"P": 3})]
    await seed(uow, fabrics=[make_fabric(stock_rolls=3)], orders=[make_order(items=items)])

    with pytest.raises(InsufficientStockError):
        await confirm_cutting(uow, "1001")


@pytest.mark.anyio
async def test_balance_is_an_independent_copy(uow):
    await seed(uow, fabrics=[make_fabric()], orders=[make_order()])

    order = await confirm_cutting(uow, "1001")
    order.active_cutting_items[0].sizes.P = 0

    assert order.items[0].sizes.P == 10


@pytest.mark.anyio
async def test_confirmed_items_replace_planned_ones(uow):
    await seed(uow, fabrics=[make_fabric(stock_rolls=5)], orders=[make_order()])
    confirmed = [make_item(sizes={"P": 12, "M": 8}, rolls_used=2.5)]

    order = await confirm_cutting(uow, "1001", confirmed)

    assert order.items[0].actual_pieces == 20
    assert (await uow.fabrics.get_by_key("Malha", "Azul")).stock_rolls == 2.5


def test_line_without_sizes_falls_back_to_estimate():
    item = finalize_cut_item(make_item(sizes={}, pieces_per_size_est=6))
    assert item.sizes.P == item.sizes.GG == 6
    assert item.sizes.G1 == 0
    assert item.actual_pieces == 24


@pytest.mark.anyio
async def test_only_planned_orders_can_be_cut(uow):
    await seed(uow, fabrics=[make_fabric(stock_rolls=10)], orders=[make_order()])
    await confirm_cutting(uow, "1001")

    with pytest.raises(InvalidTransitionError):
        await confirm_cutting(uow, "1001")
    assert (await uow.fabrics.get_by_key("Malha", "Azul")).stock_rolls == 8


@pytest.mark.anyio
async def test_unknown_order_and_empty_cut(uow):
    with pytest.raises(NotFoundError):
        await confirm_cutting(uow, "404")

    await seed(uow, orders=[make_order()])
    with pytest.raises(ValidationFailure):
        await confirm_cutting(uow, "1001", [])


@pytest.mark.anyio
async def test_failed_order_write_gives_the_fabric_back(uow):
    await seed(uow, fabrics=[make_fabric(stock_rolls=5)], orders=[make_order()])
    uow.orders = BrokenOrderRepository(uow.store.orders)

    with pytest.raises(RuntimeError):
        await confirm_cutting(uow, "1001")

    assert (await uow.fabrics.get_by_key("Malha", "Azul")).stock_rolls == 5
    assert (await uow.orders.get("1001")).status == OrderStatus.PLANNED


@pytest.mark.anyio
async def test_same_color_lines_share_one_balance_line(uow):
    items = [
        make_item(sizes={"P": 10}, rolls_used=1),
        make_item(sizes={"P": 4, "M": 6}, rolls_used=1.5),
        make_item(color="Preto", sizes={"G": 2}, rolls_used=1),
    ]
    await seed(
        uow,
        fabrics=[make_fabric(stock_rolls=5), make_fabric(color="Preto", stock_rolls=5)],
        orders=[make_order(items=items)],
    )

    order = await confirm_cutting(uow, "1001")

    assert len(order.items) == 3
    assert [line.color for line in order.active_cutting_items] == ["Azul", "Preto"]
    azul = order.active_line("Azul")
    assert (azul.sizes.P, azul.sizes.M, azul.actual_pieces) == (14, 6, 20)
    assert azul.rolls_used == 2.5
    assert order.remaining_pieces == 22


@pytest.mark.anyio
async def test_cut_without_any_piece_is_refused(uow):
    await seed(uow, fabrics=[make_fabric()], orders=[make_order(items=[make_item(sizes={})])])

    with pytest.raises(ValidationFailure):
        await confirm_cutting(uow, "1001")

    assert (await uow.orders.get("1001")).status == OrderStatus.PLANNED
    assert (await uow.fabrics.get_by_key("Malha", "Azul")).stock_rolls == 5
