import pytest

from factories import make_fabric, make_item, seed
from sewflow.core.errors import InsufficientStockError, NotFoundError
from sewflow.services.fabric_ledger import FabricLedger, aggregate_fabric_usage


def test_usage_is_summed_per_fabric_and_color():
    usage = aggregate_fabric_usage(
        [
            make_item(color="Azul", rolls_used=1.5),
            make_item(color="Azul", rolls_used=2),
            make_item(color="Preto", rolls_used=1),
        ]
    )
    assert usage == {("Malha", "Azul"): 3.5, ("Malha", "Preto"): 1.0}


@pytest.mark.anyio
async def test_lookup_unknown_fabric_is_none(uow):
    assert await FabricLedger(uow.fabrics).lookup("Malha", "Verde") is None


@pytest.mark.anyio
async def test_debit_reduces_every_key(uow):
    await seed(uow, fabrics=[make_fabric(color="Azul", stock_rolls=5), make_fabric(color="Preto", stock_rolls=2)])
    ledger = FabricLedger(uow.fabrics)

    await ledger.debit({("Malha", "Azul"): 2, ("Malha", "Preto"): 2})

    assert await ledger.lookup("Malha", "Azul") == 3
    assert await ledger.lookup("Malha", "Preto") == 0


@pytest.mark.anyio
async def test_debit_is_all_or_nothing(uow):
    await seed(uow, fabrics=[make_fabric(color="Azul", stock_rolls=5), make_fabric(color="Preto", stock_rolls=1)])
    ledger = FabricLedger(uow.fabrics)

    with pytest.raises(InsufficientStockError) as excinfo:
        await ledger.debit({("Malha", "Azul"): 2, ("Malha", "Preto"): 2, ("Malha", "Verde"): 1})

    shortfalls = {(s.color, s.required, s.available) for s in excinfo.value.shortfalls}
    assert shortfalls == {("Preto", 2, 1), ("Verde", 1, 0)}
    assert await ledger.lookup("Malha", "Azul") == 5
    assert await ledger.lookup("Malha", "Preto") == 1
    assert excinfo.value.status_code == 409


@pytest.mark.anyio
async def test_zero_rolls_need_no_fabric(uow):
    ledger = FabricLedger(uow.fabrics)
    assert await ledger.debit({("Malha", "Verde"): 0}) == []


@pytest.mark.anyio
async def test_credit_adds_rolls_and_requires_known_fabric(uow):
    await seed(uow, fabrics=[make_fabric(stock_rolls=1)])
    ledger = FabricLedger(uow.fabrics)

    await ledger.credit({("Malha", "Azul"): 2.5})
    assert await ledger.lookup("Malha", "Azul") == 3.5

    with pytest.raises(NotFoundError):
        await ledger.credit({("Malha", "Verde"): 1})
