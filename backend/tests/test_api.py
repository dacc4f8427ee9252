import httpx
import pytest

from sewflow.api.deps import get_uow
from sewflow.core.config import settings
from sewflow.core.middleware import _order_id_from_path
from sewflow.main import app
from sewflow.repositories.memory import MemoryStore, MemoryUnitOfWork


@pytest.fixture
async def client(anyio_backend):
    store = MemoryStore()
    app.dependency_overrides[get_uow] = lambda: MemoryUnitOfWork(store)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


def _item(color="Azul", rolls=2, **sizes):
    return {
        "product_id": "prod-1",
        "reference_code": "REF-100",
        "color": color,
        "rolls_used": rolls,
        "sizes": sizes,
        "fabric_name": "Malha",
    }


@pytest.mark.anyio
async def test_order_lifecycle_over_http(client):
    fabric = (await client.post("/api/fabrics", json={"name": "Malha", "color": "Azul", "stock_rolls": 5})).json()
    seamstress = (await client.post("/api/seamstresses", json={"name": "Ana"})).json()

    created = await client.post("/api/orders", json={"items": [_item(P=10, M=10)]})
    assert created.status_code == 201
    order_id = created.json()["id"]
    assert created.json()["status"] == "PLANNED"

    cut = await client.post(f"/api/orders/{order_id}/cutting", json={})
    assert cut.status_code == 200
    assert cut.json()["status"] == "CUTTING"
    stock = (await client.get(f"/api/fabrics/{fabric['id']}")).json()["stock_rolls"]
    assert stock == 3

    sent = await client.post(
        f"/api/orders/{order_id}/distributions",
        json={"seamstress_id": seamstress["id"], "items": [{"color": "Azul", "sizes": {"P": 10, "M": 10}}]},
    )
    assert sent.status_code == 200
    assert sent.json()["status"] == "SEWING"
    split_id = sent.json()["splits"][0]["id"]

    done = await client.post(f"/api/orders/{order_id}/splits/{split_id}/complete")
    assert done.json()["status"] == "FINISHED"
    assert done.json()["finished_at"] is not None

    summary = (await client.get(f"/api/orders/{order_id}/summary")).json()
    assert summary["pieces_sewn"] == 20
    assert summary["pieces_remaining"] == 0


@pytest.mark.anyio
async def test_short_stock_is_a_409_with_every_shortfall(client):
    await client.post("/api/fabrics", json={"name": "Malha", "color": "Azul", "stock_rolls": 1})
    order_id = (await client.post("/api/orders", json={"items": [_item(P=5)]})).json()["id"]

    response = await client.post(f"/api/orders/{order_id}/cutting", json={})

    assert response.status_code == 409
    [shortfall] = response.json()["detail"]["shortfalls"]
    assert shortfall == {"fabric_name": "Malha", "color": "Azul", "required": 2.0, "available": 1.0}
    order = (await client.get(f"/api/orders/{order_id}")).json()
    assert order["status"] == "PLANNED"


@pytest.mark.anyio
async def test_error_mapping(client):
    assert (await client.get("/api/orders/404")).status_code == 404
    assert (await client.post("/api/orders", json={"items": []})).status_code == 400
    assert (await client.post("/api/orders", json={"items": [_item(XL=3)]})).status_code == 422

    await client.post("/api/fabrics", json={"name": "Malha", "color": "Azul", "stock_rolls": 5})
    order_id = (await client.post("/api/orders", json={"items": [_item(P=2)]})).json()["id"]
    await client.post(f"/api/orders/{order_id}/cutting", json={})

    missing_seamstress = await client.post(
        f"/api/orders/{order_id}/distributions",
        json={"seamstress_id": "nobody", "items": [{"color": "Azul", "sizes": {"P": 1}}]},
    )
    assert missing_seamstress.status_code == 404

    recut = await client.post(f"/api/orders/{order_id}/cutting", json={})
    assert recut.status_code == 409


@pytest.mark.anyio
async def test_listing_filters_by_status_and_next_id(client):
    await client.post("/api/orders", json={"id": "2001", "items": [_item(P=1)]})

    assert (await client.get("/api/orders/next-id")).json() == {"id": "2002"}
    assert [o["id"] for o in (await client.get("/api/orders", params={"status": "PLANNED"})).json()] == ["2001"]
    assert (await client.get("/api/orders", params={"status": "SEWING"})).json() == []


@pytest.mark.anyio
async def test_health_endpoints(client):
    assert (await client.get("/api/healthz")).json() == {"status": "ok"}
    assert (await client.get("/api/readyz")).json() == {"ready": True}


@pytest.mark.anyio
async def test_request_id_is_echoed_and_large_bodies_refused(client, monkeypatch):
    response = await client.get("/api/healthz", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"

    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)
    refused = await client.post("/api/orders", json={"items": [_item(P=1)]})
    assert refused.status_code == 413


def test_order_id_is_taken_from_order_paths():
    assert _order_id_from_path("/api/orders/1001/cutting") == "1001"
    assert _order_id_from_path("/api/orders/next-id") == "-"
    assert _order_id_from_path("/api/fabrics/abc") == "-"


@pytest.mark.anyio
async def test_product_reference_seeds_planned_lines(client):
    product = (
        await client.post(
            "/api/products",
            json={
                "code": "REF-7",
                "default_fabric": "Malha",
                "default_colors": [{"name": "Azul", "hex": "#1d4ed8"}, {"name": "Preto"}],
            },
        )
    ).json()

    lines = (await client.get(f"/api/products/{product['id']}/planned-items")).json()

    assert [(line["color"], line["reference_code"], line["fabric_name"]) for line in lines] == [
        ("Azul", "REF-7", "Malha"),
        ("Preto", "REF-7", "Malha"),
    ]
