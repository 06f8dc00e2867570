import asyncio
from datetime import datetime, timezone

from franchise_api.db.models import Order

from helpers import create_product


def _order(client, headers, product, quantity=2, **extra):
    return client.post(
        "/api/v1/orders",
        json={"lines": [{"product_id": product["id"], "quantity": quantity}], **extra},
        headers=headers,
    )


def _move(client, headers, order, status, **extra):
    return client.post(f"/api/v1/orders/{order['id']}/status", json={"status": status, **extra}, headers=headers)


def test_lc_places_order_at_catalog_prices(client, hq, lc, ids):
    product = create_product(client, hq, price=12.5)
    r = _order(client, lc, product, quantity=3, notes="Spring term")
    assert r.status_code == 201, r.text
    order = r.json()
    year = datetime.now(timezone.utc).year
    assert order["order_number"] == f"ORD-{year}-00001"
    assert order["status"] == "PENDING"
    assert (order["lc_id"], order["mf_id"], order["hq_id"]) == (ids["lc"], ids["mf"], ids["hq"])
    assert order["subtotal"] == 37.5
    assert order["tax"] == 0
    assert order["total"] == 37.5
    assert order["lines"][0]["unit_price"] == 12.5

    second = _order(client, lc, product).json()
    assert second["order_number"] == f"ORD-{year}-00002"


def test_tax_rate_is_configurable(client, hq, lc, monkeypatch):
    monkeypatch.setenv("ORDER_TAX_RATE", "0.1")
    product = create_product(client, hq, price=19.99)
    order = _order(client, lc, product, quantity=3).json()
    assert order["subtotal"] == 59.97
    assert order["tax"] == 6.0
    assert order["total"] == 65.97


def test_order_placement_rules(client, hq, tt, lc):
    product = create_product(client, hq)
    assert _order(client, hq, product).status_code == 403
    assert _order(client, tt, product).status_code == 403

    client.patch(f"/api/v1/products/{product['id']}", json={"is_active": False}, headers=hq)
    r = _order(client, lc, product)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid or inactive products"


def test_order_lifecycle_ships_stock(client, hq, mf, lc):
    product = create_product(client, hq, stock_quantity=10)
    order = _order(client, lc, product, quantity=4).json()

    r = _move(client, lc, order, "PROCESSING")
    assert r.status_code == 403

    assert _move(client, mf, order, "processing").status_code == 200

    r = _move(client, mf, order, "SHIPPED")
    assert r.status_code == 403

    r = _move(client, hq, order, "SHIPPED", notes="Tracking 1Z999")
    assert r.status_code == 200
    assert r.json()["notes"] == "Tracking 1Z999"
    assert client.get(f"/api/v1/products/{product['id']}", headers=hq).json()["stock_quantity"] == 6

    r = _move(client, lc, order, "CANCELLED")
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Cannot change order status from SHIPPED to CANCELLED"

    r = _move(client, lc, order, "DELIVERED")
    assert r.status_code == 200
    assert r.json()["status"] == "DELIVERED"

    txns = client.get("/api/v1/inventory/transactions", params={"reason": "order_fulfillment"}, headers=hq).json()
    assert txns["items"][0]["reference_id"] == order["order_number"]


def test_shipping_without_stock_leaves_order_processing(client, hq, lc):
    product = create_product(client, hq, stock_quantity=1)
    order = _order(client, lc, product, quantity=3).json()
    _move(client, hq, order, "PROCESSING")

    r = _move(client, hq, order, "SHIPPED")
    assert r.status_code == 409
    assert client.get(f"/api/v1/orders/{order['id']}", headers=hq).json()["status"] == "PROCESSING"


def test_mf_orders_and_scoping(client, hq, mf, lc):
    product = create_product(client, hq)
    mf_order = _order(client, mf, product).json()
    assert mf_order["lc_id"] is None
    lc_order = _order(client, lc, product).json()

    assert client.get("/api/v1/orders", headers=mf).json()["total"] == 2
    own = client.get("/api/v1/orders", headers=lc).json()
    assert [o["id"] for o in own["items"]] == [lc_order["id"]]
    assert client.get(f"/api/v1/orders/{mf_order['id']}", headers=lc).status_code == 403

    assert client.get("/api/v1/orders", params={"status": "pending"}, headers=hq).json()["total"] == 2

    # the MF placed this one, so it may confirm delivery
    _move(client, hq, mf_order, "PROCESSING")
    _move(client, hq, mf_order, "SHIPPED")
    assert _move(client, mf, mf_order, "DELIVERED").status_code == 200


def test_order_numbers_continue_past_five_digits(client, hq, lc, ids, session_maker):
    year = datetime.now(timezone.utc).year

    async def issued(*numbers):
        async with session_maker() as session:
            session.add_all(
                Order(order_number=f"ORD-{year}-{n}", lc_id=ids["lc"], mf_id=ids["mf"], hq_id=ids["hq"])
                for n in numbers
            )
            await session.commit()

    asyncio.run(issued("99998", "99999", "100000"))
    product = create_product(client, hq)
    order = _order(client, lc, product).json()
    assert order["order_number"] == f"ORD-{year}-100001"
