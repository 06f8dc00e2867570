from helpers import create_product


def test_hq_manages_products(client, hq):
    product = create_product(client, hq)
    assert product["sku"] == "KIT-001"
    assert product["stock_status"]["status"] == "IN_STOCK"
    assert product["stock_status"]["message"] == "In Stock (10 available)"

    r = client.post("/api/v1/products", json={"sku": "Kit-001", "name": "Copy"}, headers=hq)
    assert r.status_code == 409
    assert r.json()["error"]["message"] == "Product with this SKU already exists"

    r = client.patch(f"/api/v1/products/{product['id']}", json={"price": 59.5, "is_active": False}, headers=hq)
    assert r.status_code == 200
    assert r.json()["price"] == 59.5
    assert r.json()["is_active"] is False


def test_lower_tiers_browse_but_do_not_manage(client, hq, mf, lc, tt):
    product = create_product(client, hq)
    assert client.get("/api/v1/products", headers=lc).json()["total"] == 1
    assert client.get(f"/api/v1/products/{product['id']}", headers=mf).status_code == 200

    assert client.get("/api/v1/products", headers=tt).status_code == 403
    assert client.post("/api/v1/products", json={"sku": "X", "name": "X"}, headers=mf).status_code == 403
    assert client.get("/api/v1/inventory/summary", headers=lc).status_code == 403


def test_receive_stock_records_transaction(client, hq):
    product = create_product(client, hq, stock_quantity=0)
    assert product["stock_status"]["status"] == "OUT_OF_STOCK"

    r = client.post(
        f"/api/v1/products/{product['id']}/receive-stock",
        json={"quantity": 25, "reference_id": "INV-77"},
        headers=hq,
    )
    assert r.status_code == 200
    assert r.json()["stock_quantity"] == 25

    txns = client.get("/api/v1/inventory/transactions", params={"product_id": product["id"]}, headers=hq).json()
    assert txns["total"] == 1
    row = txns["items"][0]
    assert (row["direction"], row["reason"], row["quantity"], row["reference_id"]) == (
        "IN",
        "stock_receipt",
        25,
        "INV-77",
    )


def test_summary_counts_and_value(client, hq):
    create_product(client, hq, sku="A", name="Alpha", stock_quantity=10, min_stock_level=2, cost=1.5)
    create_product(client, hq, sku="B", name="Beta", stock_quantity=2, min_stock_level=2, cost=10)
    create_product(client, hq, sku="C", name="Gamma", stock_quantity=0, min_stock_level=1, cost=3)

    body = client.get("/api/v1/inventory/summary", headers=hq).json()
    assert body["total_products"] == 3
    assert body["total_units"] == 12
    assert (body["in_stock"], body["low_stock"], body["out_of_stock"]) == (1, 1, 1)
    assert body["total_value"] == 35.0
    assert [p["sku"] for p in body["low_stock_products"]] == ["B"]
    assert [p["sku"] for p in body["out_of_stock_products"]] == ["C"]


def test_validate_is_a_dry_run(client, hq):
    product = create_product(client, hq)
    r = client.post(
        "/api/v1/inventory/validate",
        json={"items": [{"product_id": product["id"], "quantity": 11}, {"product_id": 999, "quantity": 1}]},
        headers=hq,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["valid"] is False
    assert body["errors"] == [
        "Products not found: 999",
        "Insufficient stock for Robot Kit. Required: 11, Available: 10",
    ]
    assert client.get(f"/api/v1/products/{product['id']}", headers=hq).json()["stock_quantity"] == 10


def test_adjustments_are_all_or_nothing(client, hq):
    kit = create_product(client, hq)
    book = create_product(client, hq, sku="BOOK-1", name="Workbook", stock_quantity=1, min_stock_level=0)

    r = client.post(
        "/api/v1/inventory/adjustments",
        json={"items": [{"product_id": kit["id"], "quantity": 2}, {"product_id": book["id"], "quantity": 5}]},
        headers=hq,
    )
    assert r.status_code == 409
    assert client.get(f"/api/v1/products/{kit['id']}", headers=hq).json()["stock_quantity"] == 10

    r = client.post(
        "/api/v1/inventory/adjustments",
        json={"items": [{"product_id": kit["id"], "quantity": 2}], "notes": "Damaged"},
        headers=hq,
    )
    assert r.status_code == 200
    assert r.json()["applied"][0]["stock_quantity"] == 8
    assert r.json()["warnings"] == []

    txns = client.get("/api/v1/inventory/transactions", params={"reason": "MANUAL_ADJUSTMENT"}, headers=hq).json()
    assert txns["total"] == 1
    assert txns["items"][0]["direction"] == "OUT"


def test_patch_cannot_null_product_fields(client, hq):
    product = create_product(client, hq)
    for field in ("price", "name", "min_stock_level", "is_active"):
        r = client.patch(f"/api/v1/products/{product['id']}", json={field: None}, headers=hq)
        assert r.status_code == 422, field

    r = client.patch(f"/api/v1/products/{product['id']}", json={"supplier": None}, headers=hq)
    assert r.status_code == 200
    assert r.json()["price"] == 49.99
