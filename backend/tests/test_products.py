def test_create_and_list_products(client, supplier, create_product):
    product = create_product(supplier, name="Rice", sku="RICE-1", stock_quantity=10)
    assert product["supplier_id"] == supplier.id
    assert product["stock_quantity"] == 10

    response = client.get("/api/products", headers=supplier.headers)
    assert response.status_code == 200
    assert [p["sku"] for p in response.json()] == ["RICE-1"]

    response = client.get("/api/products?search=ric", headers=supplier.headers)
    assert len(response.json()) == 1
    response = client.get("/api/products?search=sugar", headers=supplier.headers)
    assert response.json() == []


def test_duplicate_sku(client, supplier, create_product):
    create_product(supplier, sku="DUP")
    response = client.post("/api/products", headers=supplier.headers, json={
        "name": "Other", "sku": "DUP", "price": 10,
    })
    assert response.status_code == 409
    assert response.json()["error"] == "SKU already exists"


def test_admin_needs_supplier_id(client, admin, supplier):
    body = {"name": "Eggs", "sku": "EGG", "price": 5}
    response = client.post("/api/products", headers=admin.headers, json=body)
    assert response.status_code == 400
    assert response.json()["error"] == "supplier_id is required when creating product as admin"

    response = client.post("/api/products", headers=admin.headers, json={**body, "supplier_id": supplier.id})
    assert response.status_code == 201
    assert response.json()["supplier_id"] == supplier.id


def test_products_are_scoped_to_owner(client, supplier, register, create_product):
    product = create_product(supplier)
    other = register("supplier")
    response = client.get(f"/api/products/{product['id']}", headers=other.headers)
    assert response.status_code == 404


def test_update_writes_stock_history(client, supplier, create_product):
    product = create_product(supplier, stock_quantity=5)
    response = client.put(f"/api/products/{product['id']}", headers=supplier.headers, json={
        "price": 1200, "stock_quantity": 8,
    })
    assert response.status_code == 200
    assert response.json()["price"] == 1200
    assert response.json()["stock_quantity"] == 8

    response = client.get(f"/api/products/{product['id']}/stock-history", headers=supplier.headers)
    assert response.status_code == 200
    history = response.json()
    assert [h["change_type"] for h in history] == ["manual_adjustment", "initial_stock"]
    assert history[0]["previous_stock"] == 5
    assert history[0]["new_stock"] == 8
    assert history[0]["change_amount"] == 3
    assert history[0]["product_name"] == product["name"]


def test_soft_delete_and_restore(client, supplier, create_product):
    product = create_product(supplier)
    response = client.delete(f"/api/products/{product['id']}", headers=supplier.headers)
    assert response.status_code == 200

    assert client.get(f"/api/products/{product['id']}", headers=supplier.headers).status_code == 404
    assert client.get("/api/products", headers=supplier.headers).json() == []
    listed = client.get("/api/products?include_deleted=true", headers=supplier.headers).json()
    assert listed[0]["deleted_at"] is not None

    response = client.post(f"/api/products/{product['id']}/restore", headers=supplier.headers)
    assert response.status_code == 200
    assert response.json()["deleted_at"] is None


def test_bulk_create_partial(client, supplier, create_product):
    create_product(supplier, sku="TAKEN")
    response = client.post("/api/products/bulk", headers=supplier.headers, json=[
        {"name": "A", "sku": "A-1", "price": 1, "stock_quantity": 3},
        {"name": "B", "sku": "TAKEN", "price": 1},
        {"name": "C", "price": 1},
    ])
    assert response.status_code == 206
    data = response.json()
    assert data["created"] == 1
    assert data["failed"] == 2
    assert data["errors"][0] == "Product 2: SKU TAKEN already exists"
    assert data["errors"][1].startswith("Product 3: sku")


def test_bulk_create_all_fail(client, supplier):
    response = client.post("/api/products/bulk", headers=supplier.headers, json=[{"name": "No price"}])
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "failed to create any products"
    assert len(body["details"]) == 1


def test_bulk_create_all_succeed(client, supplier):
    response = client.post("/api/products/bulk", headers=supplier.headers, json=[
        {"name": "A", "sku": "BULK-1", "price": 1},
        {"name": "B", "sku": "BULK-2", "price": 2},
    ])
    assert response.status_code == 201
    assert response.json()["created"] == 2


def test_reset_stocks(client, supplier, store, create_product):
    create_product(supplier, stock_quantity=4)
    create_product(supplier, stock_quantity=0)
    create_product(supplier, stock_quantity=9)

    response = client.post("/api/products/reset-stocks", headers=supplier.headers)
    assert response.status_code == 200
    assert response.json() == {"updated": 2}
    assert all(p["stock_quantity"] == 0 for p in client.get("/api/products", headers=supplier.headers).json())

    history = client.get("/api/stock-history?change_type=stock_reset", headers=supplier.headers).json()
    assert len(history) == 2

    response = client.post("/api/products/reset-stocks", headers=store.headers)
    assert response.status_code == 403


def test_stock_history_window(client, supplier, create_product):
    for _ in range(3):
        create_product(supplier, stock_quantity=1)
    response = client.get("/api/stock-history?limit=2", headers=supplier.headers)
    assert len(response.json()) == 2
    response = client.get("/api/stock-history?limit=5000", headers=supplier.headers)
    assert len(response.json()) == 3
