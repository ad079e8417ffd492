from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from trading_road.api.endpoints.orders.messages import is_messaging_closed
from trading_road.db.session import SessionLocal
from trading_road.models.product import Product
from trading_road.models.stock_history import CHANGE_ORDER_RESERVED
from trading_road.services.stock import adjust_stock


@pytest.fixture
def catalog(supplier, create_product):
    return create_product(supplier, name="Rice 25kg", price=1000, stock_quantity=20)


def _draft(client, store, supplier):
    response = client.post("/api/orders/draft", headers=store.headers, json={"supplier_id": supplier.id})
    assert response.status_code in (200, 201), response.text
    return response.json()


def _stock(client, supplier, product_id):
    return client.get(f"/api/products/{product_id}", headers=supplier.headers).json()["stock_quantity"]


def _submitted_order(client, store, supplier, product, quantity=6, **submit):
    order = _draft(client, store, supplier)
    client.post(f"/api/orders/{order['id']}/items", headers=store.headers,
                json={"product_id": product["id"], "quantity": quantity})
    body = {"payment_method": "cash_on_delivery", "delivery_option": "pickup"}
    body.update(submit)
    response = client.post(f"/api/orders/{order['id']}/submit", headers=store.headers, json=body)
    assert response.status_code == 200, response.text
    return response.json()


def test_draft_is_reused(client, store, supplier):
    response = client.post("/api/orders/draft", headers=store.headers, json={"supplier_id": supplier.id})
    assert response.status_code == 201
    first = response.json()
    assert first["status"] == "draft"

    response = client.post("/api/orders/draft", headers=store.headers, json={"supplier_id": supplier.id})
    assert response.status_code == 200
    assert response.json()["id"] == first["id"]

    response = client.get(f"/api/orders/draft?supplier_id={supplier.id}", headers=store.headers)
    assert response.json()["id"] == first["id"]


def test_only_stores_create_drafts(client, supplier):
    response = client.post("/api/orders/draft", headers=supplier.headers, json={"supplier_id": supplier.id})
    assert response.status_code == 403


def test_draft_for_unknown_supplier(client, store):
    response = client.post("/api/orders/draft", headers=store.headers, json={"supplier_id": 4242})
    assert response.status_code == 404


def test_items_reserve_and_release_stock(client, store, supplier, catalog):
    order = _draft(client, store, supplier)

    response = client.post(f"/api/orders/{order['id']}/items", headers=store.headers,
                           json={"product_id": catalog["id"], "quantity": 4})
    assert response.status_code == 200
    data = response.json()
    assert data["total_amount"] == 4000
    assert _stock(client, supplier, catalog["id"]) == 16

    # Adding the same product merges into one line
    response = client.post(f"/api/orders/{order['id']}/items", headers=store.headers,
                           json={"product_id": catalog["id"], "quantity": 2})
    items = response.json()["order_items"]
    assert len(items) == 1
    assert items[0]["quantity"] == 6
    assert _stock(client, supplier, catalog["id"]) == 14

    item_id = items[0]["id"]
    response = client.put(f"/api/orders/items/{item_id}", headers=store.headers, json={"quantity": 3})
    assert response.status_code == 200
    assert response.json()["total_amount"] == 3000
    assert _stock(client, supplier, catalog["id"]) == 17

    response = client.delete(f"/api/orders/items/{item_id}", headers=store.headers)
    assert response.status_code == 200
    assert _stock(client, supplier, catalog["id"]) == 20

    history = client.get(f"/api/products/{catalog['id']}/stock-history", headers=supplier.headers).json()
    change_types = [h["change_type"] for h in history]
    assert change_types.count("order_reserved") == 2
    assert change_types.count("order_released") == 2
    assert all(h["order_id"] == order["id"] for h in history if h["change_type"].startswith("order_"))


def test_insufficient_stock(client, store, supplier, create_product):
    product = create_product(supplier, price=100, stock_quantity=3, unit="box")
    order = _draft(client, store, supplier)
    response = client.post(f"/api/orders/{order['id']}/items", headers=store.headers,
                           json={"product_id": product["id"], "quantity": 5})
    assert response.status_code == 400
    assert response.json()["error"] == "insufficient stock: only 3 box available"


def test_lines_of_deleted_products_are_locked(client, store, supplier, catalog):
    order = _draft(client, store, supplier)
    response = client.post(f"/api/orders/{order['id']}/items", headers=store.headers,
                           json={"product_id": catalog["id"], "quantity": 2})
    item_id = response.json()["order_items"][0]["id"]

    assert client.delete(f"/api/products/{catalog['id']}", headers=supplier.headers).status_code == 200

    response = client.put(f"/api/orders/items/{item_id}", headers=store.headers, json={"quantity": 3})
    assert response.status_code == 404
    assert response.json()["error"] == "product not found"
    assert client.delete(f"/api/orders/items/{item_id}", headers=store.headers).status_code == 404


def test_stale_stock_reads_cannot_oversell(client, supplier, create_product):
    product = create_product(supplier, stock_quantity=3)

    async def two_buyers():
        async with SessionLocal() as first, SessionLocal() as second:
            seen_by_first = await first.get(Product, product["id"])
            seen_by_second = await second.get(Product, product["id"])

            first_ok = await adjust_stock(first, seen_by_first, -3, CHANGE_ORDER_RESERVED)
            await first.commit()
            # second still holds the stale quantity of 3
            second_ok = await adjust_stock(second, seen_by_second, -3, CHANGE_ORDER_RESERVED)
            await second.commit()
            return first_ok, second_ok, seen_by_second.stock_quantity

    assert client.portal.call(two_buyers) == (True, False, 0)
    assert _stock(client, supplier, product["id"]) == 0

    history = client.get(f"/api/products/{product['id']}/stock-history", headers=supplier.headers).json()
    assert [h["change_type"] for h in history].count("order_reserved") == 1


def test_minimum_order_amount(client, store, supplier, create_product):
    product = create_product(supplier, price=100, stock_quantity=50)
    order = _draft(client, store, supplier)
    client.post(f"/api/orders/{order['id']}/items", headers=store.headers,
                json={"product_id": product["id"], "quantity": 2})

    response = client.post(f"/api/orders/{order['id']}/submit", headers=store.headers,
                           json={"payment_method": "cash_on_delivery", "delivery_option": "pickup"})
    assert response.status_code == 400
    assert response.json()["error"] == "minimum order amount is ₱5000.00. Current total: ₱200.00"


def test_submit_empty_order(client, store, supplier):
    order = _draft(client, store, supplier)
    response = client.post(f"/api/orders/{order['id']}/submit", headers=store.headers,
                           json={"payment_method": "gcash", "delivery_option": "pickup"})
    assert response.status_code == 400
    assert response.json()["error"] == "cannot submit order with no items"


def test_submit_cash_on_delivery(client, store, supplier, catalog):
    order = _submitted_order(client, store, supplier, catalog, delivery_option="deliver", delivery_fee=150)
    assert order["status"] == "preparing"
    assert order["payment_status"] == "paid"
    assert order["total_amount"] == 6150
    # Falls back to the store's profile address
    assert order["shipping_address"] == "Dapa, Siargao"


def test_submit_deliver_without_address(client, register, supplier, catalog):
    store = register("store")
    order = _draft(client, store, supplier)
    client.post(f"/api/orders/{order['id']}/items", headers=store.headers,
                json={"product_id": catalog["id"], "quantity": 6})
    response = client.post(f"/api/orders/{order['id']}/submit", headers=store.headers,
                           json={"payment_method": "gcash", "delivery_option": "deliver"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("shipping address is required")


def test_status_transitions(client, store, supplier, catalog):
    order = _submitted_order(client, store, supplier, catalog)
    url = f"/api/orders/{order['id']}/status"

    response = client.put(url, headers=supplier.headers, json={"status": "delivered"})
    assert response.status_code == 400
    assert response.json()["error"] == "order must be in transit before it can be marked as delivered"

    response = client.put(url, headers=supplier.headers, json={"status": "shipped"})
    assert response.status_code == 400

    assert client.put(url, headers=supplier.headers, json={"status": "in_transit"}).json()["status"] == "in_transit"
    assert client.put(url, headers=supplier.headers, json={"status": "delivered"}).json()["status"] == "delivered"


def test_in_transit_requires_preparing(client, store, supplier, catalog):
    order = _submitted_order(client, store, supplier, catalog)
    url = f"/api/orders/{order['id']}/status"
    client.put(url, headers=supplier.headers, json={"status": "cancelled"})
    response = client.put(url, headers=supplier.headers, json={"status": "in_transit"})
    assert response.status_code == 400
    assert response.json()["error"] == "order must be preparing before it can be marked as in transit"


def test_order_list_excludes_drafts(client, store, supplier, catalog):
    submitted = _submitted_order(client, store, supplier, catalog)
    _draft(client, store, supplier)

    listed = client.get("/api/orders", headers=store.headers).json()
    assert [o["id"] for o in listed] == [submitted["id"]]

    drafts = client.get("/api/orders?status=draft", headers=store.headers).json()
    assert len(drafts) == 1

    assert len(client.get("/api/orders", headers=supplier.headers).json()) == 1


def test_gcash_payment_confirmation(client, store, supplier, catalog):
    order = _submitted_order(client, store, supplier, catalog, payment_method="gcash",
                             payment_proof_url="https://cdn.example.com/proof.png")
    assert order["payment_status"] == "pending"
    assert order["payment_proof_url"] == "https://cdn.example.com/proof.png"

    response = client.post(f"/api/orders/{order['id']}/payment/paid", headers=store.headers)
    assert response.status_code == 403

    response = client.post(f"/api/orders/{order['id']}/payment/paid", headers=supplier.headers)
    assert response.status_code == 200
    assert response.json()["payment_status"] == "paid"

    response = client.post(f"/api/orders/{order['id']}/payment/paid", headers=supplier.headers)
    assert response.status_code == 400
    assert response.json()["error"] == "payment is already marked as paid"

    response = client.post(f"/api/orders/{order['id']}/payment/pending", headers=supplier.headers)
    assert response.json()["payment_status"] == "pending"

    response = client.post(f"/api/orders/{order['id']}/payment/pending", headers=supplier.headers)
    assert response.status_code == 400
    assert response.json()["error"] == "payment is already pending"


def test_cash_order_cannot_be_confirmed(client, store, supplier, catalog):
    order = _submitted_order(client, store, supplier, catalog)
    response = client.post(f"/api/orders/{order['id']}/payment/paid", headers=supplier.headers)
    assert response.status_code == 400
    assert response.json()["error"] == "payment confirmation is only applicable for GCash orders"


def test_send_invoice(client, store, supplier, catalog):
    order = _submitted_order(client, store, supplier, catalog)
    response = client.post(f"/api/orders/{order['id']}/send-invoice", headers=supplier.headers)
    assert response.status_code == 200
    assert response.json()["to"] == store.user["email"]


def test_messages(client, store, supplier, catalog, register):
    order = _submitted_order(client, store, supplier, catalog)
    url = f"/api/orders/{order['id']}/messages"

    response = client.post(url, headers=store.headers, json={"content": "When will it arrive?"})
    assert response.status_code == 201
    assert response.json()["sender_id"] == store.id

    response = client.post(url, headers=supplier.headers, json={"content": ""})
    assert response.status_code == 400
    assert response.json()["error"] == "message must have either content or an image"

    client.post(url, headers=supplier.headers, json={"image_url": "https://cdn.example.com/a.jpg"})
    messages = client.get(url, headers=supplier.headers).json()
    assert [m["sender_id"] for m in messages] == [store.id, supplier.id]

    outsider = register("store")
    assert client.get(url, headers=outsider.headers).status_code == 404


def test_messaging_window():
    now = datetime(2024, 6, 5, 12, 0)
    delivered = SimpleNamespace(status="delivered", updated_at=now - timedelta(hours=11, minutes=59))
    assert not is_messaging_closed(delivered, now)
    delivered.updated_at = now - timedelta(hours=12)
    assert is_messaging_closed(delivered, now)
    preparing = SimpleNamespace(status="preparing", updated_at=now - timedelta(days=3))
    assert not is_messaging_closed(preparing, now)


def test_rating_a_delivered_order(client, store, supplier, catalog):
    order = _submitted_order(client, store, supplier, catalog)
    url = f"/api/orders/{order['id']}/rating"

    response = client.post(url, headers=store.headers, json={"rating": 5})
    assert response.status_code == 400
    assert response.json()["error"] == "can only rate delivered orders"

    status_url = f"/api/orders/{order['id']}/status"
    client.put(status_url, headers=supplier.headers, json={"status": "in_transit"})
    client.put(status_url, headers=supplier.headers, json={"status": "delivered"})

    response = client.post(url, headers=store.headers, json={"rating": 6})
    assert response.status_code == 400

    response = client.post(url, headers=store.headers, json={"rating": 4, "comment": "On time"})
    assert response.status_code == 201
    assert response.json()["rated_id"] == supplier.id

    response = client.post(url, headers=store.headers, json={"rating": 5})
    assert response.status_code == 400
    assert response.json()["error"] == "you have already rated this order"

    response = client.post(url, headers=supplier.headers, json={"rating": 5})
    assert response.status_code == 201
    assert response.json()["rated_id"] == store.id

    detail = client.get(f"/api/orders/{order['id']}", headers=store.headers).json()
    assert len(detail["ratings"]) == 2

    mine = client.get("/api/me/ratings", headers=supplier.headers).json()
    assert [r["rating"] for r in mine["ratings"]] == [4]
