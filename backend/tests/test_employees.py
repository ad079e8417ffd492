from trading_road.core.security import decode_token


def _create_employee(client, owner, **fields):
    body = {"username": "cashier", "password": "secret123", "name": "Ana"}
    body.update(fields)
    response = client.post("/api/employees", headers=owner.headers, json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _employee_login(client, owner, username="cashier", password="secret123"):
    return client.post("/api/login/employee", json={
        "owner_email": owner.user["email"], "username": username, "password": password,
    })


def _headers(response):
    return {"Authorization": f"Bearer {response.json()['token']}"}


def test_employee_defaults_and_listing(client, store):
    employee = _create_employee(client, store)
    assert employee["owner_user_id"] == store.id
    assert employee["can_manage_orders"] is True
    assert employee["can_rate"] is False
    assert employee["status_active"] is True
    assert "password" not in employee

    listed = client.get("/api/employees", headers=store.headers).json()
    assert [e["username"] for e in listed] == ["cashier"]


def test_username_unique_per_owner(client, store, supplier):
    _create_employee(client, store)
    response = client.post("/api/employees", headers=store.headers,
                           json={"username": "cashier", "password": "secret123"})
    assert response.status_code == 409
    assert response.json()["error"] == "username already exists for this owner"

    # Another owner may reuse the name
    _create_employee(client, supplier)


def test_only_owners_manage_employees(client, admin, store):
    response = client.get("/api/employees", headers=admin.headers)
    assert response.status_code == 403

    _create_employee(client, store)
    login = _employee_login(client, store)
    response = client.get("/api/employees", headers=_headers(login))
    assert response.status_code == 403
    assert response.json()["error"] == "employees cannot manage employees"


def test_employee_login_and_token(client, store):
    employee = _create_employee(client, store, can_chat=False)
    response = _employee_login(client, store)
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == store.id
    assert data["employee"]["id"] == employee["id"]

    claims = decode_token(data["token"])
    assert claims["is_employee"] is True
    assert claims["employee_id"] == employee["id"]
    assert claims["user_id"] == store.id
    assert claims["can_chat"] is False

    assert _employee_login(client, store, password="wrong").status_code == 401


def test_inactive_employee_cannot_log_in(client, store):
    _create_employee(client, store, status_active=False)
    response = _employee_login(client, store)
    assert response.status_code == 403
    assert response.json()["error"] == "employee account is inactive"


def test_unified_login_with_username(client, store):
    employee = _create_employee(client, store, username="picker")
    response = client.post("/api/login/unified", json={"email_or_username": "picker", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["employee"]["id"] == employee["id"]


def test_permission_flags_are_enforced(client, store, supplier):
    _create_employee(client, store, can_manage_orders=False)
    headers = _headers(_employee_login(client, store))

    response = client.post("/api/orders/draft", headers=headers, json={"supplier_id": supplier.id})
    assert response.status_code == 403
    assert response.json()["error"] == "employee does not have permission: can_manage_orders"


def _submitted_order(client, store, supplier, product, **submit):
    draft = client.post("/api/orders/draft", headers=store.headers, json={"supplier_id": supplier.id}).json()
    client.post(f"/api/orders/{draft['id']}/items", headers=store.headers,
                json={"product_id": product["id"], "quantity": 6})
    body = {"payment_method": "cash_on_delivery", "delivery_option": "pickup"}
    body.update(submit)
    response = client.post(f"/api/orders/{draft['id']}/submit", headers=store.headers, json=body)
    assert response.status_code == 200, response.text
    return response.json()


def _denied(response, flag):
    assert response.status_code == 403
    assert response.json()["error"] == f"employee does not have permission: {flag}"


def test_payment_actions_need_order_permission(client, store, supplier, create_product):
    order = _submitted_order(client, store, supplier, create_product(supplier), payment_method="gcash",
                             payment_proof_url="https://cdn.example.com/proof.png")
    _create_employee(client, supplier, username="clerk", can_manage_orders=False)
    headers = _headers(_employee_login(client, supplier, username="clerk"))

    _denied(client.post(f"/api/orders/{order['id']}/payment/paid", headers=headers), "can_manage_orders")
    _denied(client.post(f"/api/orders/{order['id']}/payment/pending", headers=headers), "can_manage_orders")

    detail = client.get(f"/api/orders/{order['id']}", headers=supplier.headers).json()
    assert detail["payment_status"] == "pending"


def test_status_change_needs_permission(client, store, supplier, create_product):
    order = _submitted_order(client, store, supplier, create_product(supplier))
    url = f"/api/orders/{order['id']}/status"

    _create_employee(client, supplier, username="driver", can_change_status=False)
    headers = _headers(_employee_login(client, supplier, username="driver"))
    _denied(client.put(url, headers=headers, json={"status": "in_transit"}), "can_change_status")

    _create_employee(client, supplier, username="dispatcher")
    headers = _headers(_employee_login(client, supplier, username="dispatcher"))
    response = client.put(url, headers=headers, json={"status": "in_transit"})
    assert response.status_code == 200
    assert response.json()["status"] == "in_transit"


def test_chat_needs_permission(client, store, supplier, create_product):
    order = _submitted_order(client, store, supplier, create_product(supplier))
    url = f"/api/orders/{order['id']}/messages"

    _create_employee(client, store, username="quiet", can_chat=False)
    headers = _headers(_employee_login(client, store, username="quiet"))
    _denied(client.post(url, headers=headers, json={"content": "hello"}), "can_chat")
    assert client.get(url, headers=store.headers).json() == []


def test_rating_needs_permission(client, store, supplier, create_product):
    order = _submitted_order(client, store, supplier, create_product(supplier))
    status_url = f"/api/orders/{order['id']}/status"
    client.put(status_url, headers=supplier.headers, json={"status": "in_transit"})
    client.put(status_url, headers=supplier.headers, json={"status": "delivered"})
    url = f"/api/orders/{order['id']}/rating"

    # can_rate is off unless the owner grants it
    _create_employee(client, store, username="picker")
    headers = _headers(_employee_login(client, store, username="picker"))
    _denied(client.post(url, headers=headers, json={"rating": 5}), "can_rate")

    _create_employee(client, store, username="rater", can_rate=True)
    headers = _headers(_employee_login(client, store, username="rater"))
    response = client.post(url, headers=headers, json={"rating": 5})
    assert response.status_code == 201
    assert response.json()["rater_id"] == store.id


def test_employee_can_only_adjust_stock(client, supplier, create_product):
    product = create_product(supplier, stock_quantity=5)
    employee = _create_employee(client, supplier, username="stocker")
    headers = _headers(_employee_login(client, supplier, username="stocker"))

    response = client.put(f"/api/products/{product['id']}", headers=headers, json={"price": 1})
    assert response.status_code == 400

    response = client.put(f"/api/products/{product['id']}", headers=headers,
                          json={"stock_quantity": 9, "price": 1})
    assert response.status_code == 200
    assert response.json()["stock_quantity"] == 9
    assert response.json()["price"] == product["price"]

    history = client.get(f"/api/products/{product['id']}/stock-history", headers=supplier.headers).json()
    assert history[0]["employee_id"] == employee["id"]

    response = client.delete(f"/api/products/{product['id']}", headers=headers)
    assert response.status_code == 403


def test_owner_and_employee_updates(client, store):
    employee = _create_employee(client, store)
    other = _create_employee(client, store, username="runner")

    response = client.put(f"/api/employees/{employee['id']}", headers=store.headers,
                          json={"can_chat": False, "name": "Ana Cruz"})
    assert response.status_code == 200
    assert response.json()["can_chat"] is False

    headers = _headers(_employee_login(client, store))
    response = client.put(f"/api/employees/{employee['id']}", headers=headers,
                          json={"phone": "0917", "can_chat": True})
    assert response.status_code == 200
    assert response.json()["phone"] == "0917"
    # Permission flags stay owner-controlled
    assert response.json()["can_chat"] is False

    response = client.put(f"/api/employees/{other['id']}", headers=headers, json={"name": "x"})
    assert response.status_code == 403

    me = client.get("/api/employees/me", headers=headers)
    assert me.json()["id"] == employee["id"]
    assert client.get("/api/employees/me", headers=store.headers).status_code == 403


def test_delete_employee(client, store):
    employee = _create_employee(client, store)
    response = client.delete(f"/api/employees/{employee['id']}", headers=store.headers)
    assert response.status_code == 200
    assert client.get("/api/employees", headers=store.headers).json() == []
    assert client.delete(f"/api/employees/{employee['id']}", headers=store.headers).status_code == 404
