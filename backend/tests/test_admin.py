from datetime import datetime, timedelta

import pytest

from trading_road.db.session import SessionLocal
from trading_road.models.audit_log import AuditLog
from trading_road.core.config import settings
from trading_road.main import app
from trading_road.services.audit import (
    truncate_body, caller_from_headers, MULTIPART_PLACEHOLDER, TRUNCATED_SUFFIX,
)
from trading_road.services.scheduler import purge_old_audit_logs


def _bug(client, account, **extra):
    body = {"platform": "android", "title": "Crash on checkout", "description": "App closes"}
    body.update(extra)
    response = client.post("/api/bug-reports", headers=account.headers, json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_bug_report_lifecycle(client, store, admin):
    report = _bug(client, store, error_type="NullPointer")
    assert report["status"] == "open"
    assert report["user_id"] == store.id

    response = client.put(f"/api/bug-reports/{report['id']}", headers=admin.headers,
                          json={"status": "investigating", "notes": "repro on 1.2"})
    assert response.status_code == 200
    assert response.json()["resolved_at"] is None
    assert response.json()["notes"] == "repro on 1.2"

    response = client.put(f"/api/bug-reports/{report['id']}", headers=admin.headers, json={"status": "fixed"})
    data = response.json()
    assert data["status"] == "fixed"
    assert data["resolved_by"] == admin.id
    assert data["resolved_at"] is not None

    response = client.put(f"/api/bug-reports/{report['id']}", headers=admin.headers, json={"status": "bogus"})
    assert response.status_code == 400

    response = client.delete(f"/api/bug-reports/{report['id']}", headers=admin.headers)
    assert response.status_code == 200
    assert client.get(f"/api/bug-reports/{report['id']}", headers=admin.headers).status_code == 404


def test_bug_report_listing(client, store, admin, create_admin):
    for platform in ("android", "ios", "android"):
        _bug(client, store, platform=platform)

    response = client.get("/api/bug-reports?platform=android&limit=1", headers=admin.headers)
    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 1
    assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}

    # Out-of-range limit falls back to the default
    body = client.get("/api/bug-reports?limit=500&page=0", headers=admin.headers).json()
    assert body["pagination"]["limit"] == 50
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["total"] == 3

    level2 = create_admin(2)
    response = client.get("/api/bug-reports", headers=level2.headers)
    assert response.status_code == 403
    assert response.json()["error"] == "insufficient admin level"


def test_requests_are_audited(client, store, admin):
    client.get("/api/me", headers=store.headers)
    client.get("/api/orders", headers=store.headers)
    client.get("/api/orders/12345", headers=store.headers)

    response = client.get(f"/api/audit-logs?user_id={store.id}", headers=admin.headers)
    assert response.status_code == 200
    logs = response.json()["data"]
    actions = [log["action"] for log in logs]
    assert "GET /api/me" in actions
    assert "GET /api/orders" in actions
    assert "GET /api/orders/{order_id}" in actions

    missing = next(log for log in logs if log["endpoint"] == "/api/orders/12345")
    assert missing["status_code"] == 404
    assert missing["role"] == "store"
    assert missing["error_message"] == "order not found"

    response = client.get("/api/audit-logs?endpoint=orders", headers=admin.headers)
    assert all("orders" in log["endpoint"] for log in response.json()["data"])


def _store_logs(client, admin, store, endpoint):
    response = client.get(f"/api/audit-logs?user_id={store.id}&endpoint={endpoint}", headers=admin.headers)
    return response.json()["data"]


def test_multipart_body_is_not_stored(client, store, admin):
    response = client.post("/api/bug-reports", headers=store.headers,
                           files={"screenshot": ("crash.png", b"\x89PNG fake", "image/png")})
    assert response.status_code == 400

    logs = _store_logs(client, admin, store, "bug-reports")
    assert len(logs) == 1
    assert logs[0]["request_body"] == MULTIPART_PLACEHOLDER
    assert logs[0]["action"] == "POST /api/bug-reports"


def test_long_bodies_are_truncated(client, store, admin, monkeypatch):
    monkeypatch.setattr(settings, "AUDIT_LOG_BODY_LIMIT", 40)
    _bug(client, store, description="x" * 500)

    logs = _store_logs(client, admin, store, "bug-reports")
    assert logs[0]["request_body"].endswith(TRUNCATED_SUFFIX)
    assert len(logs[0]["request_body"]) == 40 + len(TRUNCATED_SUFFIX)
    assert logs[0]["response_body"].endswith(TRUNCATED_SUFFIX)


def test_unhandled_errors_are_audited(client, store, admin):
    async def explode():
        raise RuntimeError("boom")

    app.router.add_api_route("/api/explode", explode, methods=["GET"])
    route = app.router.routes[-1]
    try:
        with pytest.raises(RuntimeError):
            client.get("/api/explode", headers=store.headers)
    finally:
        app.router.routes.remove(route)

    logs = _store_logs(client, admin, store, "explode")
    assert len(logs) == 1
    assert logs[0]["status_code"] == 500
    assert logs[0]["action"] == "GET /api/explode"
    assert logs[0]["error_message"] == "internal server error: boom"


def test_health_is_not_audited(client, admin):
    assert client.get("/health").json() == {"status": "ok"}
    logs = client.get("/api/audit-logs?endpoint=health", headers=admin.headers).json()["data"]
    assert logs == []


def test_audit_helpers():
    assert truncate_body(b"") is None
    assert truncate_body(b"abc", limit=10) == "abc"
    assert truncate_body(b"abcdef", limit=3) == "abc" + TRUNCATED_SUFFIX
    assert caller_from_headers(None) == {}
    assert caller_from_headers("Bearer nope") == {}


def test_purge_old_audit_logs(client):
    async def scenario():
        async with SessionLocal() as db:
            db.add(AuditLog(action="GET /api/me", endpoint="/api/me", method="GET", status_code=200,
                            created_at=datetime.utcnow() - timedelta(days=120)))
            db.add(AuditLog(action="GET /api/me", endpoint="/api/me", method="GET", status_code=200,
                            created_at=datetime.utcnow()))
            await db.commit()
        removed = await purge_old_audit_logs(90)
        kept_zero = await purge_old_audit_logs(0)
        return removed, kept_zero

    removed, kept_zero = client.portal.call(scenario)
    assert removed == 1
    assert kept_zero == 0


def test_ratings_summary(client, admin, store, supplier, create_product):
    product = create_product(supplier, price=1000, stock_quantity=10)
    order = client.post("/api/orders/draft", headers=store.headers, json={"supplier_id": supplier.id}).json()
    client.post(f"/api/orders/{order['id']}/items", headers=store.headers,
                json={"product_id": product["id"], "quantity": 5})
    client.post(f"/api/orders/{order['id']}/submit", headers=store.headers,
                json={"payment_method": "cash_on_delivery", "delivery_option": "pickup"})
    for status in ("in_transit", "delivered"):
        client.put(f"/api/orders/{order['id']}/status", headers=supplier.headers, json={"status": status})
    client.post(f"/api/orders/{order['id']}/rating", headers=store.headers, json={"rating": 4})

    summary = client.get("/api/ratings/summary", headers=admin.headers).json()
    assert summary["suppliers"] == [{
        "supplier_id": supplier.id, "supplier_name": supplier.user["name"],
        "average_rating": 4.0, "rating_count": 1,
    }]
    assert summary["stores"] == []
    assert summary["orders_with_ratings"][0]["order_id"] == order["id"]

    assert client.get("/api/ratings/orders", headers=admin.headers).json() == {"order_ids": [order["id"]]}

    entry = client.get("/api/suppliers", headers=store.headers).json()[0]
    assert entry["average_rating"] == 4.0
    assert entry["rating_count"] == 1

    analytics = client.get("/api/me/analytics", headers=store.headers).json()
    assert analytics["total_orders"] == 1
    assert analytics["total_earnings"] == 5000
    assert analytics["total_products_bought"] == 5
    assert analytics["products_bought"][0]["total_spent"] == 5000

    analytics = client.get("/api/me/analytics", headers=supplier.headers).json()
    assert analytics["products_bought"][0]["stock"] == 5

    dashboard = client.get("/api/dashboard/analytics", headers=admin.headers).json()
    assert dashboard["total_orders"] == 1
    assert dashboard["total_suppliers"] == 1
    assert len(dashboard["daily_stats"]) == 30
    assert sum(day["orders"] for day in dashboard["daily_stats"]) == 1


def test_dashboard_access_and_public_metrics(client, admin, create_admin, store, supplier):
    level3 = create_admin(3)
    assert client.get("/api/dashboard/analytics", headers=level3.headers).status_code == 200
    assert client.get("/api/dashboard/analytics", headers=store.headers).status_code == 403
    assert client.get("/api/ratings/summary", headers=level3.headers).status_code == 403

    metrics = client.get("/api/public/metrics").json()
    # store, supplier, the seeded admin and the level 3 admin
    assert metrics == {"total_users": 4, "total_suppliers": 1, "total_orders": 0}


def test_root(client):
    assert client.get("/").status_code == 200
