import asyncio
import itertools
import os
import tempfile

import pytest

# Settings and the engine are built at import time, so the environment goes first
_tmp_dir = tempfile.mkdtemp(prefix="trading_road_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{_tmp_dir}/test.db"
os.environ["HOUSEKEEPING_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["SECRET_KEY"] = "test-secret"

from fastapi.testclient import TestClient  # noqa: E402

from trading_road.core.config import settings  # noqa: E402
from trading_road.db.base import Base  # noqa: E402
from trading_road.db.session import engine  # noqa: E402
from trading_road.main import app  # noqa: E402

_counter = itertools.count(1)


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class Account:
    """A registered user with its token"""

    def __init__(self, payload: dict):
        self.token = payload["token"]
        self.user = payload["user"]
        self.id = self.user["id"]
        self.headers = bearer(self.token)


@pytest.fixture
def client():
    asyncio.run(_reset_schema())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """register(role, **fields) -> Account"""

    def _register(role: str = "store", **fields) -> Account:
        n = next(_counter)
        body = {
            "email": f"{role}{n}@example.com",
            "password": "secret123",
            "name": f"{role.title()} {n}",
            "phone": f"0917{n:07d}",
            "role": role,
        }
        body.update(fields)
        response = client.post("/api/register", json=body)
        assert response.status_code == 201, response.text
        return Account(response.json())

    return _register


@pytest.fixture
def admin(client):
    """The level 1 admin seeded at startup"""
    response = client.post("/api/login", json={
        "email": settings.FIRST_ADMIN_EMAIL,
        "password": settings.FIRST_ADMIN_PASSWORD,
    })
    assert response.status_code == 200, response.text
    return Account(response.json())


@pytest.fixture
def create_admin(client, admin):
    """create_admin(level) -> Account, created and logged in through the API"""

    def _create(level: int) -> Account:
        n = next(_counter)
        email = f"admin{n}@example.com"
        response = client.post("/api/users/register", headers=admin.headers, json={
            "email": email,
            "password": "secret123",
            "name": f"Admin {n}",
            "phone": f"0918{n:07d}",
            "role": "admin",
            "admin_level": level,
        })
        assert response.status_code == 201, response.text
        response = client.post("/api/login", json={"email": email, "password": "secret123"})
        assert response.status_code == 200, response.text
        return Account(response.json())

    return _create


@pytest.fixture
def supplier(register):
    return register("supplier", address="General Luna, Siargao")


@pytest.fixture
def store(register):
    return register("store", address="Dapa, Siargao")


@pytest.fixture
def create_product(client):
    """create_product(owner, **fields) -> product json"""

    def _create(owner: Account, **fields) -> dict:
        n = next(_counter)
        body = {
            "name": f"Product {n}",
            "sku": f"SKU-{n}",
            "price": 1000,
            "stock_quantity": 20,
            "unit": "sack",
            "category": "rice",
        }
        body.update(fields)
        response = client.post("/api/products", headers=owner.headers, json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
