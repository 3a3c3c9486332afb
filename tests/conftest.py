"""Pytest configuration and fixtures"""
import json
from decimal import Decimal
from typing import Any, Dict, List

import httpx
import pytest

from chocoblitz.constants import TOKEN_KEY, USER_KEY
from chocoblitz.db.sqlite import MemoryStorage
from chocoblitz.services.auth_api import AuthError
from chocoblitz.services.cart import CartStore
from chocoblitz.services.catalog import Catalog, Product


SAMPLE_PRODUCTS = (
    Product(1, "Dark A", "dark", Decimal("10"), "images/a.jpg", "Dark one"),
    Product(2, "Milk B", "milk", Decimal("5"), "images/b.jpg", "Milk one"),
    Product(3, "Dark C", "dark", Decimal("7.50"), "images/c.jpg", "Another dark"),
    Product(4, "White D", "white", Decimal("3.25"), "images/d.jpg", "White one"),
)


class FakeAuthClient:
    """Stands in for AuthClient; records calls, returns or raises what it is told."""

    def __init__(self, response: Dict[str, Any] = None, error: Exception = None):
        self.response = response or {"token": "tok-123", "user": {"id": 1, "name": "Ann", "email": "ann@example.com"}}
        self.error = error
        self.calls: List[tuple] = []

    async def login(self, email, password):
        self.calls.append(("login", email, password))
        if self.error:
            raise self.error
        return self.response

    async def register(self, name, email, password, confirm_password):
        self.calls.append(("register", name, email, password, confirm_password))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def catalog():
    return Catalog(SAMPLE_PRODUCTS)


@pytest.fixture
def cart(catalog, storage):
    return CartStore(catalog, storage)


@pytest.fixture
def fake_auth():
    return FakeAuthClient()


@pytest.fixture
def failing_auth():
    return FakeAuthClient(error=AuthError("Invalid credentials", status_code=401))


@pytest.fixture
def logged_in_storage(storage):
    storage.set(TOKEN_KEY, "tok-123")
    storage.set(USER_KEY, json.dumps({"id": 1, "name": "Ann", "email": "ann@example.com"}))
    return storage


def make_transport(status_code: int = 200, body: Any = None, seen: list = None) -> httpx.MockTransport:
    """MockTransport answering every request with the same JSON body."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    return httpx.MockTransport(handler)
