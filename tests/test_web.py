"""Tests for the web storefront"""
import threading
import time

import pytest
from fastapi.testclient import TestClient

from chocoblitz.constants import CART_KEY, TOKEN_KEY
from chocoblitz.db.sqlite import MemoryStorage
from chocoblitz.services.auth_api import AuthClient
from chocoblitz.storefront import Storefront
from chocoblitz.web.main import attach_storefront, create_app

from conftest import make_transport


def _client(storage, catalog, transport=None) -> TestClient:
    auth = AuthClient("http://api.test/api", transport=transport or make_transport(200, {"token": "t", "user": {}}))
    front = Storefront(storage, catalog=catalog, auth_client=auth)
    return TestClient(create_app(front))


@pytest.fixture
def client(logged_in_storage, catalog):
    return _client(logged_in_storage, catalog)


@pytest.fixture
def anon_client(storage, catalog):
    return _client(storage, catalog)


def _cart(client):
    return client.get("/api/cart").json()


def test_anonymous_sees_auth_overlay(anon_client):
    response = anon_client.get("/")

    assert response.status_code == 200
    assert "authLoginForm" in response.text
    assert "galleryGrid" not in response.text


def test_signup_tab(anon_client):
    assert "authSignupForm" in anon_client.get("/?tab=signup").text


def test_login_success_shows_gallery(storage, catalog):
    seen = []
    client = _client(storage, catalog, make_transport(200, {"token": "tok", "user": {"name": "Ann"}}, seen))

    response = client.post("/auth/login", data={"email": "ann@example.com", "password": "secret-pass"})

    assert response.status_code == 200
    assert "galleryGrid" in response.text
    assert storage.get(TOKEN_KEY) == "tok"
    assert len(seen) == 1


def test_login_missing_fields_no_network(storage, catalog):
    seen = []
    client = _client(storage, catalog, make_transport(200, {"token": "tok"}, seen))

    response = client.post("/auth/login", data={"email": "ann@example.com", "password": ""})

    assert "Please fill in all fields" in response.text
    assert seen == []
    assert storage.get(TOKEN_KEY) is None


def test_login_rejected_shows_server_message(storage, catalog):
    client = _client(storage, catalog, make_transport(401, {"message": "Invalid credentials"}))

    response = client.post("/auth/login", data={"email": "ann@example.com", "password": "nope"})

    assert "Invalid credentials" in response.text
    assert "authLoginForm" in response.text


def test_signup_password_mismatch(anon_client):
    response = anon_client.post(
        "/auth/signup",
        data={
            "name": "Ann",
            "email": "ann@example.com",
            "password": "secret-pass",
            "confirm_password": "secret-pasz",
            "agree_terms": "true",
        },
    )

    assert "Passwords do not match" in response.text
    assert "authSignupForm" in response.text


def test_cart_requires_login(anon_client, storage):
    response = anon_client.post("/cart/add", data={"product_id": 1}, follow_redirects=False)

    assert response.status_code == 303
    assert storage.get(CART_KEY) is None
    assert anon_client.get("/api/cart").status_code == 401


def test_add_and_update_quantity(client):
    client.post("/cart/add", data={"product_id": 1})
    client.post("/cart/add", data={"product_id": 1})
    client.post("/cart/add", data={"product_id": 2})

    cart = _cart(client)
    assert cart["count"] == 3
    assert cart["items"][0]["quantity"] == 2
    assert cart["totals"] == {"subtotal": "$25.00", "tax": "$2.50", "total": "$27.50"}

    client.post("/cart/update", data={"product_id": 2, "delta": -1})

    assert [line["id"] for line in _cart(client)["items"]] == [1]


def test_remove(client):
    client.post("/cart/add", data={"product_id": 3})

    client.post("/cart/remove", data={"product_id": 3})
    client.post("/cart/remove", data={"product_id": 3})

    assert _cart(client)["count"] == 0


def test_unknown_product_add_is_ignored(client):
    response = client.post("/cart/add", data={"product_id": 999})

    assert response.status_code == 200
    assert _cart(client)["items"] == []


def test_clear_requires_confirmation(client):
    client.post("/cart/add", data={"product_id": 1})

    assert "Are you sure you want to clear your cart?" in client.get("/cart/clear").text

    client.post("/cart/clear", data={"confirm": "no"})
    assert _cart(client)["count"] == 1

    client.post("/cart/clear", data={"confirm": "yes"})
    assert _cart(client)["count"] == 0


def test_checkout_empty_cart(client):
    response = client.post("/checkout")

    assert "Your cart is empty!" in response.text


def test_checkout_clears_cart(client):
    client.post("/cart/add", data={"product_id": 1})
    client.post("/cart/add", data={"product_id": 2})

    response = client.post("/checkout")

    assert "Thank you for your order! Total: $16.50" in response.text
    assert _cart(client)["count"] == 0


def test_gallery_filter(client):
    response = client.get("/?filter=dark")

    assert "Dark A" in response.text
    assert "Dark C" in response.text
    assert "Milk B" not in response.text


def test_product_detail(client):
    response = client.get("/products/4")

    assert response.status_code == 200
    assert "White D" in response.text
    assert "$3.25" in response.text


def test_product_detail_not_found(client):
    assert client.get("/products/404").status_code == 404


def test_review_is_shown(client):
    response = client.post(
        "/reviews",
        data={"name": "Ann", "location": "Oslo", "rating": 4, "text": "Velvety and rich"},
    )

    assert "Velvety and rich" in response.text
    assert "★★★★☆" in response.text


def test_contact_acknowledged(client):
    response = client.post("/contact", data={"name": "Ann", "email": "ann@example.com", "message": "Hi"})

    assert "get back to you soon" in response.text


def test_logout_wipes_cart(client, logged_in_storage):
    client.post("/cart/add", data={"product_id": 1})

    response = client.post("/auth/logout")

    assert "authLoginForm" in response.text
    assert logged_in_storage.get(TOKEN_KEY) is None
    assert logged_in_storage.get(CART_KEY) is None


def test_concurrent_add_keeps_one_line(client, monkeypatch):
    cart = client.app.state.storefront.cart
    lookup = cart.get

    def slow_get(product_id):
        time.sleep(0.05)
        return lookup(product_id)

    monkeypatch.setattr(cart, "get", slow_get)
    barrier = threading.Barrier(2)

    def post():
        barrier.wait()
        client.post("/cart/add", data={"product_id": 1})

    with client:
        threads = [threading.Thread(target=post) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        items = _cart(client)["items"]

    assert [(line["id"], line["quantity"]) for line in items] == [(1, 2)]


def test_gallery_has_no_dangling_asset_links(client):
    page = client.get("/").text

    assert "/static/" not in page
    assert 'href="/products/1"' in page


def test_reattach_closes_previous_panel(storage, catalog):
    app = create_app(Storefront(storage, catalog=catalog))
    old_front = app.state.storefront
    old_panel = app.state.cart_panel

    attach_storefront(app, Storefront(MemoryStorage(), catalog=catalog))
    old_front.cart.add_item(1)

    assert old_panel.badge == 0
    assert app.state.cart_panel is not old_panel
    assert app.state.cart_panel.badge == 0
