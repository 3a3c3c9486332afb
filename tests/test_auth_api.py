import json

import httpx
import pytest

from chocoblitz.services.auth_api import AuthClient, AuthError, resolve_api_base

from conftest import make_transport

BASE = "https://shop.example.com/api"


@pytest.mark.parametrize(
    "origin, expected",
    [
        (None, "http://localhost:3000/api"),
        ("", "http://localhost:3000/api"),
        ("null", "http://localhost:3000/api"),
        ("file:///home/ann/index.html", "http://localhost:3000/api"),
        ("https://shop.example.com", "https://shop.example.com/api"),
        ("http://127.0.0.1:8000/", "http://127.0.0.1:8000/api"),
    ],
)
def test_resolve_api_base(origin, expected):
    assert resolve_api_base(origin) == expected


@pytest.mark.asyncio
async def test_login_posts_credentials():
    seen = []
    client = AuthClient(BASE, timeout=3, transport=make_transport(200, {"token": "t1", "user": {"id": 5}}, seen))

    data = await client.login("ann@example.com", "secret-pass")

    assert data == {"token": "t1", "user": {"id": 5}}
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE}/auth/login"
    assert json.loads(request.content) == {"email": "ann@example.com", "password": "secret-pass"}


@pytest.mark.asyncio
async def test_register_body_uses_confirm_password_field():
    seen = []
    client = AuthClient(BASE, transport=make_transport(201, {"token": "t2", "user": {}}, seen))

    await client.register("Ann", "ann@example.com", "secret-pass", "secret-pass")

    assert str(seen[0].url) == f"{BASE}/auth/register"
    assert json.loads(seen[0].content) == {
        "name": "Ann",
        "email": "ann@example.com",
        "password": "secret-pass",
        "confirmPassword": "secret-pass",
    }


@pytest.mark.asyncio
async def test_timeout_is_applied_to_request():
    seen = []
    client = AuthClient(BASE, timeout=2.5, transport=make_transport(200, {"token": "t"}, seen))

    await client.login("ann@example.com", "secret-pass")

    assert seen[0].extensions["timeout"]["read"] == 2.5


@pytest.mark.asyncio
async def test_error_message_from_server():
    client = AuthClient(BASE, transport=make_transport(401, {"message": "Invalid credentials"}))

    with pytest.raises(AuthError) as exc:
        await client.login("ann@example.com", "wrong")

    assert exc.value.message == "Invalid credentials"
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_error_without_message_uses_fallback():
    client = AuthClient(BASE, transport=make_transport(500))

    with pytest.raises(AuthError, match="Registration failed"):
        await client.register("Ann", "ann@example.com", "secret-pass", "secret-pass")


@pytest.mark.asyncio
async def test_success_without_token_is_an_error():
    client = AuthClient(BASE, transport=make_transport(200, {"user": {}}))

    with pytest.raises(AuthError, match="Login failed"):
        await client.login("ann@example.com", "secret-pass")


@pytest.mark.asyncio
async def test_timeout_raises_auth_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = AuthClient(BASE, timeout=0.1, transport=httpx.MockTransport(handler))

    with pytest.raises(AuthError, match="timed out"):
        await client.login("ann@example.com", "secret-pass")


@pytest.mark.asyncio
async def test_network_failure_raises_auth_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = AuthClient(BASE, transport=httpx.MockTransport(handler))

    with pytest.raises(AuthError, match="Network error"):
        await client.login("ann@example.com", "secret-pass")
