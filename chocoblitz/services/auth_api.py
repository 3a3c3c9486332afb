from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from chocoblitz.constants import LOCAL_API_BASE

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Login/registration failed; ``message`` is safe to show the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthBusyError(AuthError):
    """Another auth request is still in flight."""


def resolve_api_base(origin: Optional[str]) -> str:
    """Page opened as a local file talks to the dev server, otherwise same origin."""
    if not origin or origin == "null" or origin.startswith("file:"):
        return LOCAL_API_BASE
    return f"{origin.rstrip('/')}/api"


class AuthClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._post(
            "/auth/login",
            {"email": email, "password": password},
            fallback="Login failed",
        )

    async def register(self, name: str, email: str, password: str, confirm_password: str) -> Dict[str, Any]:
        return await self._post(
            "/auth/register",
            {"name": name, "email": email, "password": password, "confirmPassword": confirm_password},
            fallback="Registration failed",
        )

    async def _post(self, path: str, payload: Dict[str, Any], fallback: str) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(url, json=payload)
            except httpx.TimeoutException as e:
                logger.warning(f"Auth request timed out: {url} ({e})")
                raise AuthError("Request timed out, please try again") from e
            except httpx.RequestError as e:
                logger.error(f"Auth request failed: {url} ({e})")
                raise AuthError(f"Network error: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            message = data.get("message") or fallback
            logger.info(f"Auth rejected {path}: {response.status_code} {message}")
            raise AuthError(message, status_code=response.status_code)

        if not data.get("token"):
            raise AuthError(fallback, status_code=response.status_code)

        return {"token": data["token"], "user": data.get("user") or {}}
