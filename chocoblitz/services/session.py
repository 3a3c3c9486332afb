"""Session Manager: anonymous/authenticated state kept in key-value storage."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from chocoblitz.constants import CART_KEY, LEGACY_USER_KEY, REMEMBER_ME_KEY, TOKEN_KEY, USER_KEY
from chocoblitz.services.auth_api import AuthBusyError, AuthClient
from chocoblitz.utils.validators import validate_login, validate_signup

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"
AUTHENTICATED = "authenticated"


@dataclass
class Session:
    token: str
    user: Dict[str, Any] = field(default_factory=dict)


class SessionManager:
    def __init__(
        self,
        storage,
        auth_client: Optional[AuthClient] = None,
        clear_cart_on_logout: bool = True,
        min_password_length: int = 8,
    ):
        self.storage = storage
        self.auth_client = auth_client
        self.clear_cart_on_logout = clear_cart_on_logout
        self.min_password_length = min_password_length
        self._in_flight = False

    @property
    def state(self) -> str:
        return AUTHENTICATED if self.is_authenticated() else ANONYMOUS

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def is_authenticated(self) -> bool:
        return self.storage.get(TOKEN_KEY) is not None

    def get_token(self) -> Optional[str]:
        return self.storage.get(TOKEN_KEY)

    def get_current_user(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get(USER_KEY)
        if not raw:
            return None
        user = json.loads(raw)
        return user if isinstance(user, dict) else {}

    def current(self) -> Optional[Session]:
        token = self.get_token()
        if token is None:
            return None
        return Session(token=token, user=self.get_current_user() or {})

    async def login(self, email: str, password: str, remember_me: bool = False) -> Session:
        email = (email or "").strip()
        validate_login(email, password)
        data = await self._call("login", email, password)
        return self._start(data, remember_me)

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
        agree_terms: bool,
    ) -> Session:
        name = (name or "").strip()
        email = (email or "").strip()
        validate_signup(name, email, password, confirm_password, agree_terms, self.min_password_length)
        data = await self._call("register", name, email, password, confirm_password)
        return self._start(data, remember_me=True)

    def logout(self) -> None:
        for key in (TOKEN_KEY, USER_KEY, REMEMBER_ME_KEY, LEGACY_USER_KEY):
            self.storage.remove(key)
        if self.clear_cart_on_logout:
            self.storage.remove(CART_KEY)
        logger.info("Session closed")

    async def _call(self, method: str, *args) -> Dict[str, Any]:
        if self.auth_client is None:
            raise RuntimeError("SessionManager has no auth client configured")
        if self._in_flight:
            raise AuthBusyError("A request is already in progress, please wait")
        self._in_flight = True
        try:
            return await getattr(self.auth_client, method)(*args)
        finally:
            self._in_flight = False

    def _start(self, data: Dict[str, Any], remember_me: bool) -> Session:
        user = data.get("user")
        if not isinstance(user, dict):
            user = {}
        session = Session(token=data["token"], user=user)
        self.storage.set(TOKEN_KEY, session.token)
        self.storage.set(USER_KEY, json.dumps(session.user))
        if remember_me:
            self.storage.set(REMEMBER_ME_KEY, "true")
        logger.info("Session started for %s", session.user.get("email", "<unknown>"))
        return session
