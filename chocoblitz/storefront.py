"""Application root: owns the stores and hands them to the views."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from chocoblitz.config import settings
from chocoblitz.db.sqlite import SqliteStorage
from chocoblitz.services.auth_api import AuthClient, resolve_api_base
from chocoblitz.services.cart import CartStore
from chocoblitz.services.catalog import Catalog
from chocoblitz.services.feedback import ContactDesk, ReviewBoard
from chocoblitz.services.session import SessionManager
from chocoblitz.utils.formatters import money

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    pass


@dataclass(frozen=True)
class Receipt:
    items: int
    total: Decimal

    @property
    def message(self) -> str:
        return (
            f"Thank you for your order! Total: {money(self.total)}\n\n"
            "This is a demo. In a real application, you would proceed to payment."
        )


class Storefront:
    def __init__(
        self,
        storage,
        catalog: Optional[Catalog] = None,
        auth_client: Optional[AuthClient] = None,
        clear_cart_on_logout: bool = True,
        min_password_length: int = 8,
    ):
        self.storage = storage
        self.catalog = catalog or Catalog()
        self.cart = CartStore(self.catalog, storage)
        self.session = SessionManager(
            storage,
            auth_client=auth_client,
            clear_cart_on_logout=clear_cart_on_logout,
            min_password_length=min_password_length,
        )
        self.reviews = ReviewBoard()
        self.contact = ContactDesk()

    @classmethod
    def from_settings(cls) -> "Storefront":
        base_url = settings.api_base_url or resolve_api_base(settings.page_origin)
        return cls(
            SqliteStorage(settings.db_path),
            auth_client=AuthClient(base_url, timeout=settings.api_timeout),
            clear_cart_on_logout=settings.clear_cart_on_logout,
            min_password_length=settings.min_password_length,
        )

    def checkout(self) -> Receipt:
        if self.cart.is_empty:
            raise CheckoutError("Your cart is empty!")
        receipt = Receipt(items=self.cart.get_item_count(), total=self.cart.get_totals().total)
        logger.info("Checkout: %s items, total %s", receipt.items, receipt.total)
        self.cart.clear()
        return receipt

    def logout(self) -> None:
        self.session.logout()
        # re-read so the in-memory cart matches what logout left in storage
        self.cart.load()
