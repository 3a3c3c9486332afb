"""
Cart Store - shopping cart kept in memory and mirrored to key-value storage.

- one line per product, quantities merged
- name/price/image snapshotted when a product is first added
- the whole cart is rewritten to storage after every mutation
- listeners are notified after each write so views can re-render
- mutations are serialized by a lock, the web view may call in from worker threads
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Tuple

from chocoblitz.constants import CART_KEY, TAX_RATE
from chocoblitz.services.catalog import Catalog
from chocoblitz.services.pricing import calc_totals

logger = logging.getLogger(__name__)

Listener = Callable[["CartStore"], None]


@dataclass
class CartLineItem:
    """Single line in the cart."""
    product_id: int
    name: str
    price: Decimal
    quantity: int = 1
    image: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        # price goes out as a string so the round trip stays exact
        return {
            "id": self.product_id,
            "name": self.name,
            "price": str(self.price),
            "image": self.image,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        return cls(
            product_id=int(data["id"]),
            name=str(data["name"]),
            price=Decimal(str(data["price"])),
            quantity=int(data["quantity"]),
            image=str(data.get("image", "")),
        )


def _valid_price(price: Decimal) -> bool:
    return price.is_finite() and price >= 0


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


class CartStore:
    """
    Owns the cart lines for one storefront.

    Usage:
        store = CartStore(catalog, storage)
        store.subscribe(panel.refresh)
        store.add_item(1)
        store.update_quantity(1, -1)
    """

    def __init__(self, catalog: Catalog, storage, tax_rate: Decimal = TAX_RATE):
        self.catalog = catalog
        self.storage = storage
        self.tax_rate = tax_rate
        self._items: List[CartLineItem] = []
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self.load()

    # ---------------- state ----------------

    @property
    def items(self) -> Tuple[CartLineItem, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def get(self, product_id: int) -> Optional[CartLineItem]:
        return next((it for it in self._items if it.product_id == product_id), None)

    def get_totals(self) -> CartTotals:
        subtotal, tax, total = calc_totals(
            ((it.price, it.quantity) for it in self._items), self.tax_rate
        )
        return CartTotals(subtotal=subtotal, tax=tax, total=total)

    def get_item_count(self) -> int:
        return sum(it.quantity for it in self._items)

    # ---------------- mutations ----------------

    def add_item(self, product_id: int) -> Optional[CartLineItem]:
        product = self.catalog.find_by_id(product_id)
        if product is None:
            logger.debug("add_item ignored, unknown product %s", product_id)
            return None

        with self._lock:
            existing = self.get(product_id)
            if existing:
                existing.quantity += 1
                self._commit()
                return existing

            item = CartLineItem(
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=1,
                image=product.image,
            )
            self._items.append(item)
            self._commit()
            return item

    def remove_item(self, product_id: int) -> None:
        with self._lock:
            self._items = [it for it in self._items if it.product_id != product_id]
            self._commit()

    def update_quantity(self, product_id: int, delta: int) -> Optional[CartLineItem]:
        with self._lock:
            item = self.get(product_id)
            if item is None:
                return None
            item.quantity += delta
            if item.quantity <= 0:
                self.remove_item(product_id)
                return None
            self._commit()
            return item

    def clear(self) -> None:
        with self._lock:
            self._items = []
            self._commit()

    # ---------------- persistence ----------------

    def load(self) -> None:
        """Replace the in-memory lines with whatever storage holds."""
        with self._lock:
            raw = self.storage.get(CART_KEY)
            items: List[CartLineItem] = []
            if raw:
                try:
                    for entry in json.loads(raw):
                        item = CartLineItem.from_dict(entry)
                        if item.quantity <= 0 or not _valid_price(item.price):
                            continue
                        current = next((it for it in items if it.product_id == item.product_id), None)
                        if current:
                            current.quantity += item.quantity
                        else:
                            items.append(item)
                except (ValueError, KeyError, TypeError, InvalidOperation) as e:
                    logger.warning("Corrupted cart data in storage, starting empty: %s", e)
                    self.storage.remove(CART_KEY)
                    items = []
            self._items = items
            self._notify()

    def save(self) -> None:
        self.storage.set(CART_KEY, json.dumps([it.to_dict() for it in self._items]))

    # ---------------- listeners ----------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _commit(self) -> None:
        self.save()
        self._notify()
