from __future__ import annotations

from typing import Any, Dict, List

from chocoblitz.services.cart import CartStore
from chocoblitz.utils.formatters import money


class CartPanel:
    """Cart badge, cart lines and totals, rebuilt on every cart change."""

    def __init__(self, store: CartStore):
        self.badge = 0
        self.lines: List[Dict[str, Any]] = []
        self.totals: Dict[str, str] = {}
        self.refresh(store)
        self._unsubscribe = store.subscribe(self.refresh)

    def refresh(self, store: CartStore) -> None:
        totals = store.get_totals()
        self.badge = store.get_item_count()
        self.lines = [
            {
                "id": it.product_id,
                "name": it.name,
                "image": it.image,
                "quantity": it.quantity,
                "price": money(it.price),
                "line_total": money(it.line_total),
            }
            for it in store.items
        ]
        self.totals = {
            "subtotal": money(totals.subtotal),
            "tax": money(totals.tax),
            "total": money(totals.total),
        }

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def close(self) -> None:
        self._unsubscribe()

    def as_dict(self) -> Dict[str, Any]:
        return {"count": self.badge, "items": self.lines, "totals": self.totals}
