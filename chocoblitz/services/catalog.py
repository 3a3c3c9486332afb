from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from chocoblitz.constants import CATEGORIES, FILTER_ALL


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    category: str  # dark / milk / white / special
    price: Decimal
    image: str
    description: str


def _p(id: int, name: str, category: str, price: str, image: str, description: str) -> Product:
    return Product(id, name, category, Decimal(price), f"images/{image}", description)


PRODUCTS: Tuple[Product, ...] = (
    _p(1, "Dark Elegance", "dark", "24.99", "dark-elegance.jpg", "Rich 85% dark chocolate with hints of cherry"),
    _p(2, "Milk Dream", "milk", "19.99", "milk-dream.jpg", "Creamy Belgian milk chocolate perfection"),
    _p(3, "White Silk", "white", "22.99", "white-silk.jpg", "Smooth white chocolate with vanilla notes"),
    _p(4, "Truffle Bliss", "special", "34.99", "truffle-bliss.jpg", "Luxurious truffle collection with gold flakes"),
    _p(5, "Dark Noir", "dark", "26.99", "dark-noir.jpg", "Intense 90% cacao with sea salt"),
    _p(6, "Caramel Swirl", "milk", "21.99", "caramel-swirl.jpg", "Milk chocolate with caramel ribbons"),
    _p(
        7, "Noire Elite", "special", "89.99", "noire-elite.jpg",
        "A distinguished chocolate crafted for connoisseurs who crave depth, mystery, and impeccable refinement.",
    ),
    _p(
        8, "Obsidian Bliss", "dark", "102.99", "obsidian-bliss.jpg",
        "An honest, pure expression of fine cacao, uncompromised and crafted with artisanal pride.",
    ),
    _p(
        9, "Aurum Cocoa", "special", "57.99", "aurum-cocoa.jpg",
        "A dark, velvety indulgence that melts with the richness and allure of polished black stone",
    ),
    _p(
        10, "Cocoa Verite", "white", "92.99", "cocoa-verite.jpg",
        "A golden-tier experience where rare cacao meets regal elegance in every luxurious bite",
    ),
    _p(
        11, "Veloure", "milk", "107.99", "veloure.jpg",
        "A silk-smooth masterpiece that drapes the palate with soft, indulgent richness.",
    ),
    _p(
        12, "Eclipse Royale", "white", "79.99", "eclipse-royale.jpg",
        "A celestial fusion of rare cacao and majestic elegance, crafted to leave a lingering aura of luxury.",
    ),
    _p(
        13, "Marquis d Or", "milk", "110.99", "marquis-d-or.jpg",
        "A noble chocolate experience inspired by aristocratic refinement, offering a golden touch of decadence.",
    ),
    _p(14, "Raspberry White", "white", "23.99", "raspberry-white.jpg", "White chocolate infused with raspberry"),
    _p(15, "Gold Collection", "special", "49.99", "gold-collection.jpg", "Premium assortment with edible gold"),
)


class Catalog:
    """Read-only product list with lookup by id and category filter."""

    def __init__(self, products: Iterable[Product] = PRODUCTS):
        self._products: Tuple[Product, ...] = tuple(products)
        self._by_id: Dict[int, Product] = {}
        for p in self._products:
            if p.id in self._by_id:
                raise ValueError(f"duplicate product id: {p.id}")
            if p.category not in CATEGORIES:
                raise ValueError(f"unknown category {p.category!r} for product {p.id}")
            if p.price < 0:
                raise ValueError(f"negative price for product {p.id}")
            self._by_id[p.id] = p

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self):
        return iter(self._products)

    def find_by_id(self, product_id: int) -> Optional[Product]:
        return self._by_id.get(product_id)

    def filter(self, category: str = FILTER_ALL) -> List[Product]:
        if category == FILTER_ALL:
            return list(self._products)
        return [p for p in self._products if p.category == category]

    @staticmethod
    def categories() -> List[str]:
        return [FILTER_ALL, *CATEGORIES.keys()]
