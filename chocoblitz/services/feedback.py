from __future__ import annotations

from dataclasses import dataclass
from typing import List

from chocoblitz.utils.validators import require_fields, validate_rating

CONTACT_REPLY = "Thank you for your message! We'll get back to you soon."


@dataclass(frozen=True)
class Review:
    name: str
    location: str
    rating: int
    text: str
    posted: str = "Posted just now"


class ReviewBoard:
    """Reviews shown on the page. Nothing is stored; a restart drops them."""

    def __init__(self):
        self._reviews: List[Review] = []

    @property
    def reviews(self) -> List[Review]:
        return list(self._reviews)

    def submit(self, name: str, location: str, rating: int, text: str) -> Review:
        require_fields(name, text)
        review = Review(
            name=name.strip(),
            location=(location or "").strip(),
            rating=validate_rating(rating),
            text=text.strip(),
        )
        self._reviews.insert(0, review)
        return review


class ContactDesk:
    def submit(self, name: str, email: str, message: str) -> str:
        require_fields(name, email, message)
        return CONTACT_REPLY
