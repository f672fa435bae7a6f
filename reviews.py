"""
In-memory review store.

Append-only: reviews are never edited or removed. Lookups return newest first.
"""
import time
from typing import Dict, List

import structlog

from schemas import Review, ReviewIn, ReviewOrigin

logger = structlog.get_logger(__name__)


class ReviewStore:
    def __init__(self):
        self._reviews: List[Review] = []
        self._by_product: Dict[str, List[Review]] = {}

    def add(self, review: Review) -> Review:
        self._reviews.insert(0, review)
        self._by_product.setdefault(review.product_id, []).insert(0, review)
        logger.info("review_added", review_id=review.id, product_id=review.product_id, rating=review.rating)
        return review

    def for_product(self, product_id: str) -> List[Review]:
        return list(self._by_product.get(product_id, []))

    def all(self) -> List[Review]:
        return list(self._reviews)

    def __len__(self) -> int:
        return len(self._reviews)


def new_review(product_id: str, payload: ReviewIn) -> Review:
    return Review(
        id=f"user-{time.time_ns()}",
        product_id=product_id,
        author=payload.author,
        rating=payload.rating,
        date="Just now",
        title=payload.title or None,
        text=payload.text,
        origin=ReviewOrigin.USER,
    )
