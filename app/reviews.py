# app/reviews.py
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .catalog import CatalogService
from .models import Review
from .pagination import parse_positive_int


class ReviewService:
    def __init__(self, db: Session, catalog: CatalogService):
        self.db = db
        self.catalog = catalog

    def list(self) -> List[Review]:
        stmt = select(Review).order_by(Review.created_at.desc(), Review.id.desc())
        return list(self.db.scalars(stmt).all())

    def create(self, user_id: int, product_id: int, rating: int, text: str) -> Review:
        # raises NotFound for unknown products
        self.catalog.get_by_id(product_id)

        review = Review(user_id=user_id, product_id=product_id, rating=rating, text=text)
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)
        return review

    def average_by_product(self, product_id: int) -> Optional[float]:
        if parse_positive_int(product_id) is None:
            return None
        avg = self.db.scalar(select(func.avg(Review.rating)).where(Review.product_id == product_id))
        return float(avg) if avg is not None else None
