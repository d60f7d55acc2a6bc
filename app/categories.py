# app/categories.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from .errors import NotFound
from .models import Category
from .pagination import parse_positive_int
from .slugs import generate_slug


class CategoryService:
    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Category]:
        return list(self.db.scalars(select(Category).order_by(Category.id)).all())

    def get_by_id(self, category_id: int) -> Category:
        if parse_positive_int(category_id) is None:
            raise NotFound("Category not found")
        category = self.db.get(Category, category_id)
        if category is None:
            raise NotFound("Category not found")
        return category

    def get_by_slug(self, slug: str) -> Category:
        category = self.db.scalar(select(Category).where(Category.slug == slug))
        if category is None:
            raise NotFound("Category not found")
        return category

    def create(self) -> Category:
        # placeholder, named by a later update()
        category = Category(name="", slug=None)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def update(self, category_id: int, name: str) -> Category:
        category = self.get_by_id(category_id)
        category.name = name
        category.slug = generate_slug(name) or f"category-{category.id}"
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, category_id: int) -> None:
        category = self.get_by_id(category_id)
        self.db.delete(category)
        self.db.commit()
