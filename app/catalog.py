"""
Catalog query engine: filtered/sorted/paginated product listing plus the
single-product lookups and admin mutations.

Products are created in two phases: create_draft() allocates an empty record
so the client can open it in its editor, and update() fills in the content.
"""
import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .categories import CategoryService
from .errors import NotFound
from .filters import ProductCriteria, build_predicate
from .models import Category, Product
from .pagination import DEFAULT_PER_PAGE, compute_offset_limit, parse_positive_int
from .slugs import generate_slug
from .sorting import resolve_ordering

logger = logging.getLogger(__name__)

_PRODUCT_LOAD = (selectinload(Product.category), selectinload(Product.reviews))


class CatalogService:
    def __init__(self, db: Session, categories: Optional[CategoryService] = None,
                 default_per_page: int = DEFAULT_PER_PAGE):
        self.db = db
        self.categories = categories or CategoryService(db)
        self.default_per_page = default_per_page

    # ---------------------------
    # Reads
    # ---------------------------
    def list_products(self, criteria: Optional[ProductCriteria] = None, sort: Any = None,
                      page: Any = None, per_page: Any = None) -> Tuple[List[Product], int]:
        """Return one page of matching products and the count of all matches.

        Both reads share the same predicate object. They are separate
        statements, so a concurrent write can make them disagree.
        """
        predicate = build_predicate(criteria)
        offset, limit = compute_offset_limit(page, per_page, self.default_per_page)

        stmt = (
            select(Product)
            .where(predicate)
            .order_by(*resolve_ordering(sort))
            .offset(offset)
            .limit(limit)
            .options(*_PRODUCT_LOAD)
        )
        products = list(self.db.scalars(stmt).all())
        count = self.db.scalar(select(func.count()).select_from(Product).where(predicate))
        return products, count or 0

    def get_by_id(self, product_id: int) -> Product:
        if parse_positive_int(product_id) is None:
            raise NotFound("Product not found")
        product = self.db.scalar(select(Product).where(Product.id == product_id).options(*_PRODUCT_LOAD))
        if product is None:
            raise NotFound("Product not found")
        return product

    def get_by_slug(self, slug: str) -> Product:
        product = self.db.scalar(select(Product).where(Product.slug == slug).options(*_PRODUCT_LOAD))
        if product is None:
            raise NotFound("Product not found")
        return product

    def list_by_category_slug(self, category_slug: str) -> List[Product]:
        stmt = (
            select(Product)
            .where(Product.category.has(Category.slug == category_slug))
            .order_by(*resolve_ordering())
            .options(*_PRODUCT_LOAD)
        )
        return list(self.db.scalars(stmt).all())

    def list_similar(self, product_id: int) -> List[Product]:
        current = self.get_by_id(product_id)
        if current.category is None:
            return []
        # matches on category name, so equally named categories are merged
        stmt = (
            select(Product)
            .where(Product.category.has(Category.name == current.category.name))
            .where(Product.id != current.id)
            .order_by(*resolve_ordering())
            .options(*_PRODUCT_LOAD)
        )
        return list(self.db.scalars(stmt).all())

    # ---------------------------
    # Writes (admin)
    # ---------------------------
    def create_draft(self) -> int:
        """Insert an empty product and return its id.

        The draft has an empty name and description and price 0. Its slug is
        stored as NULL so several drafts fit under the unique constraint;
        `ProductOut` renders it as "". `Product.is_draft` stays true until
        update() assigns a slug.
        """
        product = Product(name="", slug=None, description="", price=0, images=[])
        self.db.add(product)
        self.db.commit()
        logger.info("Draft product %s created", product.id)
        return product.id

    def update(self, product_id: int, name: str, description: str, price: int,
               images: List[str], category_id: int) -> Product:
        category = self.categories.get_by_id(category_id)
        product = self.get_by_id(product_id)

        product.name = name
        product.slug = generate_slug(name) or f"product-{product.id}"
        product.description = description
        product.price = price
        product.images = list(images)
        product.category = category
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product_id: int) -> None:
        product = self.get_by_id(product_id)
        self.db.delete(product)
        self.db.commit()
        logger.info("Product %s deleted", product_id)
