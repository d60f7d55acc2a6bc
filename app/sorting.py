# app/sorting.py
import enum
from typing import Any, List

from sqlalchemy.sql.elements import UnaryExpression

from .models import Product


class ProductSort(str, enum.Enum):
    HIGH_PRICE = "high-price"
    LOW_PRICE = "low-price"
    NEWEST = "newest"
    OLDEST = "oldest"


def _parse_sort(sort_key: Any) -> ProductSort:
    if isinstance(sort_key, ProductSort):
        return sort_key
    if not isinstance(sort_key, str):
        return ProductSort.NEWEST
    key = sort_key.strip().lower().replace("_", "-")
    try:
        return ProductSort(key)
    except ValueError:
        return ProductSort.NEWEST


def resolve_ordering(sort_key: Any = None) -> List[UnaryExpression]:
    """Map a sort key to ORDER BY clauses; unknown or missing keys sort newest first."""
    sort = _parse_sort(sort_key)
    # id breaks ties so equal prices or timestamps page deterministically
    if sort is ProductSort.HIGH_PRICE:
        return [Product.price.desc(), Product.id.desc()]
    if sort is ProductSort.LOW_PRICE:
        return [Product.price.asc(), Product.id.asc()]
    if sort is ProductSort.OLDEST:
        return [Product.created_at.asc(), Product.id.asc()]
    return [Product.created_at.desc(), Product.id.desc()]
