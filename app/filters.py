"""
Builds the product predicate from optional catalog criteria.

Raw query values arrive as strings. Anything that does not coerce cleanly is
treated as absent, so a bad value narrows nothing instead of matching
everything by accident.
"""
import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, FrozenSet, Optional

from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement

from .models import Category, Product, Review
from .pagination import MAX_STORE_INT, parse_positive_int

_RATING_SEPARATORS = re.compile(r"[|,\s]+")


@dataclass(frozen=True)
class ProductCriteria:
    category_id: Optional[int] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    ratings: Optional[FrozenSet[int]] = None
    search_term: Optional[str] = None

    @classmethod
    def from_query(cls, category_id: Any = None, min_price: Any = None, max_price: Any = None,
                   ratings: Any = None, search_term: Any = None) -> "ProductCriteria":
        term = search_term.strip() if isinstance(search_term, str) else None
        return cls(
            category_id=parse_positive_int(category_id),
            min_price=_to_price(min_price, math.ceil),
            max_price=_to_price(max_price, math.floor),
            ratings=_to_ratings(ratings),
            search_term=term or None,
        )


def _to_price(value: Any, rounding: Callable[[Decimal], int]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        price = Decimal(raw)
    except InvalidOperation:
        return None
    # the store cannot compare against values past 64 bits
    if not price.is_finite() or price.copy_abs() > MAX_STORE_INT:
        return None
    # prices are whole currency units, so fractional bounds round inward
    return int(rounding(price))


def _to_ratings(value: Any) -> Optional[FrozenSet[int]]:
    if value is None:
        return None
    if isinstance(value, str):
        tokens = [t for t in _RATING_SEPARATORS.split(value) if t]
    elif isinstance(value, (list, tuple, set, frozenset)):
        tokens = list(value)
    else:
        tokens = [value]
    ratings = {parse_positive_int(token) for token in tokens}
    ratings.discard(None)
    return frozenset(ratings) or None


# ---------------------------
# Sub-predicates
# ---------------------------
def category_filter(category_id: int) -> ColumnElement:
    return Product.category_id == category_id


def price_filter(min_price: Optional[int], max_price: Optional[int]) -> ColumnElement:
    bounds = []
    if min_price is not None:
        bounds.append(Product.price >= min_price)
    if max_price is not None:
        bounds.append(Product.price <= max_price)
    return and_(*bounds)


def rating_filter(ratings: FrozenSet[int]) -> ColumnElement:
    # at least one review with an accepted rating
    return Product.reviews.any(Review.rating.in_(sorted(ratings)))


def search_term_filter(term: str) -> ColumnElement:
    return or_(
        Product.name.icontains(term, autoescape=True),
        Product.description.icontains(term, autoescape=True),
        Product.category.has(Category.name.icontains(term, autoescape=True)),
    )


def build_predicate(criteria: Optional[ProductCriteria] = None) -> ColumnElement:
    """AND of one sub-predicate per present criterion; matches everything when none are set."""
    if criteria is None:
        return true()

    filters = []
    if criteria.search_term:
        filters.append(search_term_filter(criteria.search_term))
    if criteria.ratings:
        filters.append(rating_filter(criteria.ratings))
    if criteria.min_price is not None or criteria.max_price is not None:
        filters.append(price_filter(criteria.min_price, criteria.max_price))
    if criteria.category_id is not None:
        filters.append(category_filter(criteria.category_id))

    return and_(*filters) if filters else true()
