# app/pagination.py
from typing import Any, Optional, Tuple

DEFAULT_PER_PAGE = 12
MAX_PER_PAGE = 100

# largest value a 64-bit signed store column or OFFSET can hold
MAX_STORE_INT = 2 ** 63 - 1


def parse_positive_int(value: Any, upper: int = MAX_STORE_INT) -> Optional[int]:
    """Parse value as an int in 1..upper; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if 1 <= number <= upper else None


def compute_offset_limit(page: Any = None, per_page: Any = None,
                         default_per_page: int = DEFAULT_PER_PAGE) -> Tuple[int, int]:
    """
    Turn a requested page index and page size into an (offset, limit) pair.

    Missing, non-numeric, non-positive or out-of-range values fall back to
    page 1 and default_per_page; nothing here raises.
    """
    limit = parse_positive_int(per_page, MAX_PER_PAGE) or default_per_page
    current_page = parse_positive_int(page, MAX_STORE_INT // limit + 1) or 1
    return (current_page - 1) * limit, limit
