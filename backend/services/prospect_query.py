"""
Filtres et pagination de la liste des prospects
"""

import re
from typing import Any, Dict, Optional

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20

EXACT_FILTERS = ("geo", "month", "quarter", "rag")


def parse_positive_int(value: Any, default: int) -> int:
    """Parse a query-string number; anything unusable gives the default"""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def build_filter(
    search: Optional[str] = None,
    geo: Optional[str] = None,
    month: Optional[str] = None,
    quarter: Optional[str] = None,
    rag: Optional[str] = None,
) -> Dict:
    """
    Mongo filter shared by the listing and the export.

    - search: case-insensitive substring on the prospect name
    - geo / month / quarter / rag: exact match, skipped when empty
    """
    query = {}

    if search:
        query["prospect"] = {"$regex": re.escape(search), "$options": "i"}

    values = {"geo": geo, "month": month, "quarter": quarter, "rag": rag}
    for field in EXACT_FILTERS:
        if values[field]:
            query[field] = values[field]

    return query
