"""
Prospect Tracker - Données des graphiques

Deux pivots sur toute la collection:
- category x geo   -> une série par geo, axe = catégories triées
- category x month -> une série par catégorie, axe = mois (ordre calendaire)

Mongo compte les couples, Python remet en forme pour le front.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from config import db

logger = logging.getLogger("chart_data")

MONTH_ORDER = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

CATEGORY_GEO_FILTERS = ["Categories", "Geo"]
CATEGORY_MONTH_FILTERS = ["Month", "Categories"]


def empty_chart() -> Dict:
    return {"success": True, "xAxis": [], "seriesLabels": [], "data": {}}


def month_sort_key(month: str):
    # Unknown month names go first, like an indexOf() of -1
    index = MONTH_ORDER.index(month) if month in MONTH_ORDER else -1
    return (index, month)


def pair_count_pipeline(first: str, second: str) -> List[Dict]:
    """Count documents per (first, second) couple, ignoring empty values"""
    return [
        {"$match": {
            first: {"$exists": True, "$nin": ["", None]},
            second: {"$exists": True, "$nin": ["", None]},
        }},
        {"$group": {
            "_id": {first: f"${first}", second: f"${second}"},
            "count": {"$sum": 1},
        }},
    ]


def pivot_counts(
    rows: Iterable[Dict],
    series_key: str,
    axis_key: str,
    axis_sort: Optional[Callable] = None,
) -> Dict:
    """
    Reshape pair counts into {xAxis, seriesLabels, data}.

    data[series] holds one count per xAxis entry, 0 for missing couples.
    """
    counts: Dict[str, Dict[str, int]] = {}
    axis = set()
    for row in rows:
        key = row["_id"]
        series, point = key[series_key], key[axis_key]
        counts.setdefault(series, {})
        counts[series][point] = counts[series].get(point, 0) + row["count"]
        axis.add(point)

    x_axis = sorted(axis, key=axis_sort)
    series_labels = sorted(counts)
    data = {
        series: [counts[series].get(point, 0) for point in x_axis]
        for series in series_labels
    }
    return {"xAxis": x_axis, "seriesLabels": series_labels, "data": data}


async def _pair_counts(first: str, second: str) -> List[Dict]:
    pipeline = pair_count_pipeline(first, second)
    return await db.prospect_details.aggregate(pipeline).to_list(None)


async def category_geo_chart() -> Dict:
    rows = await _pair_counts("geo", "category")
    if not rows:
        return empty_chart()

    chart = pivot_counts(rows, series_key="geo", axis_key="category")
    logger.info(f"Category/geo chart: {len(chart['seriesLabels'])} geos, {len(chart['xAxis'])} categories")
    return {"success": True, **chart, "filterNames": CATEGORY_GEO_FILTERS}


async def category_month_chart() -> Dict:
    rows = await _pair_counts("category", "month")
    if not rows:
        return empty_chart()

    chart = pivot_counts(rows, series_key="category", axis_key="month", axis_sort=month_sort_key)
    logger.info(f"Category/month chart: {len(chart['seriesLabels'])} categories, {len(chart['xAxis'])} months")
    return {"success": True, **chart, "filterNames": CATEGORY_MONTH_FILTERS}
