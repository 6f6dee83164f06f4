"""
Prospect Tracker — Chart pivots (direct Python tests)
"""

from services.chart_data import (
    MONTH_ORDER,
    month_sort_key,
    pair_count_pipeline,
    pivot_counts,
)


def _row(count, **key):
    return {"_id": key, "count": count}


class TestPivotCounts:

    def test_category_geo_shape(self):
        rows = [
            _row(2, geo="EMEA", category="Finance"),
            _row(1, geo="EMEA", category="Retail"),
            _row(3, geo="APAC", category="Retail"),
        ]
        chart = pivot_counts(rows, series_key="geo", axis_key="category")

        assert chart["xAxis"] == ["Finance", "Retail"]
        assert chart["seriesLabels"] == ["APAC", "EMEA"]
        assert chart["data"] == {"APAC": [0, 3], "EMEA": [2, 1]}

    def test_every_series_is_aligned_to_the_axis(self):
        rows = [
            _row(1, geo="EMEA", category="A"),
            _row(1, geo="NA", category="B"),
            _row(1, geo="LATAM", category="C"),
        ]
        chart = pivot_counts(rows, series_key="geo", axis_key="category")
        for counts in chart["data"].values():
            assert len(counts) == len(chart["xAxis"])
            assert sum(counts) == 1

    def test_empty_rows(self):
        assert pivot_counts([], "geo", "category") == {"xAxis": [], "seriesLabels": [], "data": {}}


class TestMonthOrdering:

    def test_calendar_order_not_lexicographic(self):
        rows = [
            _row(1, category="Finance", month="March"),
            _row(4, category="Finance", month="February"),
        ]
        chart = pivot_counts(rows, series_key="category", axis_key="month", axis_sort=month_sort_key)
        assert chart["xAxis"] == ["February", "March"]
        assert chart["data"] == {"Finance": [4, 1]}

    def test_full_year(self):
        shuffled = sorted(MONTH_ORDER)
        assert sorted(shuffled, key=month_sort_key) == MONTH_ORDER

    def test_unknown_months_come_first(self):
        assert sorted(["March", "Q1", "January"], key=month_sort_key) == ["Q1", "January", "March"]


class TestPipeline:

    def test_pipeline_skips_empty_values_and_groups_by_pair(self):
        pipeline = pair_count_pipeline("geo", "category")
        match, group = pipeline[0]["$match"], pipeline[1]["$group"]

        assert match["geo"]["$nin"] == ["", None]
        assert match["category"]["$nin"] == ["", None]
        assert group["_id"] == {"geo": "$geo", "category": "$category"}
        assert group["count"] == {"$sum": 1}
