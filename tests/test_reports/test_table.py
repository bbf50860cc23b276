"""Tests for DataFrame export of report output."""

import pytest

from feasibility.models import ReportConfig
from feasibility.reports import (
    group_tree_to_dataframe,
    rows_to_dataframe,
    run_report_engine,
)


class TestRowsToDataFrame:
    """Tests for flat row export."""

    def test_raw_values(self, region_rows):
        df = rows_to_dataframe(region_rows, ["pursuit_name", "region", "calc_total_budget"])

        assert list(df.columns) == ["pursuit_name", "region", "calc_total_budget"]
        assert len(df) == 3
        assert df.loc[0, "pursuit_name"] == "Elm Street"
        assert df.loc[2, "calc_total_budget"] == pytest.approx(19_785_000)

    def test_formatted_values(self, region_rows):
        df = rows_to_dataframe(region_rows, ["calc_total_budget", "vacancy_rate", "stage"], formatted=True)

        assert df.loc[0, "calc_total_budget"] == "$21,890,000"
        assert df.loc[0, "vacancy_rate"] == "7.00%"
        assert df.loc[1, "stage"] == "LOI"

    def test_unknown_columns_dropped(self, region_rows):
        df = rows_to_dataframe(region_rows, ["region", "no_such_field"])
        assert list(df.columns) == ["region"]

    def test_no_rows(self):
        df = rows_to_dataframe([], ["region", "calc_noi"])

        assert df.empty
        assert list(df.columns) == ["region", "calc_noi"]


class TestGroupTreeToDataFrame:
    """Tests for group tree export."""

    def test_nested_tree(self, region_rows):
        result = run_report_engine(region_rows, ReportConfig(group_by=["region", "stage"]))
        df = group_tree_to_dataframe(result.group_tree, ["pursuit_name", "calc_total_budget"])

        assert list(df.columns) == ["depth", "field", "label", "count", "calc_total_budget"]
        assert list(df["label"]) == ["ATX", "LOI", "DFW", "LOI", "Screening"]
        assert list(df["depth"]) == [0, 1, 0, 1, 1]
        assert list(df["count"]) == [1, 1, 2, 1, 1]
        assert df.loc[2, "calc_total_budget"] == pytest.approx(21_890_000 + 19_785_000)

    def test_empty_tree(self):
        df = group_tree_to_dataframe([], ["calc_noi"])

        assert df.empty
        assert list(df.columns) == ["depth", "field", "label", "count", "calc_noi"]
