"""
tests/test_correlation.py -- per-(country, income) tenure correlations.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from oecd_tenure.config import INCOME_QUINTILES, TENURE_MODES
from oecd_tenure.correlation import correlation_matrix, export_correlations, tenure_correlations


def _r(corr, income, x, y):
    row = corr[(corr["income"] == income) & (corr["tenure_x"] == x) & (corr["tenure_y"] == y)]
    assert len(row) == 1
    return row["correlation"].iloc[0]


class TestTenureCorrelations:
    def test_long_form_columns_and_size(self, income_long):
        corr = tenure_correlations(income_long)
        assert list(corr.columns) == ["country", "income", "tenure_x", "tenure_y", "correlation"]
        # two groups, full 3x3 matrix each
        assert len(corr) == 2 * 3 * 3

    def test_matrix_is_symmetric(self, income_long):
        corr = tenure_correlations(income_long)
        for income in ("Bottom quintile", "Top quintile"):
            mat = correlation_matrix(corr, "Denmark", income)
            assert (mat.values == mat.values.T).all()

    def test_unit_diagonal_for_varying_series(self, income_long):
        corr = tenure_correlations(income_long)
        assert _r(corr, "Bottom quintile", "Rent (private)", "Rent (private)") == pytest.approx(1.0)
        assert _r(corr, "Bottom quintile", "Own outright", "Own outright") == pytest.approx(1.0)

    def test_perfect_negative_correlation(self, income_long):
        corr = tenure_correlations(income_long)
        assert _r(corr, "Bottom quintile", "Rent (private)", "Own outright") == pytest.approx(-1.0)

    def test_constant_series_gives_zero(self, income_long):
        corr = tenure_correlations(income_long)
        assert _r(corr, "Bottom quintile", "Owner with mortgage", "Rent (private)") == 0.0
        assert _r(corr, "Bottom quintile", "Owner with mortgage", "Owner with mortgage") == 0.0

    def test_pairwise_complete_years(self, income_long):
        corr = tenure_correlations(income_long)
        expected = np.corrcoef([0.10, 0.15, 0.12], [0.65, 0.60, 0.63])[0, 1]
        assert _r(corr, "Top quintile", "Rent (private)", "Own outright") == pytest.approx(expected)

    def test_values_within_bounds(self, income_long):
        corr = tenure_correlations(income_long)
        assert corr["correlation"].between(-1.0 - 1e-9, 1.0 + 1e-9).all()
        assert corr["correlation"].notna().all()

    def test_categories_are_ordered(self, income_long):
        corr = tenure_correlations(income_long)
        assert list(corr["income"].cat.categories) == INCOME_QUINTILES
        assert list(corr["tenure_x"].cat.categories) == TENURE_MODES
        assert corr["income"].astype(str).iloc[0] == "Bottom quintile"

    def test_single_year_groups_are_all_zero(self):
        long = pd.DataFrame(
            {
                "country": ["Spain", "Spain"],
                "tenure_type": ["Own outright", "Rent (private)"],
                "income": ["Top quintile", "Top quintile"],
                "year": [2020, 2020],
                "value": [0.7, 0.3],
            }
        )
        corr = tenure_correlations(long)
        assert (corr["correlation"] == 0.0).all()

    def test_empty_input_raises(self, income_long):
        with pytest.raises(ValueError):
            tenure_correlations(income_long.iloc[0:0])


class TestCorrelationMatrix:
    def test_square_in_category_order(self, income_long):
        corr = tenure_correlations(income_long)
        mat = correlation_matrix(corr, "Denmark", "Top quintile")
        order = ["Rent (private)", "Owner with mortgage", "Own outright"]
        assert list(mat.index) == order
        assert list(mat.columns) == order

    def test_unknown_group_is_empty(self, income_long):
        corr = tenure_correlations(income_long)
        assert correlation_matrix(corr, "Nowhere", "Top quintile").empty

    def test_works_on_reloaded_csv(self, income_long, tmp_path):
        path = export_correlations(tenure_correlations(income_long), tmp_path)
        reloaded = pd.read_csv(path)
        mat = correlation_matrix(reloaded, "Denmark", "Bottom quintile")
        assert mat.loc["Rent (private)", "Own outright"] == pytest.approx(-1.0)


class TestExportCorrelations:
    def test_writes_csv(self, income_long, tmp_path):
        path = export_correlations(tenure_correlations(income_long), tmp_path / "processed")
        assert path.name == "tenure_income_correlations.csv"
        written = pd.read_csv(path)
        assert list(written.columns) == ["country", "income", "tenure_x", "tenure_y", "correlation"]
        assert len(written) == 18
