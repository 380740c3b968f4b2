"""
Shared synthetic sheets and tidy frames for the test suite.

Provides:
  modes_layout / modes_header / modes_body   -- single-row header sheet
  income_layout / income_header / income_body -- two-row merged header sheet
  income_long                                  -- tidy tenure-by-income frame for correlations
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from oecd_tenure.config import SheetLayout


# ---------------------------------------------------------------------------
# Tenure by country and year: 2 countries x 3 tenures x 2 years, one ".."
# cell and one blank spacer column between the years.
# ---------------------------------------------------------------------------

@pytest.fixture
def modes_layout() -> SheetLayout:
    return SheetLayout(
        sheet_name="Tenure",
        usecols="A:E",
        header_rows=(0,),
        first_data_row=1,
        nrows=6,
        id_columns=("country", "tenure_mode"),
        dimensions=("year",),
    )


@pytest.fixture
def modes_header() -> pd.DataFrame:
    return pd.DataFrame([[2019, None, 2020]], dtype=object)


@pytest.fixture
def modes_body() -> pd.DataFrame:
    return pd.DataFrame(
        [
            ["Austria", "Rent (private)", 40, None, 41],
            [None, "Owner with mortgage", 35, None, ".."],
            [None, "Own outright", 25, None, 24],
            ["Belgium", "Rent (private)", 30, None, 29],
            [None, "Owner with mortgage", 40, None, 41],
            [None, "Own outright", 30, None, 30],
        ],
        dtype=object,
    )


# ---------------------------------------------------------------------------
# Tenure by income quintile: quintile label merged over its years
# ---------------------------------------------------------------------------

@pytest.fixture
def income_layout() -> SheetLayout:
    return SheetLayout(
        sheet_name="Income",
        usecols="A:G",
        header_rows=(0, 1),
        first_data_row=2,
        nrows=3,
        id_columns=("country", "tenure_type"),
        dimensions=("income", "year"),
    )


@pytest.fixture
def income_header() -> pd.DataFrame:
    return pd.DataFrame(
        [
            ["Bottom quintile", None, None, "Top quintile", None],
            [2019, 2020, None, 2019, 2020],
        ],
        dtype=object,
    )


@pytest.fixture
def income_body() -> pd.DataFrame:
    return pd.DataFrame(
        [
            ["Chile", "Rent (private)", 20, 22, None, 10, 11],
            [None, "Own outright", 50, 48, None, 70, ".."],
            [None, "Owner with mortgage", 30, 30, None, 20, 20],
        ],
        dtype=object,
    )


# ---------------------------------------------------------------------------
# Tidy frame for the correlation engine
# ---------------------------------------------------------------------------

INCOME_SERIES = {
    "Bottom quintile": {
        "Rent (private)": [0.2, 0.3, 0.4, 0.5],
        "Owner with mortgage": [0.25, 0.25, 0.25, 0.25],
        "Own outright": [0.55, 0.45, 0.35, 0.25],
    },
    "Top quintile": {
        "Rent (private)": [0.10, 0.15, 0.12, None],
        "Owner with mortgage": [0.25, 0.25, 0.25, 0.25],
        "Own outright": [0.65, 0.60, 0.63, 0.75],
    },
}
YEARS = [2015, 2016, 2017, 2018]


@pytest.fixture
def income_long() -> pd.DataFrame:
    rows = []
    for income, series in INCOME_SERIES.items():
        for tenure, values in series.items():
            for year, value in zip(YEARS, values):
                if value is not None:
                    rows.append(
                        {"country": "Denmark", "tenure_type": tenure, "income": income,
                         "year": year, "value": value}
                    )
    return pd.DataFrame(rows)
