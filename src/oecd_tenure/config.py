from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


# ---------------------------------------------------------------------
# Project directories (resolved from this file location)
# ---------------------------------------------------------------------
REPO_DIR = Path(__file__).resolve().parents[2]  # .../oecd-housing-tenure
DATA_DIR = REPO_DIR / "data"
RAW_DIR = DATA_DIR / "raw"
PROC_DIR = DATA_DIR / "processed"
FIG_DIR = REPO_DIR / "figures"
NETWORK_DIR = FIG_DIR / "networks"


# ---------------------------------------------------------------------
# Source workbook (OECD Affordable Housing Database, HM1.3)
# ---------------------------------------------------------------------
SOURCE_URL = "https://www.oecd.org/els/family/HM1-3-Housing-tenures.xlsx"
RAW_WORKBOOK = RAW_DIR / "HM1-3-Housing-tenures.xlsx"
HTTP_TIMEOUT = 60  # seconds

LOG_LEVEL = "INFO"
LOG_FORMAT = "console"  # "console" | "json"

HEADER_SEP = "|"
MISSING_MARKER = ".."


# ---------------------------------------------------------------------
# Category orders
# ---------------------------------------------------------------------
# Stacking order for area charts: renters at the bottom, owners on top.
TENURE_MODES = [
    "Rent (subsidized)",
    "Rent (private)",
    "Owner with mortgage",
    "Own outright",
    "Other, unknown",
]

INCOME_QUINTILES = [
    "Bottom quintile",
    "2nd quintile",
    "3rd quintile",
    "4th quintile",
    "Top quintile",
]

# Lower-cased source spellings -> canonical label
TENURE_ALIASES = {
    "rent (subsidized)": "Rent (subsidized)",
    "rent (subsidised)": "Rent (subsidized)",
    "rent subsidized": "Rent (subsidized)",
    "subsidized rent": "Rent (subsidized)",
    "subsidised rent": "Rent (subsidized)",
    "rent (private)": "Rent (private)",
    "rent private": "Rent (private)",
    "private rent": "Rent (private)",
    "owner with mortgage": "Owner with mortgage",
    "own with mortgage": "Owner with mortgage",
    "owner-occupied with mortgage": "Owner with mortgage",
    "own outright": "Own outright",
    "owner outright": "Own outright",
    "owner-occupied outright": "Own outright",
    "other, unknown": "Other, unknown",
    "other/unknown": "Other, unknown",
    "other or unknown": "Other, unknown",
    "other": "Other, unknown",
    "unknown": "Other, unknown",
}

INCOME_ALIASES = {
    "bottom quintile": "Bottom quintile",
    "bottom": "Bottom quintile",
    "1st quintile": "Bottom quintile",
    "first quintile": "Bottom quintile",
    "q1": "Bottom quintile",
    "2nd quintile": "2nd quintile",
    "second quintile": "2nd quintile",
    "q2": "2nd quintile",
    "3rd quintile": "3rd quintile",
    "third quintile": "3rd quintile",
    "q3": "3rd quintile",
    "4th quintile": "4th quintile",
    "fourth quintile": "4th quintile",
    "q4": "4th quintile",
    "top quintile": "Top quintile",
    "top": "Top quintile",
    "5th quintile": "Top quintile",
    "fifth quintile": "Top quintile",
    "q5": "Top quintile",
}


# ---------------------------------------------------------------------
# Sheet layouts
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class SheetLayout:
    sheet_name: str
    usecols: str                  # Excel column range, e.g. "A:P"
    header_rows: Tuple[int, ...]  # 0-based sheet rows, outermost level first
    first_data_row: int           # 0-based sheet row of the first data row
    nrows: int                    # number of data rows to read
    id_columns: Tuple[str, ...]   # country column first, tenure column second
    dimensions: Tuple[str, ...]   # parts of each flattened header, outer first
    value_scale: float = 0.01     # percent -> fraction

    @property
    def country_column(self) -> str:
        return self.id_columns[0]

    @property
    def tenure_column(self) -> str:
        return self.id_columns[1]


# These ranges follow the publisher's current workbook. Adding countries or
# years upstream means editing them here.

# Share of households by tenure, 38 countries x 5 tenures, 2010-2022.
TENURE_MODES_LAYOUT = SheetLayout(
    sheet_name="HM1.3.A2",
    usecols="A:P",
    header_rows=(3,),
    first_data_row=4,
    nrows=190,
    id_columns=("country", "tenure_mode"),
    dimensions=("year",),
)

# Share of households by tenure and income quintile, quintile blocks of
# 2010-2021 separated by blank spacer columns.
TENURE_INCOME_LAYOUT = SheetLayout(
    sheet_name="HM1.3.A3",
    usecols="A:BN",
    header_rows=(3, 4),
    first_data_row=5,
    nrows=190,
    id_columns=("country", "tenure_type"),
    dimensions=("income", "year"),
)
