from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from oecd_tenure.config import (
    HEADER_SEP,
    INCOME_ALIASES,
    INCOME_QUINTILES,
    MISSING_MARKER,
    PROC_DIR,
    TENURE_ALIASES,
    TENURE_INCOME_LAYOUT,
    TENURE_MODES,
    TENURE_MODES_LAYOUT,
    SheetLayout,
)
from oecd_tenure.logging import get_logger

log = get_logger(__name__)


# ---------------------------------------------------------------------
# Helpers: blank detection and label text
# ---------------------------------------------------------------------
def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _label_text(value: Any) -> str:
    # Excel hands back years as 2010.0 when the column holds any float
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    return str(value).strip()


# ---------------------------------------------------------------------
# 1. Header reconstruction
# ---------------------------------------------------------------------
def forward_fill(values: Iterable[Any]) -> List[Any]:
    """
    Replace every blank with the nearest preceding non-blank value.

    Blanks are None, NaN and empty/whitespace strings. Blanks before the first
    non-blank value have nothing to inherit and come back as None.
    """
    last = None
    out = []
    for v in values:
        if _is_blank(v):
            out.append(last)
        else:
            last = v
            out.append(v)
    return out


def reconstruct_header(header_rows: pd.DataFrame, sep: str = HEADER_SEP) -> List[str]:
    """
    Flatten stacked (merged-cell) header rows into one name per data column.

    Parameters
    ----------
    header_rows : DataFrame
        One row per header level, outermost first, one column per data column
        (identifier columns already removed). Merged outer cells only carry
        their label in the first column they span.
    sep : str
        Separator placed between levels.

    Returns
    -------
    list of str
        ``outer|...|inner`` for every column with a non-blank inner label, in
        column order. Columns with no inner label (spacers) are skipped.
    """
    levels = header_rows.T.reset_index(drop=True)
    levels.columns = range(levels.shape[1])
    inner = levels.columns[-1]

    for col in levels.columns[:-1]:
        levels[col] = forward_fill(levels[col].tolist())

    levels = levels[~levels[inner].map(_is_blank)]

    names = []
    for row in levels.itertuples(index=False):
        if any(_is_blank(v) for v in row):
            raise ValueError(f"Header column has no outer label: {list(row)!r}")
        parts = [_label_text(v) for v in row]
        if any(sep in p for p in parts):
            raise ValueError(f"Header label contains separator {sep!r}: {parts!r}")
        names.append(sep.join(parts))
    return names


def split_column_name(name: str, parts: int = 2, sep: str = HEADER_SEP) -> Tuple[str, ...]:
    """Inverse of reconstruct_header for a single flattened name."""
    pieces = tuple(str(name).split(sep))
    if len(pieces) != parts:
        raise ValueError(f"Expected {parts} part(s) in column {name!r}, got {len(pieces)}")
    return pieces


# ---------------------------------------------------------------------
# 2. Typed columns
# ---------------------------------------------------------------------
def as_category(values: pd.Series, aliases: Mapping[str, str], categories: Sequence[str],
                label: str) -> pd.Categorical:
    """Map source spellings onto a fixed ordered category set; unknown labels are fatal."""
    mapped = values.map(lambda v: aliases.get(str(v).strip().lower()))
    unknown = sorted(set(values[mapped.isna()].astype(str)))
    if unknown:
        raise ValueError(f"Unknown {label} label(s): {unknown}")
    return pd.Categorical(mapped, categories=list(categories), ordered=True)


def _to_numeric(values: pd.Series) -> pd.Series:
    cleaned = values.map(
        lambda v: np.nan if _is_blank(v) or (isinstance(v, str) and v.strip() == MISSING_MARKER) else v
    )
    return pd.to_numeric(cleaned, errors="raise").astype(float)


def drop_empty_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Drop spacer columns that hold no data at all."""
    keep = [i for i in range(df.shape[1]) if not df.iloc[:, i].map(_is_blank).all()]
    return df.iloc[:, keep]


# ---------------------------------------------------------------------
# 3. Sheet reading and tidying
# ---------------------------------------------------------------------
def read_sheet(file_path: Path, layout: SheetLayout) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Read the header rows and the data body of one sheet separately.

    Returns
    -------
    header : DataFrame
        The layout's header rows (outer first), identifier columns removed.
    body : DataFrame
        Raw data rows including the identifier columns, read as objects so the
        missing-value marker survives untouched.
    """
    first, last = min(layout.header_rows), max(layout.header_rows)
    header = pd.read_excel(
        file_path, sheet_name=layout.sheet_name, header=None, usecols=layout.usecols,
        skiprows=first, nrows=last - first + 1, dtype=object, engine="openpyxl",
    )
    header = header.iloc[[r - first for r in layout.header_rows], len(layout.id_columns):]

    body = pd.read_excel(
        file_path, sheet_name=layout.sheet_name, header=None, usecols=layout.usecols,
        skiprows=layout.first_data_row, nrows=layout.nrows, dtype=object, engine="openpyxl",
    )
    return header.reset_index(drop=True), body


def tidy_sheet(body: pd.DataFrame, names: Sequence[str], layout: SheetLayout) -> pd.DataFrame:
    """
    Reshape a wide sheet body into one row per observation.

    Parameters
    ----------
    body : DataFrame
        Identifier columns followed by value columns, possibly with spacer columns.
    names : sequence of str
        Flattened header names, aligned with the non-spacer value columns.
    layout : SheetLayout
        Supplies identifier/dimension names and the value scale.

    Returns
    -------
    DataFrame with columns: country, <tenure column>, [income], year, value.
    Missing cells (the ``..`` marker or blanks) are dropped.
    """
    id_cols = list(layout.id_columns)
    dims = list(layout.dimensions)
    country_col, tenure_col = layout.country_column, layout.tenure_column

    df = drop_empty_columns(body).copy()
    if df.shape[1] - len(id_cols) != len(names):
        raise ValueError(
            f"{layout.sheet_name}: {df.shape[1] - len(id_cols)} value columns but "
            f"{len(names)} header names; check the sheet layout ranges"
        )
    df.columns = id_cols + list(names)

    for col in id_cols:
        df[col] = df[col].map(lambda v: None if _is_blank(v) else str(v).strip())
    # Country is only printed on the first row of each block
    df[country_col] = forward_fill(df[country_col].tolist())
    df = df.dropna(subset=[tenure_col])
    if df[country_col].isna().any():
        raise ValueError(f"{layout.sheet_name}: data rows before the first country label")

    long = df.melt(id_vars=id_cols, var_name="column", value_name="value")
    parts = long["column"].map(lambda c: split_column_name(c, len(dims)))
    long[dims] = pd.DataFrame(parts.tolist(), index=long.index, columns=dims)

    long["value"] = _to_numeric(long["value"]) * layout.value_scale
    long = long.dropna(subset=["value"])

    long["year"] = pd.to_numeric(long["year"], errors="raise").astype(int)
    long[tenure_col] = as_category(long[tenure_col], TENURE_ALIASES, TENURE_MODES, "tenure")
    if "income" in dims:
        long["income"] = as_category(long["income"], INCOME_ALIASES, INCOME_QUINTILES, "income quintile")

    other_dims = [d for d in dims if d != "year"]
    keys = [country_col] + other_dims + [tenure_col, "year"]
    if long.duplicated(subset=keys).any():
        raise ValueError(f"{layout.sheet_name}: duplicate observations for {keys}")

    out_cols = [country_col, tenure_col] + other_dims + ["year", "value"]
    return long[out_cols].sort_values(keys).reset_index(drop=True)


def to_wide(long: pd.DataFrame, tenure_col: str = "tenure_mode",
            index: Sequence[str] = ("country", "year")) -> pd.DataFrame:
    """One column per tenure mode (category order), one row per ``index`` combination."""
    wide = (
        long.assign(**{tenure_col: long[tenure_col].astype(str)})
            .pivot(index=list(index), columns=tenure_col, values="value")
    )
    order = [m for m in TENURE_MODES if m in wide.columns]
    wide = wide[order].reset_index()
    wide.columns.name = None
    return wide


# ---------------------------------------------------------------------
# 4. Share sanity check
# ---------------------------------------------------------------------
def check_share_totals(long: pd.DataFrame, tenure_col: str,
                       group_cols: Sequence[str] = ("country", "year"),
                       tolerance: float = 0.05) -> pd.DataFrame:
    """
    Return complete groups whose tenure shares do not sum to 1 +/- tolerance.

    A group is complete when it has a value for every tenure present in the
    table. Each offending group is logged as a warning; nothing is dropped.
    """
    n_tenures = long[tenure_col].nunique()
    totals = (
        long.groupby(list(group_cols), observed=True)["value"]
            .agg(total="sum", n_tenures="count")
            .reset_index()
    )
    complete = totals[totals["n_tenures"] == n_tenures]
    off = complete[(complete["total"] - 1.0).abs() > tolerance].reset_index(drop=True)
    for row in off.to_dict(orient="records"):
        log.warning("share_total_off", **{k: str(v) for k, v in row.items()})
    return off


# ---------------------------------------------------------------------
# 5. Sheet cleaners
# ---------------------------------------------------------------------
def clean_tenure_modes(file_path: Path, outdir: Path = PROC_DIR,
                       layout: SheetLayout = TENURE_MODES_LAYOUT) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Clean the tenure-by-country-and-year sheet.

    Returns
    -------
    long : DataFrame [country, tenure_mode, year, value]
        Shares as fractions, one row per observation.
    wide : DataFrame [country, year, <one column per tenure mode>]
    """
    header, body = read_sheet(file_path, layout)
    long = tidy_sheet(body, reconstruct_header(header), layout)
    wide = to_wide(long, tenure_col=layout.tenure_column)

    outdir.mkdir(parents=True, exist_ok=True)
    long.to_csv(outdir / "tenure_modes_long.csv", index=False)
    wide.to_csv(outdir / "tenure_modes_wide.csv", index=False)
    log.info("sheet_tidied", sheet=layout.sheet_name, rows=len(long),
             countries=long["country"].nunique())
    return long, wide


def clean_tenure_by_income(file_path: Path, outdir: Path = PROC_DIR,
                           layout: SheetLayout = TENURE_INCOME_LAYOUT) -> pd.DataFrame:
    """
    Clean the tenure-by-income-quintile sheet (two-row header: quintile over year).

    Returns
    -------
    long : DataFrame [country, tenure_type, income, year, value]
    """
    header, body = read_sheet(file_path, layout)
    long = tidy_sheet(body, reconstruct_header(header), layout)

    outdir.mkdir(parents=True, exist_ok=True)
    long.to_csv(outdir / "tenure_income_long.csv", index=False)
    log.info("sheet_tidied", sheet=layout.sheet_name, rows=len(long),
             countries=long["country"].nunique())
    return long
