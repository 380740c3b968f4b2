from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd

from oecd_tenure.cleaning import to_wide
from oecd_tenure.config import INCOME_QUINTILES, PROC_DIR, TENURE_MODES
from oecd_tenure.logging import get_logger

log = get_logger(__name__)

MIN_PERIODS = 2


def tenure_correlations(long: pd.DataFrame, tenure_col: str = "tenure_type",
                        group_cols: Sequence[str] = ("country", "income")) -> pd.DataFrame:
    """
    Pearson correlation between tenure series over time, per group.

    Each tenure becomes one series indexed by year. Correlations use
    pairwise-complete years (``DataFrame.corr`` semantics): a pair is compared
    on the years where both series have a value, regardless of gaps in the
    other series. Pairs with fewer than two shared years, or with a constant
    series, are undefined and set to 0.

    Returns
    -------
    DataFrame [<group_cols>, tenure_x, tenure_y, correlation]
        One full square matrix per group in long form, so every ordered pair
        (including the diagonal) appears once.
    """
    group_cols = list(group_cols)
    wide = to_wide(long, tenure_col=tenure_col, index=group_cols + ["year"])
    modes = [c for c in wide.columns if c not in group_cols + ["year"]]

    frames = []
    for keys, grp in wide.groupby(group_cols, observed=True, sort=True):
        mat = grp.set_index("year")[modes].corr(method="pearson", min_periods=MIN_PERIODS).fillna(0.0)
        mat.index.name = "tenure_x"
        mat.columns.name = None
        rec = mat.reset_index().melt(id_vars="tenure_x", var_name="tenure_y", value_name="correlation")
        for col, key in zip(group_cols, keys):
            rec[col] = key
        frames.append(rec)

    if not frames:
        raise ValueError("No observations to correlate")

    out = pd.concat(frames, ignore_index=True)
    for col in ("tenure_x", "tenure_y"):
        out[col] = pd.Categorical(out[col], categories=TENURE_MODES, ordered=True)
    if "income" in group_cols:
        out["income"] = pd.Categorical(out["income"], categories=INCOME_QUINTILES, ordered=True)

    out = out[group_cols + ["tenure_x", "tenure_y", "correlation"]]
    return out.sort_values(group_cols + ["tenure_x", "tenure_y"]).reset_index(drop=True)


def export_correlations(corr: pd.DataFrame, outdir: Path = PROC_DIR) -> Path:
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / "tenure_income_correlations.csv"
    corr.to_csv(path, index=False)
    log.info("correlations_written", path=str(path), rows=len(corr),
             groups=len(corr[["country", "income"]].drop_duplicates()))
    return path


def correlation_matrix(corr: pd.DataFrame, country: str, income: str) -> pd.DataFrame:
    """Square tenure x tenure matrix for one (country, income) pair, category ordered."""
    sub = corr[(corr["country"] == country) & (corr["income"].astype(str) == str(income))]
    if sub.empty:
        return pd.DataFrame()
    mat = (
        sub.assign(tenure_x=sub["tenure_x"].astype(str), tenure_y=sub["tenure_y"].astype(str))
           .pivot(index="tenure_x", columns="tenure_y", values="correlation")
    )
    order = [m for m in TENURE_MODES if m in mat.index]
    mat = mat.loc[order, order]
    mat.index.name = None
    mat.columns.name = None
    return mat
