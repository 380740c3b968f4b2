from __future__ import annotations

import math
import re
from pathlib import Path
from typing import List, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.cm import ScalarMappable
from matplotlib.colors import Normalize
from matplotlib.patches import Patch
from matplotlib.ticker import PercentFormatter

from oecd_tenure.cleaning import to_wide
from oecd_tenure.config import INCOME_QUINTILES, TENURE_MODES
from oecd_tenure.correlation import correlation_matrix
from oecd_tenure.logging import get_logger

log = get_logger(__name__)


# --- style ---
COL_GRID = "#E5E7EB"
COL_FRAME = "#D1D5DB"
COL_TEXT = "#374151"
COL_SOURCE = "#000000"
COL_POS = "#1E3A8A"
COL_NEG = "#F97316"
BG_COLOR = "#FFFFFF"
CORR_CMAP = "RdBu_r"
DPI = 300

TENURE_COLORS = {
    "Rent (subsidized)": "#F97316",
    "Rent (private)": "#FDBA74",
    "Owner with mortgage": "#1E3A8A",
    "Own outright": "#60A5FA",
    "Other, unknown": "#9CA3AF",
}

TENURE_SHORT = {
    "Rent (subsidized)": "Rent sub.",
    "Rent (private)": "Rent priv.",
    "Owner with mortgage": "Mortgage",
    "Own outright": "Outright",
    "Other, unknown": "Other",
}

SOURCE_NOTE = "Source: OECD Affordable Housing Database, indicator HM1.3 (housing tenures)."


def slugify(label: str) -> str:
    """Path-safe lower-case version of a country or income label."""
    return re.sub(r"[^\w]+", "_", str(label)).strip("_").lower()


def _apply_axis_style(ax):
    ax.grid(which="major", axis="y", color=COL_GRID, linestyle="--", linewidth=0.5, alpha=0.8)
    ax.set_axisbelow(True)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["left"].set_color(COL_FRAME)
    ax.spines["bottom"].set_color(COL_FRAME)
    ax.tick_params(axis="both", which="both", length=3, color=COL_FRAME, labelsize=8, labelcolor=COL_TEXT, direction="out")


def _draw_title_subtitle(fig, title, subtitle, y=0.97):
    fig.text(0.02, y, title, ha="left", va="bottom", fontsize=14, fontweight="bold", color=COL_TEXT)
    fig.text(0.02, y - 0.025, subtitle, ha="left", va="bottom", fontsize=10.5, color=COL_TEXT)


def _tenure_legend(fig, modes, y=0.93):
    handles = [Patch(facecolor=TENURE_COLORS[m], edgecolor=COL_FRAME, label=m) for m in modes]
    leg = fig.legend(handles=handles, loc="upper left", bbox_to_anchor=(0.02, y), frameon=True,
                     ncol=len(modes), fontsize=9, handlelength=1.8, columnspacing=1.2)
    leg.get_frame().set_facecolor(BG_COLOR)
    leg.get_frame().set_edgecolor(COL_FRAME)
    leg.get_frame().set_linewidth(0.8)


def _add_source(fig, text=SOURCE_NOTE):
    fig.text(0.02, 0.01, text, ha="left", va="bottom", fontsize=8, color=COL_SOURCE)


def _present(values, order) -> List[str]:
    seen = set(values.astype(str))
    return [v for v in order if v in seen]


def _save(fig, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=DPI, bbox_inches="tight", facecolor=BG_COLOR)
    return path


def figure_tenure_area(long: pd.DataFrame, outdir: Path, ncols: int = 4) -> Path:
    """Stacked tenure shares over time, one panel per country."""
    wide = to_wide(long, tenure_col="tenure_mode")
    modes = [m for m in TENURE_MODES if m in wide.columns]
    countries = sorted(wide["country"].unique())
    nrows = math.ceil(len(countries) / ncols)

    fig, axes = plt.subplots(nrows, ncols, figsize=(3.6 * ncols, 2.6 * nrows + 1.6), sharex=True, sharey=True,
                             squeeze=False, facecolor=BG_COLOR)
    for ax, country in zip(axes.flat, countries):
        sub = wide[wide["country"] == country].sort_values("year")
        ax.stackplot(sub["year"], [sub[m].fillna(0.0) for m in modes],
                     colors=[TENURE_COLORS[m] for m in modes], linewidth=0)
        ax.set_title(country, fontsize=9, color=COL_TEXT, loc="left")
        ax.set_ylim(0, 1)
        ax.yaxis.set_major_formatter(PercentFormatter(1.0))
        _apply_axis_style(ax)
    for ax in axes.flat[len(countries):]:
        ax.set_visible(False)

    _draw_title_subtitle(fig, "Housing tenure over time", "Share of households by tenure mode")
    _tenure_legend(fig, modes)
    _add_source(fig)
    fig.tight_layout(rect=[0.0, 0.03, 1.0, 0.90])
    path = _save(fig, outdir / "tenure_modes_area.png")
    plt.close(fig)
    return path


def figure_income_lines(long: pd.DataFrame, country: str, outdir: Path) -> Path:
    """Point+line of each tenure type over time, one panel per income quintile."""
    sub = long[long["country"] == country]
    incomes = _present(sub["income"], INCOME_QUINTILES)
    modes = _present(sub["tenure_type"], TENURE_MODES)
    if not incomes:
        raise ValueError(f"No income data for {country!r}")

    fig, axes = plt.subplots(1, len(incomes), figsize=(3.2 * len(incomes), 4.2), sharey=True,
                             squeeze=False, facecolor=BG_COLOR)
    for ax, income in zip(axes.flat, incomes):
        grp = sub[sub["income"].astype(str) == income]
        for mode in modes:
            s = grp[grp["tenure_type"].astype(str) == mode].sort_values("year")
            ax.plot(s["year"], s["value"], color=TENURE_COLORS[mode], marker="o", markersize=3, linewidth=1.5)
        ax.set_title(income, fontsize=9, color=COL_TEXT, loc="left")
        ax.yaxis.set_major_formatter(PercentFormatter(1.0))
        _apply_axis_style(ax)

    _draw_title_subtitle(fig, f"{country}: tenure by income quintile", "Share of households, by year", y=0.95)
    _tenure_legend(fig, modes, y=0.90)
    _add_source(fig)
    fig.tight_layout(rect=[0.0, 0.04, 1.0, 0.80])
    path = _save(fig, outdir / f"tenure_by_income_{slugify(country)}.png")
    plt.close(fig)
    return path


def figure_correlation_heatmap(corr: pd.DataFrame, outdir: Path) -> Tuple[Path, Path]:
    """
    Grid of tenure correlation heatmaps, countries down, income quintiles across.

    The figure grows with the number of countries; written as PNG and PDF.
    """
    countries = sorted(corr["country"].unique())
    incomes = _present(corr["income"], INCOME_QUINTILES)

    fig, axes = plt.subplots(len(countries), len(incomes),
                             figsize=(2.2 * len(incomes) + 2.5, 2.0 * len(countries) + 1.5),
                             squeeze=False, facecolor=BG_COLOR)
    for i, country in enumerate(countries):
        for j, income in enumerate(incomes):
            ax = axes[i, j]
            mat = correlation_matrix(corr, country, income)
            if mat.empty:
                ax.set_visible(False)
                continue
            mat = mat.rename(index=TENURE_SHORT, columns=TENURE_SHORT)
            sns.heatmap(mat, ax=ax, vmin=-1, vmax=1, center=0, cmap=CORR_CMAP, cbar=False, square=True,
                        linewidths=0.5, linecolor=BG_COLOR,
                        xticklabels=i == len(countries) - 1, yticklabels=j == 0)
            ax.tick_params(labelsize=7, length=0)
            ax.set_xlabel("")
            ax.set_ylabel(country if j == 0 else "", fontsize=9, color=COL_TEXT)
            if i == 0:
                ax.set_title(income, fontsize=9, color=COL_TEXT)

    fig.subplots_adjust(left=0.15, right=0.88, bottom=0.08, top=0.93, wspace=0.1, hspace=0.15)
    cax = fig.add_axes([0.91, 0.35, 0.015, 0.3])
    fig.colorbar(ScalarMappable(norm=Normalize(-1, 1), cmap=CORR_CMAP), cax=cax, label="Pearson r")
    fig.suptitle("Correlation between tenure modes over time", fontsize=14, fontweight="bold", color=COL_TEXT)

    outdir.mkdir(parents=True, exist_ok=True)
    p_png = outdir / "tenure_income_correlation_heatmap.png"
    p_pdf = outdir / "tenure_income_correlation_heatmap.pdf"
    fig.savefig(p_png, dpi=DPI, bbox_inches="tight", facecolor=BG_COLOR)
    fig.savefig(p_pdf, dpi=DPI, bbox_inches="tight", facecolor=BG_COLOR)
    plt.close(fig)
    return p_png, p_pdf


def figure_correlation_network(corr: pd.DataFrame, country: str, income: str, outdir: Path,
                               threshold: float = 0.3) -> Path:
    """
    Tenure types as nodes on a circle, linked where |r| >= threshold.

    Edge colour gives the sign, edge width the strength. Written to
    ``outdir/<country>/<income>.png``.
    """
    mat = correlation_matrix(corr, country, income)
    if mat.empty:
        raise ValueError(f"No correlations for {country!r} / {income!r}")
    nodes = list(mat.index)
    angles = np.linspace(0.5 * np.pi, 2.5 * np.pi, len(nodes), endpoint=False)
    pos = {n: (np.cos(a), np.sin(a)) for n, a in zip(nodes, angles)}

    fig, ax = plt.subplots(figsize=(6, 6), facecolor=BG_COLOR)
    for i, a in enumerate(nodes):
        for b in nodes[i + 1:]:
            r = mat.loc[a, b]
            if abs(r) < threshold:
                continue
            (x1, y1), (x2, y2) = pos[a], pos[b]
            ax.plot([x1, x2], [y1, y2], color=COL_POS if r > 0 else COL_NEG,
                    linewidth=1.0 + 5.0 * abs(r), alpha=0.35 + 0.6 * abs(r), zorder=1)
            ax.text((x1 + x2) / 2, (y1 + y2) / 2, f"{r:.2f}", ha="center", va="center", fontsize=8,
                    color=COL_TEXT, bbox=dict(facecolor=BG_COLOR, edgecolor="none", alpha=0.8, pad=1))

    xs, ys = zip(*(pos[n] for n in nodes))
    ax.scatter(xs, ys, s=900, c=[TENURE_COLORS[n] for n in nodes], edgecolors=COL_FRAME, zorder=2)
    for n in nodes:
        x, y = pos[n]
        ax.text(1.3 * x, 1.3 * y, n, ha="center", va="center", fontsize=9, color=COL_TEXT)

    ax.set_xlim(-1.7, 1.7)
    ax.set_ylim(-1.7, 1.7)
    ax.set_aspect("equal")
    ax.axis("off")
    ax.set_title(f"{country} | {income}", fontsize=12, fontweight="bold", color=COL_TEXT)

    path = _save(fig, outdir / slugify(country) / f"{slugify(income)}.png")
    plt.close(fig)
    return path


def figure_all_networks(corr: pd.DataFrame, outdir: Path, threshold: float = 0.3) -> List[Path]:
    pairs = corr[["country", "income"]].drop_duplicates()
    pairs = pairs.assign(income=pairs["income"].astype(str))
    paths = [
        figure_correlation_network(corr, country, income, outdir, threshold=threshold)
        for country, income in pairs.itertuples(index=False)
    ]
    log.info("networks_written", outdir=str(outdir), figures=len(paths))
    return paths
