"""
Build figures from processed data.

Usage:
    python scripts/make_figures.py
"""

import pandas as pd

from oecd_tenure.config import FIG_DIR, NETWORK_DIR, PROC_DIR
from oecd_tenure.logging import configure_logging
from oecd_tenure.plotting import (
    figure_all_networks,
    figure_correlation_heatmap,
    figure_income_lines,
    figure_tenure_area,
)

def main():
    configure_logging()

    # Load processed inputs
    modes_long = pd.read_csv(PROC_DIR / "tenure_modes_long.csv")
    income_long = pd.read_csv(PROC_DIR / "tenure_income_long.csv")
    corr = pd.read_csv(PROC_DIR / "tenure_income_correlations.csv")

    figure_tenure_area(modes_long, FIG_DIR)

    for country in sorted(income_long["country"].unique()):
        figure_income_lines(income_long, country, FIG_DIR / "income")

    figure_correlation_heatmap(corr, FIG_DIR)
    figure_all_networks(corr, NETWORK_DIR)

    print("Figures saved in figures/")

if __name__ == "__main__":
    main()
