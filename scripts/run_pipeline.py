"""
Download the OECD tenure workbook and build the tidy tables and correlations
in data/processed.

Usage:
    python scripts/run_pipeline.py
"""

from oecd_tenure.cleaning import check_share_totals, clean_tenure_by_income, clean_tenure_modes
from oecd_tenure.config import PROC_DIR, RAW_WORKBOOK
from oecd_tenure.correlation import export_correlations, tenure_correlations
from oecd_tenure.fetch import download_workbook
from oecd_tenure.logging import configure_logging


def main():
    configure_logging()

    print("Downloading workbook...")
    download_workbook(dest=RAW_WORKBOOK)

    print("Cleaning tenure modes...")
    modes_long, _ = clean_tenure_modes(RAW_WORKBOOK, PROC_DIR)
    check_share_totals(modes_long, "tenure_mode", ("country", "year"))

    print("Cleaning tenure by income...")
    income_long = clean_tenure_by_income(RAW_WORKBOOK, PROC_DIR)
    check_share_totals(income_long, "tenure_type", ("country", "income", "year"))

    print("Computing tenure correlations...")
    export_correlations(tenure_correlations(income_long), PROC_DIR)

    print("Done. Clean files written to data/processed/.")

if __name__ == "__main__":
    main()
