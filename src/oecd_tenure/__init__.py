"""
oecd_tenure
===========

Utilities for reshaping and analysing the OECD housing tenure workbook (HM1.3).

Modules:
- fetch: download of the source workbook.
- cleaning: header reconstruction and wide-to-long tidying of the sheets.
- correlation: per-country/per-income correlations between tenure modes.
- plotting: figure builders for the tidy tables and correlations.
"""
__all__ = ["cleaning", "correlation", "fetch", "plotting"]
