#!/usr/bin/env python3
"""
Create the band ledger workbook from the gigbook database.

Generates Excel report with three sheets:
- Gig Ledger: one reconciled row per confirmed/completed/paid gig, with totals
- Expenses by Category: totals and counts, largest first
- Summary: band-wide income, expenses, TDS, net and pending payments

Usage:
    uv run python src/scripts/create_ledger_report.py
    uv run python src/scripts/create_ledger_report.py --as-of 2025-03-31
"""

import argparse
import sys
import traceback
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import get_connection
from core.log import setup_logging
from services.ledger import get_expenses_by_category, get_financial_summary, get_gig_ledger
from services.reports import create_ledger_workbook, generate_output_filename


def main(as_of: date | None = None) -> Path:
    """Main entry point for the ledger report."""
    as_of = as_of or date.today()
    try:
        # 1. Read the rollups
        conn = get_connection(DB_PATH)
        try:
            ledger = get_gig_ledger(conn)
            categories = get_expenses_by_category(conn)
            summary = get_financial_summary(conn)
        finally:
            conn.close()
        print(f"Ledger rows: {len(ledger)}")
        print(f"Expense categories: {len(categories)}")
        print(f"Net earnings: {summary.net_earnings}")

        # 2. Write the workbook
        output_path = generate_output_filename(as_of)
        wb = create_ledger_workbook(ledger, categories, summary)
        wb.save(output_path)
        print(f"\nSaved: {output_path}")
        return output_path

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    setup_logging()
    parser = argparse.ArgumentParser(description="Generate the band ledger workbook")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        help="Date used in the output filename (YYYY-MM-DD). Defaults to today.",
    )
    args = parser.parse_args()

    main(args.as_of)
