"""
Ledger workbook generation for Excel.
"""

from datetime import date
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import CATEGORY_HEADERS, LEDGER_HEADERS, OUTPUT_DIR, SUMMARY_ROW_LABELS
from services.ledger import ExpenseCategory, FinancialSummary, LedgerRow

MONEY_FORMAT = "#,##0.00"


def format_date_display(d: date) -> str:
    """Format date as D/M/YYYY (platform-safe, no zero-padding)."""
    return f"{d.day}/{d.month}/{d.year}"


def write_header_row(ws, headers: list[str]):
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)


def write_ledger_sheet(ws, ledger: list[LedgerRow]):
    """
    Write the Gig Ledger sheet.

    Headers: Date, Gig, Status, Gross, Expenses, TDS, Net, Payments,
    Balance Due, Members, Per Member. A totals row follows the data using
    SUM formulas over the currency columns.
    """
    write_header_row(ws, LEDGER_HEADERS)

    for row_idx, row in enumerate(ledger, start=2):
        f = row.financials
        row_data = [
            format_date_display(date.fromisoformat(row.gig_date)),
            row.gig_title,
            row.gig_status.capitalize(),
            f.gross_amount,
            f.total_expenses,
            f.total_tds,
            f.net_amount,
            f.total_payments,
            f.balance_due,
            f.member_count,
            f.per_member_share,
        ]
        for col_idx, value in enumerate(row_data, start=1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if col_idx in (4, 5, 6, 7, 8, 9, 11):
                cell.number_format = MONEY_FORMAT

    # Totals row (currency columns D-I only)
    total_row = len(ledger) + 2
    ws.cell(row=total_row, column=1, value="Total").font = Font(bold=True)
    if ledger:
        for col_idx in range(4, 10):
            col = get_column_letter(col_idx)
            cell = ws.cell(row=total_row, column=col_idx, value=f"=SUM({col}2:{col}{total_row - 1})")
            cell.number_format = MONEY_FORMAT
            cell.font = Font(bold=True)


def write_categories_sheet(ws, categories: list[ExpenseCategory]):
    write_header_row(ws, CATEGORY_HEADERS)
    for row_idx, category in enumerate(categories, start=2):
        ws.cell(row=row_idx, column=1, value=category.category)
        ws.cell(row=row_idx, column=2, value=category.amount).number_format = MONEY_FORMAT
        ws.cell(row=row_idx, column=3, value=category.count)


def write_summary_sheet(ws, summary: FinancialSummary):
    values = [
        summary.total_income,
        summary.total_expenses,
        summary.total_tds,
        summary.net_earnings,
        summary.pending_payments,
        summary.member_count,
        summary.per_member_share,
    ]
    for row_idx, (label, value) in enumerate(zip(SUMMARY_ROW_LABELS, values), start=1):
        ws.cell(row=row_idx, column=1, value=label).font = Font(bold=True)
        cell = ws.cell(row=row_idx, column=2, value=value)
        if label != "Member count":
            cell.number_format = MONEY_FORMAT


def create_ledger_workbook(
    ledger: list[LedgerRow],
    categories: list[ExpenseCategory],
    summary: FinancialSummary,
) -> Workbook:
    """
    Build the ledger workbook.

    Sheet 1: "Gig Ledger" - one row per reconciled gig plus totals
    Sheet 2: "Expenses by Category" - largest category first
    Sheet 3: "Summary" - band-wide totals
    """
    wb = Workbook()

    ws_ledger = wb.active
    ws_ledger.title = "Gig Ledger"
    write_ledger_sheet(ws_ledger, ledger)

    ws_categories = wb.create_sheet(title="Expenses by Category")
    write_categories_sheet(ws_categories, categories)

    ws_summary = wb.create_sheet(title="Summary")
    write_summary_sheet(ws_summary, summary)

    return wb


def workbook_to_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def generate_output_filename(as_of: date, output_dir: Path | None = None) -> Path:
    """
    Pick the next free ledger filename.

    Format: ledger_YYYY_MM_DD_a.xlsx, then _b, _c ... for reruns on the same day.
    """
    output_dir = output_dir or OUTPUT_DIR / "ledger"
    output_dir.mkdir(parents=True, exist_ok=True)
    base_name = f"ledger_{as_of.strftime('%Y_%m_%d')}"

    suffix_char = ord("a")
    while True:
        output_path = output_dir / f"{base_name}_{chr(suffix_char)}.xlsx"
        if not output_path.exists():
            return output_path
        suffix_char += 1
        if suffix_char > ord("z"):
            raise RuntimeError("Too many output files exist")
