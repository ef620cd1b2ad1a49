"""Tests for the ledger workbook."""

from datetime import date
from decimal import Decimal
from io import BytesIO

from openpyxl import load_workbook

from services.finances import calculate_gig_financials
from services.ledger import ExpenseCategory, FinancialSummary, LedgerRow
from services.reports import (
    create_ledger_workbook,
    format_date_display,
    generate_output_filename,
    workbook_to_bytes,
)


def sample_ledger():
    financials = calculate_gig_financials(
        Decimal("100000"), Decimal("10"), [Decimal("15000")], [Decimal("50000")], 5
    )
    return [
        LedgerRow("g2", "Corporate Night", "2025-04-01", "confirmed", financials),
        LedgerRow("g1", "Club Night", "2025-01-05", "paid", financials),
    ]


def sample_summary():
    return FinancialSummary(
        total_income=Decimal("200000.00"),
        total_expenses=Decimal("30000.00"),
        total_tds=Decimal("20000.00"),
        net_earnings=Decimal("150000.00"),
        pending_payments=Decimal("100000.00"),
        member_count=7,
        per_member_share=Decimal("21428.57"),
    )


def test_workbook_has_three_sheets():
    wb = create_ledger_workbook(sample_ledger(), [], sample_summary())

    assert wb.sheetnames == ["Gig Ledger", "Expenses by Category", "Summary"]


def test_ledger_sheet_rows_and_totals():
    ws = create_ledger_workbook(sample_ledger(), [], sample_summary())["Gig Ledger"]

    assert ws["A1"].value == "Date"
    assert ws["A1"].font.bold
    assert ws["A2"].value == "1/4/2025"
    assert ws["B2"].value == "Corporate Night"
    assert ws["C2"].value == "Confirmed"
    assert ws["G2"].value == Decimal("75000.00")
    assert ws["J2"].value == 5
    assert ws["K2"].number_format == "#,##0.00"
    assert ws["A4"].value == "Total"
    assert ws["D4"].value == "=SUM(D2:D3)"
    assert ws["I4"].value == "=SUM(I2:I3)"


def test_empty_ledger_has_total_label_only():
    ws = create_ledger_workbook([], [], sample_summary())["Gig Ledger"]

    assert ws["A2"].value == "Total"
    assert ws["D2"].value is None


def test_categories_and_summary_sheets():
    categories = [ExpenseCategory("Travel", Decimal("6000.00"), 3)]
    wb = create_ledger_workbook(sample_ledger(), categories, sample_summary())

    ws_categories = wb["Expenses by Category"]
    assert [c.value for c in ws_categories[2]] == ["Travel", Decimal("6000.00"), 3]

    ws_summary = wb["Summary"]
    assert ws_summary["A1"].value == "Total income"
    assert ws_summary["B6"].value == 7
    assert ws_summary["B6"].number_format == "General"
    assert ws_summary["B7"].value == Decimal("21428.57")


def test_workbook_bytes_can_be_reopened():
    data = workbook_to_bytes(create_ledger_workbook(sample_ledger(), [], sample_summary()))

    reopened = load_workbook(BytesIO(data))
    assert reopened["Gig Ledger"]["B3"].value == "Club Night"


def test_format_date_display():
    assert format_date_display(date(2025, 3, 7)) == "7/3/2025"


def test_output_filename_picks_next_free_suffix(tmp_path):
    as_of = date(2025, 3, 31)

    first = generate_output_filename(as_of, tmp_path)
    first.touch()
    second = generate_output_filename(as_of, tmp_path)

    assert first.name == "ledger_2025_03_31_a.xlsx"
    assert second.name == "ledger_2025_03_31_b.xlsx"
