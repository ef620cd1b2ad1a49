"""Band-wide financial views and the ledger workbook download."""

import sqlite3
from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from api.dependencies import get_db, verify_api_key
from api.models.responses import (
    ExpenseCategoryResponse,
    FinancialSummaryResponse,
    LedgerRowResponse,
    TransactionResponse,
)
from services.ledger import (
    get_expenses_by_category,
    get_financial_summary,
    get_gig_ledger,
    get_recent_transactions,
)
from services.reports import create_ledger_workbook, workbook_to_bytes

router = APIRouter(prefix="/v1/finances", dependencies=[Depends(verify_api_key)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/summary", response_model=FinancialSummaryResponse)
def financial_summary(conn: sqlite3.Connection = Depends(get_db)):
    return get_financial_summary(conn)


@router.get("/expenses-by-category", response_model=list[ExpenseCategoryResponse])
def expenses_by_category(conn: sqlite3.Connection = Depends(get_db)):
    return get_expenses_by_category(conn)


@router.get("/ledger", response_model=list[LedgerRowResponse])
def gig_ledger(conn: sqlite3.Connection = Depends(get_db)):
    return get_gig_ledger(conn)


@router.get("/transactions", response_model=list[TransactionResponse])
def recent_transactions(
    limit: int = Query(10, ge=1, le=100),
    conn: sqlite3.Connection = Depends(get_db),
):
    return get_recent_transactions(conn, limit)


@router.get("/ledger/export")
def export_ledger(conn: sqlite3.Connection = Depends(get_db)):
    """Ledger, categories and summary as an Excel workbook."""
    wb = create_ledger_workbook(
        get_gig_ledger(conn),
        get_expenses_by_category(conn),
        get_financial_summary(conn),
    )
    filename = f"ledger_{date.today().strftime('%Y_%m_%d')}.xlsx"
    return Response(
        content=workbook_to_bytes(wb),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
