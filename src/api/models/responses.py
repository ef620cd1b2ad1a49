"""Pydantic request and response models for API endpoints."""

from decimal import Decimal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    database_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CALENDAR_NOT_CONNECTED = "CALENDAR_NOT_CONNECTED"
    SYNC_ERROR = "SYNC_ERROR"
    PARTIAL_BATCH_FAILURE = "PARTIAL_BATCH_FAILURE"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# REQUESTS
# =============================================================================


class GigCreate(BaseModel):
    title: str
    venue: str
    city: str
    date: str
    address: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    organizer_name: str | None = None
    organizer_phone: str | None = None
    organizer_email: str | None = None
    status: str | None = None
    quoted_amount: Decimal | None = None
    confirmed_amount: Decimal | None = None
    tds_percentage: Decimal | None = None
    notes: str | None = None


class GigUpdate(BaseModel):
    title: str | None = None
    venue: str | None = None
    city: str | None = None
    date: str | None = None
    address: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    organizer_name: str | None = None
    organizer_phone: str | None = None
    organizer_email: str | None = None
    status: str | None = None
    quoted_amount: Decimal | None = None
    confirmed_amount: Decimal | None = None
    tds_percentage: Decimal | None = None
    notes: str | None = None


class ExpenseCreate(BaseModel):
    description: str
    amount: Decimal
    category: str
    date: str | None = None
    paid_by: str | None = None


class PaymentCreate(BaseModel):
    amount: Decimal
    payment_date: str | None = None
    payment_mode: str | None = None
    reference_number: str | None = None
    tds_deducted: Decimal | None = None
    notes: str | None = None


class AvailabilityUpdate(BaseModel):
    status: str
    notes: str | None = None
    user_id: str | None = None


class PayoutStatusUpdate(BaseModel):
    status: str
    paid_date: str | None = None


class CalendarCallback(BaseModel):
    code: str
    state: str


# =============================================================================
# RESPONSES
# =============================================================================


class CreatedResponse(BaseModel):
    id: str


class GigResponse(BaseModel):
    id: str
    title: str
    venue: str
    city: str
    address: str | None = None
    date: str
    start_time: str | None = None
    end_time: str | None = None
    organizer_name: str | None = None
    organizer_phone: str | None = None
    organizer_email: str | None = None
    status: str
    quoted_amount: Decimal | None = None
    confirmed_amount: Decimal | None = None
    tds_percentage: Decimal | None = None
    notes: str | None = None
    google_calendar_event_id: str | None = None
    updated_at: str


class AvailabilityResponse(BaseModel):
    gig_id: str
    user_id: str
    status: str
    notes: str | None = None
    updated_at: str


class FinancialsResponse(BaseModel):
    gross_amount: Decimal
    total_expenses: Decimal
    total_tds: Decimal
    net_amount: Decimal
    total_payments: Decimal
    balance_due: Decimal
    per_member_share: Decimal
    member_count: int


class PayoutResponse(BaseModel):
    id: str
    gig_id: str
    user_id: str
    amount: Decimal
    status: str
    paid_date: str | None = None
    notes: str | None = None


class PayoutListResponse(BaseModel):
    payouts: list[PayoutResponse]
    # Rows for members no longer in the target set; kept, never deleted
    orphaned: list[PayoutResponse] = []


class PayoutGenerationResponse(PayoutListResponse):
    gig_id: str
    financials: FinancialsResponse


class FinancialSummaryResponse(BaseModel):
    total_income: Decimal
    total_expenses: Decimal
    total_tds: Decimal
    net_earnings: Decimal
    pending_payments: Decimal
    member_count: int
    per_member_share: Decimal


class ExpenseCategoryResponse(BaseModel):
    category: str
    amount: Decimal
    count: int


class LedgerRowResponse(BaseModel):
    gig_id: str
    gig_title: str
    gig_date: str
    gig_status: str
    financials: FinancialsResponse


class TransactionResponse(BaseModel):
    type: str  # "income" or "expense"
    id: str
    gig_id: str | None = None
    gig_title: str | None = None
    amount: Decimal
    date: str
    description: str | None = None


class ConnectionStatusResponse(BaseModel):
    connected: bool
    calendar_id: str | None = None
    token_expires_at: str | None = None
    watching: bool = False
    has_sync_token: bool = False
    connected_by: str | None = None
    updated_at: str | None = None


class AuthorizationUrlResponse(BaseModel):
    authorization_url: str


class WatchResponse(BaseModel):
    channel_id: str
    resource_id: str | None = None
    expiration: str | None = None


class OutboundSyncResponse(BaseModel):
    gig_id: str
    event_id: str
    created: bool


class EventFailureResponse(BaseModel):
    event_id: str | None = None
    message: str


class SyncResultResponse(BaseModel):
    created: int
    updated: int
    cancelled: int
    skipped: int
    cursor_reset: bool = False
    failures: list[EventFailureResponse] = []
    # PARTIAL_BATCH_FAILURE when any event failed; the batch still succeeds
    code: str | None = None


class WebhookAck(BaseModel):
    received: bool = True
