"""
Configuration constants and environment setup.
"""

import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(os.environ.get("GIGBOOK_DB_PATH", PROJECT_ROOT / "data" / "db" / "gigbook.db"))
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# GIG & FINANCE DEFAULTS
# =============================================================================

GIG_STATUSES = ("lead", "quoted", "confirmed", "completed", "paid", "cancelled")
INCOME_STATUSES = ("confirmed", "completed", "paid")
AVAILABILITY_STATUSES = ("yes", "no", "maybe", "pending")
PAYOUT_STATUSES = ("pending", "paid")

DEFAULT_TDS_PERCENTAGE = Decimal("10")
FALLBACK_MEMBER_COUNT = int(os.environ.get("FALLBACK_MEMBER_COUNT", "7"))

# =============================================================================
# ROLES
# =============================================================================

MEMBER_ROLES = ("app_admin", "admin", "musician", "external_viewer")
ADMIN_ROLE = "app_admin"

# =============================================================================
# CALENDAR CONFIGURATION
# =============================================================================

CALENDAR_TIME_ZONE = os.environ.get("CALENDAR_TIME_ZONE", "Asia/Kolkata")
DEFAULT_START_TIME = "09:00:00"
DEFAULT_END_TIME = "23:00:00"
PLACEHOLDER_CITY = "TBD"
CURRENCY_SYMBOL = "₹"

# Inbound updates must be newer than the gig by more than this
SYNC_LOOP_BUFFER_SECONDS = 5

# Explicit pull window (relative to now)
PULL_DAYS_BACK = 30
PULL_DAYS_FORWARD = 90

# Webhook scan window when no sync cursor is stored
WEBHOOK_DAYS_BACK = 30

# Google event colorId by gig status
STATUS_COLOR_IDS = {"confirmed": "10", "lead": "5"}
DEFAULT_COLOR_ID = "8"

# =============================================================================
# GOOGLE CREDENTIALS (from environment)
# =============================================================================

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.environ.get("GOOGLE_CLIENT_SECRET", "")
GOOGLE_REDIRECT_URI = os.environ.get(
    "GOOGLE_REDIRECT_URI", f"{FRONTEND_URL}/admin?google_callback=true"
)
GOOGLE_WEBHOOK_URL = os.environ.get("GOOGLE_WEBHOOK_URL", "")
GOOGLE_CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.readonly",
]
HTTP_TIMEOUT_SECONDS = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "15"))

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

LEDGER_HEADERS = [
    "Date", "Gig", "Status", "Gross", "Expenses", "TDS",
    "Net", "Payments", "Balance Due", "Members", "Per Member",
]
CATEGORY_HEADERS = ["Category", "Amount", "Count"]
SUMMARY_ROW_LABELS = [
    "Total income",
    "Total expenses",
    "Total TDS",
    "Net earnings",
    "Pending payments",
    "Member count",
    "Per member share",
]

# =============================================================================
# API CONFIGURATION
# =============================================================================

GIGBOOK_API_KEY = os.environ.get("GIGBOOK_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
