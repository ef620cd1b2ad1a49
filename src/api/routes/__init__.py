"""API route modules."""

from .calendar import router as calendar_router
from .finances import router as finances_router
from .gigs import router as gigs_router
from .health import router as health_router
from .payouts import router as payouts_router
from .webhooks import router as webhooks_router

__all__ = [
    "calendar_router",
    "finances_router",
    "gigs_router",
    "health_router",
    "payouts_router",
    "webhooks_router",
]
