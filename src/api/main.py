"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.errors import error_detail, http_status_for
from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import (
    calendar_router,
    finances_router,
    gigs_router,
    health_router,
    payouts_router,
    webhooks_router,
)
from core.config import API_DEBUG, API_VERSION, DB_PATH
from core.database import create_schema, get_connection
from core.errors import GigbookError
from core.google_client import get_calendar_client
from core.log import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    setup_logging()
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection()
    try:
        create_schema(conn)
    finally:
        conn.close()

    yield

    await get_calendar_client().aclose()


app = FastAPI(
    title="Gigbook API",
    description="Gig finances, member payouts and Google Calendar sync for a band",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(GigbookError)
async def gigbook_exception_handler(request: Request, exc: GigbookError):
    """Domain errors use the same body shape as HTTPException details."""
    return JSONResponse(
        status_code=http_status_for(exc),
        content={"detail": error_detail(exc)},
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump()},
    )


app.include_router(health_router)
app.include_router(gigs_router)
app.include_router(payouts_router)
app.include_router(finances_router)
app.include_router(calendar_router)
app.include_router(webhooks_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
