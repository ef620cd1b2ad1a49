"""Mapping of domain errors to HTTP responses."""

from fastapi import status

from core.errors import (
    AuthError,
    GigbookError,
    NotConnectedError,
    NotFoundError,
    StorageError,
    SyncError,
    ValidationError,
)

# Most specific first: NotConnectedError is also a SyncError
ERROR_STATUS_CODES = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthError, status.HTTP_403_FORBIDDEN),
    (NotConnectedError, status.HTTP_409_CONFLICT),
    (SyncError, status.HTTP_502_BAD_GATEWAY),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def http_status_for(error: GigbookError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_detail(error: GigbookError) -> dict:
    return {"error": error.message, "code": error.code, "details": list(error.details)}
