"""
Error taxonomy shared by services and the API layer.
"""


class GigbookError(Exception):
    """Base class for all domain errors."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class ValidationError(GigbookError):
    code = "VALIDATION_ERROR"


class NotFoundError(GigbookError):
    code = "NOT_FOUND"


class AuthError(GigbookError):
    code = "UNAUTHORIZED"


class StorageError(GigbookError):
    code = "STORAGE_ERROR"


class SyncError(GigbookError):
    """Calendar provider rejected or failed a request."""

    code = "SYNC_ERROR"

    def __init__(self, message: str, status_code: int | None = None, details: list[str] | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class SyncTokenExpiredError(SyncError):
    """Provider invalidated the incremental sync cursor (HTTP 410)."""

    code = "SYNC_TOKEN_EXPIRED"


class NotConnectedError(SyncError):
    code = "CALENDAR_NOT_CONNECTED"
