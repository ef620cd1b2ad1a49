"""Request and response models for the gigbook API."""

from .responses import ErrorCodes, ErrorResponse, HealthResponse, SyncResultResponse

__all__ = ["ErrorCodes", "ErrorResponse", "HealthResponse", "SyncResultResponse"]
