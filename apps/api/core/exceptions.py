"""
Custom exception classes and error handling.

Every domain error carries an error code so the API can render the
{"success": false, "error": {"code", "message"}} envelope consistently.
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """Base API exception with consistent structure."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} with id {identifier} not found",
            error_code="NOT_FOUND"
        )


class ValidationError(APIException):
    """Business rule or input validation failure."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )


class ConflictError(APIException):
    """Resource conflict (e.g., an active mesocycle already exists)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


class TrainingBlockWriteError(APIException):
    """A batch commit failed while writing a training block."""

    def __init__(self, detail: str, committed_batches: int = 0):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="TRAINING_BLOCK_WRITE_FAILED"
        )
        self.committed_batches = committed_batches
