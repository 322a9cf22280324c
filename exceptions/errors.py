"""
Custom exception classes for the application.

Every error carries a machine-readable code and the HTTP status it maps to,
so the same classes work in the API routes and in the editing console.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "IMPORT_RECORD_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with the current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# IMPORT RECORD ERRORS
# ===================

class ImportRecordNotFoundError(NotFoundError):
    """No import record has the given system_id."""

    def __init__(self, system_id: str):
        super().__init__(
            resource="Import record",
            identifier=str(system_id),
            code="IMPORT_RECORD_NOT_FOUND"
        )


class InvalidRecordIdError(ValidationError):
    """Record id is not an integer system_id."""

    def __init__(self, record_id: str):
        super().__init__(
            code="INVALID_RECORD_ID",
            message="Record id must be an integer system_id",
            details={"provided": record_id}
        )


class FieldNotEditableError(ValidationError):
    """Only unique_product_name may be written."""

    def __init__(self, field: str, editable: str = "unique_product_name"):
        super().__init__(
            code="FIELD_NOT_EDITABLE",
            message=f"Field '{field}' is not updatable. Only '{editable}' can be updated.",
            details={"provided": field, "valid": [editable]}
        )


class InvalidProductNameError(ValidationError):
    """Product name is not in the controlled vocabulary."""

    def __init__(self, value: str, suggestions: Optional[list[str]] = None):
        super().__init__(
            code="INVALID_PRODUCT_NAME",
            message=f"'{value}' is not a known product name",
            details={"provided": value, "suggestions": suggestions or []}
        )


class InvalidSortColumnError(ValidationError):
    """Sort column is not one of the known columns."""

    def __init__(self, column: str, valid: list[str]):
        super().__init__(
            code="INVALID_SORT_COLUMN",
            message=f"Cannot sort by '{column}'",
            details={"provided": column, "valid": valid}
        )


class VocabularyLoadError(AppError):
    """Vocabulary file could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code="VOCABULARY_LOAD_FAILED",
            message=f"Could not load product vocabulary: {reason}",
            status_code=500,
            details={"path": path}
        )


# ===================
# CONSOLE ERRORS
# ===================

class EditInProgressError(ConflictError):
    """Another edit is still being saved."""

    def __init__(self, target_id: str):
        super().__init__(
            code="EDIT_IN_PROGRESS",
            message="Another edit is still being saved",
            details={"saving_id": str(target_id)}
        )


class NoActiveEditError(ConflictError):
    """Operation needs an edit session but none is open."""

    def __init__(self, state: str):
        super().__init__(
            code="NO_ACTIVE_EDIT",
            message="No cell is being edited",
            details={"state": state}
        )


class ApiUnavailableError(ExternalServiceError):
    """Transport failure talking to the import API."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="import_api",
            message=message,
            details=details,
            code="API_UNAVAILABLE"
        )


class WriteTimeoutError(ExternalServiceError):
    """Write did not complete within the timeout."""

    def __init__(self, target_id: str, timeout_seconds: float):
        super().__init__(
            service="import_api",
            message=f"Saving timed out after {timeout_seconds:g}s, please retry",
            details={"id": str(target_id), "timeout_seconds": timeout_seconds},
            code="WRITE_TIMEOUT"
        )
