"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Import records
    ImportRecordNotFoundError,
    InvalidRecordIdError,
    FieldNotEditableError,
    InvalidProductNameError,
    InvalidSortColumnError,
    VocabularyLoadError,

    # Console
    EditInProgressError,
    NoActiveEditError,
    ApiUnavailableError,
    WriteTimeoutError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Import records
    "ImportRecordNotFoundError",
    "InvalidRecordIdError",
    "FieldNotEditableError",
    "InvalidProductNameError",
    "InvalidSortColumnError",
    "VocabularyLoadError",

    # Console
    "EditInProgressError",
    "NoActiveEditError",
    "ApiUnavailableError",
    "WriteTimeoutError",
]
