"""
Business logic services.

Each service handles one domain area.
"""

from services.suggestion_service import (
    SuggestionIndex,
    SuggestionRanker,
    get_suggestion_service,
    reset_suggestion_service,
)
from services.import_record_service import ImportRecordService, get_import_record_service

__all__ = [
    "SuggestionIndex",
    "SuggestionRanker",
    "get_suggestion_service",
    "reset_suggestion_service",
    "ImportRecordService",
    "get_import_record_service",
]
