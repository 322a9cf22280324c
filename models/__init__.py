"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    QuerySchema,
)
from models.import_record import (
    EDITABLE_FIELD,
    LIST_COLUMNS,
    SEARCH_COLUMNS,
    SORTABLE_COLUMNS,
    SortOrder,
    ImportRecord,
    ImportRecordListItem,
    ImportFilters,
    PageQuery,
    PageResult,
    RecordUpdate,
    BatchUpdateItem,
    BatchUpdateRequest,
    TableStats,
)
from models.suggestion import (
    VocabularyEntry,
    SuggestionResult,
    SuggestionListResponse,
    SuggestionValidationResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "QuerySchema",

    # Import records
    "EDITABLE_FIELD",
    "LIST_COLUMNS",
    "SEARCH_COLUMNS",
    "SORTABLE_COLUMNS",
    "SortOrder",
    "ImportRecord",
    "ImportRecordListItem",
    "ImportFilters",
    "PageQuery",
    "PageResult",
    "RecordUpdate",
    "BatchUpdateItem",
    "BatchUpdateRequest",
    "TableStats",

    # Suggestions
    "VocabularyEntry",
    "SuggestionResult",
    "SuggestionListResponse",
    "SuggestionValidationResponse",
]
