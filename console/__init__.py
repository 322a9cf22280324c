"""
Editing console components.

The grid side of the editor: a page cache, the optimistic edit reconciler
and the HTTP client that talks to the API.
"""

from console.page_cache import PageCache, CacheEvent, CacheEventType
from console.reconciler import (
    EditReconciler,
    EditState,
    EditSession,
    EditOutcome,
    OutcomeStatus,
    PendingEdit,
)
from console.api_client import ImportApiClient
from console.data_source import ImportDataSource

__all__ = [
    "PageCache",
    "CacheEvent",
    "CacheEventType",
    "EditReconciler",
    "EditState",
    "EditSession",
    "EditOutcome",
    "OutcomeStatus",
    "PendingEdit",
    "ImportApiClient",
    "ImportDataSource",
]
