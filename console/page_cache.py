"""
Client-side cache of fetched pages.

Pages are keyed by the PageQuery that produced them. Subscribers are told
about every change so a view can re-render or refetch.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import structlog

from models.import_record import PageQuery, PageResult

logger = structlog.get_logger(__name__)


class CacheEventType(str, Enum):
    """What changed in the cache."""
    STORED = "stored"
    OPTIMISTIC_UPDATE = "optimistic_update"
    ROLLED_BACK = "rolled_back"
    INVALIDATED = "invalidated"


@dataclass
class CacheEvent:
    """Notification sent to cache subscribers."""
    type: CacheEventType
    keys: tuple[PageQuery, ...] = ()
    target_id: Optional[int] = None
    rows_changed: int = 0


CacheSnapshot = dict[PageQuery, PageResult]
CacheListener = Callable[[CacheEvent], None]


class PageCache:
    """
    Pages of import records, keyed by query.

    Only the EditReconciler writes here (page loads, optimistic updates,
    rollbacks, invalidation); views read and subscribe.
    """

    def __init__(self):
        self._pages: dict[PageQuery, PageResult] = {}
        self._stale: set[PageQuery] = set()
        self._listeners: list[CacheListener] = []

    # ===================
    # READS
    # ===================

    def get(self, query: PageQuery) -> Optional[PageResult]:
        return self._pages.get(query)

    def keys(self) -> list[PageQuery]:
        return list(self._pages)

    def is_stale(self, query: PageQuery) -> bool:
        return query in self._stale

    def rows_for(self, system_id: int) -> list:
        """Every cached row of one entity, across all pages."""
        return [
            row
            for page in self._pages.values()
            for row in page.data
            if row.system_id == system_id
        ]

    def __len__(self) -> int:
        return len(self._pages)

    # ===================
    # WRITES
    # ===================

    def store(self, query: PageQuery, page: PageResult) -> None:
        """Put a freshly fetched page in the cache."""
        self._pages[query] = page
        self._stale.discard(query)
        self._notify(CacheEvent(CacheEventType.STORED, keys=(query,)))

    def snapshot(self) -> CacheSnapshot:
        """Deep copy of every cached page, for rollback."""
        return {query: page.model_copy(deep=True) for query, page in self._pages.items()}

    def restore(self, snapshot: CacheSnapshot) -> None:
        """Replace the cache contents with a snapshot, as taken."""
        self._pages = {query: page.model_copy(deep=True) for query, page in snapshot.items()}
        self._notify(CacheEvent(CacheEventType.ROLLED_BACK, keys=tuple(self._pages)))

    def apply_field(self, system_id: int, field_name: str, value: Optional[str]) -> int:
        """
        Set a field on every cached row of an entity.

        One entity can appear as several rows and on several pages; all of
        them change together.

        Returns:
            Number of rows changed
        """
        changed = 0
        touched = []
        for query, page in self._pages.items():
            page_changed = False
            for row in page.data:
                if row.system_id == system_id:
                    setattr(row, field_name, value)
                    changed += 1
                    page_changed = True
            if page_changed:
                touched.append(query)

        self._notify(CacheEvent(
            CacheEventType.OPTIMISTIC_UPDATE,
            keys=tuple(touched),
            target_id=system_id,
            rows_changed=changed
        ))
        return changed

    def invalidate(self) -> list[PageQuery]:
        """Mark every page stale and tell subscribers to refetch."""
        keys = list(self._pages)
        self._stale.update(keys)
        self._notify(CacheEvent(CacheEventType.INVALIDATED, keys=tuple(keys)))
        return keys

    # ===================
    # SUBSCRIPTIONS
    # ===================

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: CacheEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                # Listener errors never interrupt a transition
                logger.error(
                    "cache_listener_failed",
                    event_type=event.type.value,
                    error=str(e),
                    error_type=type(e).__name__
                )
