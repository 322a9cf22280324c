"""
Optimistic edit reconciler for the product name grid.

Edit lifecycle:
    IDLE → EDITING → SAVING → RESOLVED_SUCCESS | RESOLVED_FAILURE → IDLE

Saving applies the new value to the cache before the write goes out. On
failure the cache is restored from the snapshot taken just before that; on
success the cache is invalidated and every cached page is fetched again.
Only one save is in flight at a time; edits attempted meanwhile are rejected.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import structlog

from config import settings
from console.data_source import ImportDataSource
from console.page_cache import CacheSnapshot, PageCache
from models.import_record import EDITABLE_FIELD, ImportRecord, PageQuery, PageResult
from services.suggestion_service import SuggestionRanker
from exceptions import (
    AppError,
    EditInProgressError,
    FieldNotEditableError,
    InvalidProductNameError,
    InvalidRecordIdError,
    NoActiveEditError,
    WriteTimeoutError,
)

logger = structlog.get_logger(__name__)


class EditState(str, Enum):
    """States of one edit surface."""
    IDLE = "idle"
    EDITING = "editing"
    SAVING = "saving"
    RESOLVED_SUCCESS = "resolved_success"
    RESOLVED_FAILURE = "resolved_failure"


# Allowed transitions (current state → next states)
TRANSITIONS: dict[EditState, set[EditState]] = {
    EditState.IDLE: {EditState.EDITING},
    EditState.EDITING: {EditState.IDLE, EditState.EDITING, EditState.SAVING},
    EditState.SAVING: {EditState.RESOLVED_SUCCESS, EditState.RESOLVED_FAILURE},
    EditState.RESOLVED_SUCCESS: {EditState.IDLE},
    EditState.RESOLVED_FAILURE: {EditState.IDLE},
}


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class EditSession:
    """The cell being edited and its uncommitted buffer."""
    target_id: int
    field: str
    original_value: Optional[str]
    value: str


@dataclass
class PendingEdit:
    """A save in flight and what to roll back to."""
    target_id: int
    field: str
    new_value: Optional[str]
    previous_snapshot: CacheSnapshot


@dataclass
class EditOutcome:
    """How a save ended."""
    status: OutcomeStatus
    target_id: int
    value: Optional[str]
    record: Optional[ImportRecord] = None
    error: Optional[AppError] = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def message(self) -> str:
        """Text to show the operator."""
        if self.ok:
            return "Product name updated successfully"
        if self.error is not None:
            return self.error.message
        return "Failed to update product name"


OutcomeListener = Callable[[EditOutcome], None]


class EditReconciler:
    """
    Coordinates one edit at a time against a PageCache.

    Usage:
        reconciler = EditReconciler(cache, api_client, ranker)
        await reconciler.load_page(query)
        reconciler.begin_edit(42, current_value=None)
        reconciler.set_value("Steel Rod")
        outcome = await reconciler.save()
    """

    def __init__(
        self,
        cache: PageCache,
        data_source: ImportDataSource,
        ranker: Optional[SuggestionRanker] = None,
        write_timeout: Optional[float] = None
    ):
        """
        Args:
            cache: Pages shown by the grid
            data_source: Where reads and writes go
            ranker: Vocabulary gate; None allows any value
            write_timeout: Seconds before a save counts as failed
                (defaults to request_timeout_seconds)
        """
        self.cache = cache
        self.data_source = data_source
        self.ranker = ranker
        self.write_timeout = (
            write_timeout if write_timeout is not None else settings.request_timeout_seconds
        )

        self._state = EditState.IDLE
        self._session: Optional[EditSession] = None
        self._pending: Optional[PendingEdit] = None
        self._listeners: list[OutcomeListener] = []
        self.last_outcome: Optional[EditOutcome] = None

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def session(self) -> Optional[EditSession]:
        return self._session

    @property
    def pending(self) -> Optional[PendingEdit]:
        return self._pending

    def subscribe(self, listener: OutcomeListener) -> Callable[[], None]:
        """Be told how every save ends. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ===================
    # PAGE LOADS
    # ===================

    async def load_page(self, query: PageQuery) -> PageResult:
        """
        Fetch a page and cache it.

        While a save is in flight the page is returned but not cached, so a
        rollback cannot be mixed with newer data.
        """
        page = await self.data_source.fetch_page(query)
        if self._state == EditState.SAVING:
            logger.debug("page_load_not_cached", page=query.page)
            return page
        self.cache.store(query, page)
        return page

    # ===================
    # EDIT SESSION
    # ===================

    def begin_edit(
        self,
        target_id,
        current_value: Optional[str] = None,
        field: str = EDITABLE_FIELD
    ) -> EditSession:
        """
        Start editing a cell. Starting another cell drops the current buffer.

        Raises:
            EditInProgressError: If a save is in flight
            InvalidRecordIdError: If target_id is not an integer
        """
        if self._state == EditState.SAVING:
            raise EditInProgressError(str(self._pending.target_id))

        try:
            system_id = int(str(target_id).strip())
        except ValueError:
            raise InvalidRecordIdError(str(target_id))

        if self._session is not None:
            logger.debug(
                "edit_replaced",
                previous_id=self._session.target_id,
                target_id=system_id
            )

        self._transition(EditState.EDITING)
        self._session = EditSession(
            target_id=system_id,
            field=field,
            original_value=current_value,
            value=current_value or ""
        )
        return self._session

    def set_value(self, value: Optional[str]) -> None:
        """Update the edit buffer."""
        if self._state != EditState.EDITING:
            raise NoActiveEditError(self._state.value)
        self._session.value = value or ""

    def cancel(self) -> None:
        """Drop the edit buffer. The cache is not touched."""
        if self._state == EditState.SAVING:
            raise EditInProgressError(str(self._pending.target_id))
        if self._state != EditState.EDITING:
            return
        logger.debug("edit_cancelled", target_id=self._session.target_id)
        self._session = None
        self._transition(EditState.IDLE)

    def validated_value(self) -> Optional[str]:
        """
        Value the current buffer would be saved as.

        Empty clears the field. With a ranker, the value must be a vocabulary
        name and is replaced by its canonical spelling.

        Raises:
            NoActiveEditError: If nothing is being edited
            FieldNotEditableError: If the session targets another field
            InvalidProductNameError: If the value is not in the vocabulary
        """
        if self._state != EditState.EDITING:
            raise NoActiveEditError(self._state.value)

        session = self._session
        if session.field != EDITABLE_FIELD:
            raise FieldNotEditableError(session.field, EDITABLE_FIELD)

        value = session.value.strip() or None
        if value is None or self.ranker is None:
            return value

        matches = self.ranker.get_exact_matches(value)
        if not matches:
            suggestions = [
                result.suggestion
                for result in self.ranker.search_suggestions(value, max_results=5)
            ]
            raise InvalidProductNameError(value, suggestions)
        return matches[0]

    # ===================
    # SAVE
    # ===================

    async def save(self) -> EditOutcome:
        """
        Save the edit buffer.

        Validation errors are raised before anything changes and leave the
        session open. Write errors are returned as a failed outcome after the
        cache has been rolled back.

        Raises:
            EditInProgressError: If another save is in flight
            NoActiveEditError: If nothing is being edited
            ValidationError: If the field or value is rejected
        """
        if self._state == EditState.SAVING:
            raise EditInProgressError(str(self._pending.target_id))

        value = self.validated_value()
        session = self._session

        self._pending = PendingEdit(
            target_id=session.target_id,
            field=session.field,
            new_value=value,
            previous_snapshot=self.cache.snapshot()
        )
        self._transition(EditState.SAVING)

        rows = self.cache.apply_field(session.target_id, session.field, value)
        logger.info(
            "edit_saving",
            target_id=session.target_id,
            value=value,
            rows_changed=rows
        )

        try:
            record = await asyncio.wait_for(
                self.data_source.update_field(str(session.target_id), session.field, value),
                timeout=self.write_timeout
            )
        except asyncio.TimeoutError:
            outcome = self._roll_back(WriteTimeoutError(str(session.target_id), self.write_timeout))
        except AppError as e:
            outcome = self._roll_back(e)
        except asyncio.CancelledError:
            self._roll_back(None)
            # The write may still have landed; pages need a refetch
            self.cache.invalidate()
            self._finish()
            raise
        except Exception:
            self._roll_back(None)
            self._finish()
            raise
        else:
            outcome = await self._commit(record)

        self._finish()
        self._publish(outcome)
        return outcome

    async def _commit(self, record: ImportRecord) -> EditOutcome:
        pending = self._pending
        self._transition(EditState.RESOLVED_SUCCESS)

        logger.info(
            "edit_saved",
            target_id=pending.target_id,
            value=pending.new_value
        )

        # Server may have derived state; refetch everything once
        for query in self.cache.invalidate():
            try:
                page = await asyncio.wait_for(
                    self.data_source.fetch_page(query),
                    timeout=self.write_timeout
                )
            except Exception as e:
                # Write already succeeded; the page stays stale
                logger.warning(
                    "refetch_failed",
                    page=query.page,
                    error=str(e) or type(e).__name__
                )
                continue
            self.cache.store(query, page)

        return EditOutcome(
            status=OutcomeStatus.SUCCESS,
            target_id=pending.target_id,
            value=pending.new_value,
            record=record
        )

    def _roll_back(self, error: Optional[AppError]) -> EditOutcome:
        pending = self._pending
        self.cache.restore(pending.previous_snapshot)
        self._transition(EditState.RESOLVED_FAILURE)

        logger.warning(
            "edit_rolled_back",
            target_id=pending.target_id,
            value=pending.new_value,
            error_code=error.code if error else None,
            error=error.message if error else None
        )

        return EditOutcome(
            status=OutcomeStatus.FAILURE,
            target_id=pending.target_id,
            value=pending.new_value,
            error=error
        )

    def _finish(self) -> None:
        self._pending = None
        self._session = None
        self._transition(EditState.IDLE)

    # ===================
    # HELPERS
    # ===================

    def _transition(self, new_state: EditState) -> None:
        if new_state not in TRANSITIONS[self._state]:
            raise RuntimeError(
                f"Invalid edit transition {self._state.value} -> {new_state.value}"
            )
        logger.debug(
            "edit_state_changed",
            previous=self._state.value,
            state=new_state.value
        )
        self._state = new_state

    def _publish(self, outcome: EditOutcome) -> None:
        self.last_outcome = outcome
        for listener in list(self._listeners):
            try:
                listener(outcome)
            except Exception as e:
                logger.error(
                    "outcome_listener_failed",
                    error=str(e),
                    error_type=type(e).__name__
                )
