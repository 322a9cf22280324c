"""
Import record service for business logic operations.

Reads pages of records that still lack a product name and writes the one
editable field, unique_product_name, across every row of an entity.
"""

from datetime import datetime
from typing import Optional
import structlog

from config import get_supabase_client, settings
from models.import_record import (
    EDITABLE_FIELD,
    LIST_COLUMNS,
    SEARCH_COLUMNS,
    SORTABLE_COLUMNS,
    SortOrder,
    ImportRecord,
    ImportRecordListItem,
    PageQuery,
    PageResult,
    BatchUpdateItem,
    TableStats,
)
from services.suggestion_service import SuggestionRanker, get_suggestion_service
from utils.text_utils import clean_product_name
from exceptions import (
    AppError,
    DatabaseError,
    FieldNotEditableError,
    ImportRecordNotFoundError,
    InvalidProductNameError,
    InvalidRecordIdError,
    InvalidSortColumnError,
)

logger = structlog.get_logger(__name__)

BATCH_CHUNK_SIZE = 10

# PostgREST filter for "no product name yet"
MISSING_NAME_FILTER = f"{EDITABLE_FIELD}.is.null,{EDITABLE_FIELD}.eq."

# Characters with meaning inside a PostgREST or=(...) expression
_OR_RESERVED = str.maketrans({",": " ", "(": " ", ")": " ", "*": " ", "%": " "})


class ImportRecordService:
    """
    Import record business logic.

    Handles the paginated list, field updates and table statistics.
    """

    def __init__(self, ranker: Optional[SuggestionRanker] = None):
        self.db = get_supabase_client()
        self.table = settings.imports_table
        self._ranker = ranker

    @property
    def ranker(self) -> SuggestionRanker:
        if self._ranker is None:
            self._ranker = get_suggestion_service()
        return self._ranker

    # ===================
    # READ OPERATIONS
    # ===================

    def get_page(self, query: PageQuery) -> PageResult:
        """
        Get one page of records whose product name is missing.

        Args:
            query: Page, search, filters, sorting and date range

        Returns:
            PageResult with rows and total count

        Raises:
            InvalidSortColumnError: If sort_by is not a known column
        """
        if query.sort_by not in SORTABLE_COLUMNS:
            raise InvalidSortColumnError(query.sort_by, list(SORTABLE_COLUMNS))

        logger.info(
            "getting_import_records",
            page=query.page,
            page_size=query.page_size,
            search=query.search or None,
            filters=query.filters.active(),
            sort_by=query.sort_by,
            sort_order=query.sort_order.value
        )

        try:
            db_query = (
                self.db.table(self.table)
                .select(",".join(LIST_COLUMNS), count="exact")
            )

            # Only editable records are ever listed
            db_query = db_query.or_(MISSING_NAME_FILTER)

            if query.search:
                term = query.search.translate(_OR_RESERVED).strip()
                if term:
                    db_query = db_query.or_(
                        ",".join(f"{column}.ilike.*{term}*" for column in SEARCH_COLUMNS)
                    )

            for column, value in query.filters.active().items():
                if isinstance(value, int):
                    db_query = db_query.eq(column, value)
                else:
                    db_query = db_query.ilike(column, f"%{value}%")

            if query.start_date:
                db_query = db_query.gte("reg_date", query.start_date.isoformat())
            if query.end_date:
                db_query = db_query.lte("reg_date", query.end_date.isoformat())

            db_query = db_query.order(
                query.sort_by,
                desc=query.sort_order == SortOrder.DESC
            )
            db_query = db_query.range(query.offset, query.offset + query.page_size - 1)

            result = db_query.execute()

            rows = [ImportRecordListItem(**row) for row in result.data]
            total = result.count or 0

            logger.info(
                "import_records_retrieved",
                count=len(rows),
                total=total
            )

            return PageResult.create(
                data=rows,
                total_count=total,
                page=query.page,
                page_size=query.page_size
            )

        except Exception as e:
            logger.error(
                "get_import_records_failed",
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_stats(self) -> TableStats:
        """
        Get total row count and the latest target date.

        Returns:
            TableStats (last_updated falls back to now on an empty table)
        """
        try:
            count_result = (
                self.db.table(self.table)
                .select("system_id", count="exact")
                .limit(1)
                .execute()
            )
            latest_result = (
                self.db.table(self.table)
                .select("target_date")
                .not_.is_("target_date", "null")
                .order("target_date", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_stats_failed", error=str(e))
            raise DatabaseError("select", str(e))

        last_updated = datetime.utcnow()
        if latest_result.data and latest_result.data[0].get("target_date"):
            last_updated = latest_result.data[0]["target_date"]

        stats = TableStats(
            total_records=count_result.count or 0,
            last_updated=last_updated
        )

        logger.info(
            "stats_retrieved",
            total_records=stats.total_records
        )

        return stats

    def count_missing_names(self) -> int:
        """Count rows whose product name is still missing."""
        try:
            result = (
                self.db.table(self.table)
                .select("system_id", count="exact")
                .or_(MISSING_NAME_FILTER)
                .limit(1)
                .execute()
            )
            return result.count or 0
        except Exception as e:
            logger.error("count_missing_names_failed", error=str(e))
            raise DatabaseError("count", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def update_field(
        self,
        record_id: str,
        field: str,
        value: Optional[str]
    ) -> ImportRecord:
        """
        Set the product name on every row of an entity.

        Re-issuing the same update is a no-op beyond the first one.

        Args:
            record_id: system_id of the entity
            field: Must be unique_product_name
            value: New product name; None or empty clears it

        Returns:
            One of the updated rows

        Raises:
            FieldNotEditableError: If field is not unique_product_name
            InvalidRecordIdError: If record_id is not an integer
            InvalidProductNameError: If value is not in the vocabulary
            ImportRecordNotFoundError: If no row has this system_id
        """
        system_id, value = self._validate_update(record_id, field, value)
        return self._write(system_id, value)

    def batch_update(self, updates: list[BatchUpdateItem]) -> list[ImportRecord]:
        """
        Apply several field updates.

        Every update is validated before anything is written, then writes go
        out in chunks of BATCH_CHUNK_SIZE.

        Args:
            updates: Updates to apply

        Returns:
            Updated records, in request order
        """
        logger.info("batch_updating_import_records", count=len(updates))

        validated = [
            self._validate_update(update.id, update.field, update.value)
            for update in updates
        ]

        results = []
        for start in range(0, len(validated), BATCH_CHUNK_SIZE):
            chunk = validated[start:start + BATCH_CHUNK_SIZE]
            results.extend(self._write(system_id, value) for system_id, value in chunk)
            logger.debug(
                "batch_chunk_written",
                start=start,
                size=len(chunk)
            )

        logger.info("batch_update_complete", updated=len(results))
        return results

    def _validate_update(
        self,
        record_id: str,
        field: str,
        value: Optional[str]
    ) -> tuple[int, Optional[str]]:
        """Check field, id and value; return (system_id, value to store)."""
        if field != EDITABLE_FIELD:
            raise FieldNotEditableError(field, EDITABLE_FIELD)

        try:
            system_id = int(str(record_id).strip())
        except ValueError:
            raise InvalidRecordIdError(str(record_id))

        value = clean_product_name(value)
        if value is None or not settings.enforce_vocabulary:
            return system_id, value

        matches = self.ranker.get_exact_matches(value)
        if not matches:
            suggestions = [
                result.suggestion
                for result in self.ranker.search_suggestions(value, max_results=5)
            ]
            logger.warning(
                "product_name_rejected",
                system_id=system_id,
                value=value,
                suggestions=suggestions
            )
            raise InvalidProductNameError(value, suggestions)

        # Store the canonical spelling
        return system_id, matches[0]

    def _write(self, system_id: int, value: Optional[str]) -> ImportRecord:
        logger.info(
            "updating_import_record",
            system_id=system_id,
            field=EDITABLE_FIELD,
            value=value
        )

        try:
            existing = (
                self.db.table(self.table)
                .select("system_id")
                .eq("system_id", system_id)
                .limit(1)
                .execute()
            )
            if not existing.data:
                raise ImportRecordNotFoundError(str(system_id))

            result = (
                self.db.table(self.table)
                .update({EDITABLE_FIELD: value})
                .eq("system_id", system_id)
                .execute()
            )

            if not result.data:
                raise ImportRecordNotFoundError(str(system_id))

            logger.info(
                "import_record_updated",
                system_id=system_id,
                rows_updated=len(result.data)
            )

            return ImportRecord(**result.data[0])

        except AppError:
            raise
        except Exception as e:
            logger.error(
                "update_import_record_failed",
                system_id=system_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))


# Singleton instance for convenience
_import_record_service: Optional[ImportRecordService] = None


def get_import_record_service() -> ImportRecordService:
    """Get or create ImportRecordService instance."""
    global _import_record_service
    if _import_record_service is None:
        _import_record_service = ImportRecordService()
    return _import_record_service
