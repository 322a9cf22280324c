"""
Import customs record schemas.

One logical record (entity) is identified by system_id; the table's composite
key is system_id + reg_date + month_year + hs_code, so an entity can span
several physical rows.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum
from datetime import date, datetime

from models.base import BaseSchema, QuerySchema


EDITABLE_FIELD = "unique_product_name"

# Columns returned by the list endpoint
LIST_COLUMNS = (
    "system_id",
    "reg_date",
    "month_year",
    "hs_code",
    "unique_product_name",
    "true_importer_name",
    "product_name",
)

# Columns the free-text search looks at
SEARCH_COLUMNS = (
    "unique_product_name",
    "true_importer_name",
    "product_name",
    "supplier_name",
    "city",
    "origin_country",
    "indian_port",
)

SORTABLE_COLUMNS = (
    "system_id",
    "reg_date",
    "month_year",
    "hs_code",
    "chapter",
    "true_importer_name",
    "product_name",
    "origin_country",
    "total_value_usd",
    "target_date",
)


class SortOrder(str, Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


class ImportRecord(BaseSchema):
    """
    Full import customs record.

    Returned by write operations.
    """

    id: Optional[str] = None
    system_id: Optional[int] = None
    reg_date: Optional[date] = None
    month_year: Optional[str] = None
    hs_code: Optional[int] = None
    chapter: Optional[int] = None
    unique_product_name: Optional[str] = None
    quantity: Optional[float] = None
    unit_quantity: Optional[str] = None
    unit_price_usd: Optional[float] = None
    total_value_usd: Optional[float] = None
    importer_id: Optional[str] = None
    true_importer_name: Optional[str] = None
    city: Optional[str] = None
    cha_number: Optional[str] = None
    type: Optional[str] = None
    true_supplier_name: Optional[str] = None
    indian_port: Optional[str] = None
    foreign_port: Optional[str] = None
    origin_country: Optional[str] = None
    exchange_rate_usd: Optional[float] = None
    duty: Optional[float] = None
    product_name: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_address: Optional[str] = None
    target_date: Optional[datetime] = None
    importer: Optional[str] = None


class ImportRecordListItem(BaseSchema):
    """Row projection used by the paginated list."""

    system_id: int = Field(..., description="Entity key shared by related rows")
    reg_date: Optional[date] = None
    month_year: Optional[str] = None
    hs_code: Optional[int] = None
    unique_product_name: Optional[str] = None
    true_importer_name: Optional[str] = None
    product_name: Optional[str] = None


class ImportFilters(QuerySchema):
    """Per-column filters. Text filters are case-insensitive contains."""

    true_importer_name: Optional[str] = None
    origin_country: Optional[str] = None
    city: Optional[str] = None
    indian_port: Optional[str] = None
    hs_code: Optional[int] = None
    chapter: Optional[int] = None

    def active(self) -> dict:
        """Filters that were actually provided."""
        return {
            name: value
            for name, value in self.model_dump().items()
            if value is not None and value != ""
        }


class PageQuery(QuerySchema):
    """
    One page request.

    Hashable, so the console uses it as its page cache key.
    """

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(default=50, ge=1, description="Rows per page")
    search: str = Field(default="", description="Free-text search")
    filters: ImportFilters = Field(default_factory=ImportFilters)
    sort_by: str = Field(default="target_date", description="Sort column")
    sort_order: SortOrder = Field(default=SortOrder.DESC)
    start_date: Optional[date] = Field(None, description="reg_date lower bound")
    end_date: Optional[date] = Field(None, description="reg_date upper bound")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def to_params(self) -> dict:
        """Query string parameters understood by GET /api/data."""
        params = {
            "page": self.page,
            "pageSize": self.page_size,
            "search": self.search,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order.value,
        }
        params.update(self.filters.active())
        if self.start_date:
            params["startDate"] = self.start_date.isoformat()
        if self.end_date:
            params["endDate"] = self.end_date.isoformat()
        return params


class PageResult(BaseSchema):
    """One page of rows plus the total row count."""

    data: list[ImportRecordListItem]
    total_count: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def create(
        cls,
        data: list[ImportRecordListItem],
        total_count: int,
        page: int,
        page_size: int
    ) -> "PageResult":
        """Create page result, computing total_pages."""
        total_pages = (total_count + page_size - 1) // page_size  # Ceiling division
        return cls(
            data=data,
            total_count=total_count,
            page=page,
            page_size=page_size,
            total_pages=total_pages
        )


class RecordUpdate(BaseSchema):
    """
    Write one field of an import record.

    The field is checked by the service, not here, so a wrong field gets the
    FIELD_NOT_EDITABLE error code instead of a generic schema error.
    """

    field: str = Field(
        ...,
        min_length=1,
        description="Field to update (only unique_product_name is allowed)",
        examples=[EDITABLE_FIELD]
    )
    value: Optional[str] = Field(
        None,
        max_length=500,
        description="New value; null or empty clears the field",
        examples=["Steel Rod"]
    )

    @field_validator("value")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Empty string clears the field."""
        return v or None


class BatchUpdateItem(RecordUpdate):
    """One entry of a batch update."""

    id: str = Field(..., min_length=1, description="system_id of the record")


class BatchUpdateRequest(BaseSchema):
    """Batch of field updates."""

    updates: list[BatchUpdateItem] = Field(..., min_length=1, max_length=1000)


class TableStats(BaseSchema):
    """Table-level statistics."""

    total_records: int
    last_updated: datetime
