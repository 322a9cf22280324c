"""
Import record API routes.

Lists records that still lack a product name and writes the product name.
Only unique_product_name is writable; the service re-checks this.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
from datetime import date
import structlog

from config import settings
from models.import_record import (
    ImportFilters,
    ImportRecord,
    PageQuery,
    PageResult,
    RecordUpdate,
    BatchUpdateRequest,
    SortOrder,
    TableStats,
)
from services.import_record_service import get_import_record_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=PageResult)
async def list_import_records(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        alias="pageSize",
        description="Rows per page"
    ),
    search: str = Query("", description="Search across text columns"),
    true_importer_name: Optional[str] = Query(None, description="Importer contains"),
    origin_country: Optional[str] = Query(None, description="Origin country contains"),
    city: Optional[str] = Query(None, description="City contains"),
    indian_port: Optional[str] = Query(None, description="Port contains"),
    hs_code: Optional[int] = Query(None, description="Exact HS code"),
    chapter: Optional[int] = Query(None, description="Exact chapter"),
    sort_by: str = Query("target_date", alias="sortBy", description="Sort column"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    start_date: Optional[date] = Query(None, alias="startDate", description="reg_date from"),
    end_date: Optional[date] = Query(None, alias="endDate", description="reg_date to"),
):
    """
    List import records whose product name is missing.

    Returns paginated rows (list projection only).
    """
    try:
        service = get_import_record_service()

        query = PageQuery(
            page=page,
            page_size=page_size,
            search=search,
            filters=ImportFilters(
                true_importer_name=true_importer_name,
                origin_country=origin_country,
                city=city,
                indian_port=indian_port,
                hs_code=hs_code,
                chapter=chapter,
            ),
            sort_by=sort_by,
            sort_order=sort_order,
            start_date=start_date,
            end_date=end_date,
        )

        return service.get_page(query)

    except Exception as e:
        return handle_error(e)


@router.get("/stats", response_model=TableStats)
async def get_stats():
    """Get total record count and last update time."""
    try:
        service = get_import_record_service()
        return service.get_stats()

    except Exception as e:
        return handle_error(e)


@router.put("/batch", response_model=list[ImportRecord])
async def batch_update(data: BatchUpdateRequest):
    """
    Update the product name of several records.

    All updates are validated before any is written.

    Raises:
        404: A record not found
        422: Field not editable or name not in vocabulary
    """
    try:
        service = get_import_record_service()
        return service.batch_update(data.updates)

    except Exception as e:
        return handle_error(e)


@router.put("/{record_id}", response_model=ImportRecord)
async def update_import_record(record_id: str, data: RecordUpdate):
    """
    Update the product name of every row sharing this system_id.

    Raises:
        404: Record not found
        422: Field not editable, bad id, or name not in vocabulary
    """
    try:
        service = get_import_record_service()
        return service.update_field(record_id, data.field, data.value)

    except Exception as e:
        return handle_error(e)
