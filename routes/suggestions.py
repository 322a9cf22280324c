"""
Product name suggestion routes.

Autocomplete ranking and the save-gate check for product names.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from config import settings
from models.suggestion import SuggestionListResponse, SuggestionValidationResponse
from services.suggestion_service import get_suggestion_service
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

@router.get("", response_model=SuggestionListResponse)
async def search_suggestions(
    q: str = Query("", description="Text typed so far"),
    limit: int = Query(
        settings.suggestion_max_results,
        ge=1,
        le=100,
        description="Maximum suggestions"
    )
):
    """
    Rank product names against the query.

    Blank query returns no suggestions.
    """
    try:
        ranker = get_suggestion_service()
        results = ranker.search_suggestions(q, max_results=limit)

        return SuggestionListResponse(
            query=q,
            data=results,
            total=len(results)
        )

    except Exception as e:
        return handle_error(e)


@router.get("/validate", response_model=SuggestionValidationResponse)
async def validate_product_name(
    value: Optional[str] = Query(None, description="Value about to be saved")
):
    """Check whether a value may be saved as a product name."""
    try:
        ranker = get_suggestion_service()

        return SuggestionValidationResponse(
            value=value,
            valid=ranker.is_valid_suggestion(value),
            matches=ranker.get_exact_matches(value)
        )

    except Exception as e:
        return handle_error(e)
