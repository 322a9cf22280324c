"""
Async HTTP client for the import record API.

Implements ImportDataSource over the REST endpoints and turns error
responses back into the matching AppError subclasses.
"""

from typing import Any, Optional
import httpx
import structlog

from config import settings
from models.import_record import (
    BatchUpdateItem,
    ImportRecord,
    PageQuery,
    PageResult,
    TableStats,
)
from models.suggestion import SuggestionListResponse, SuggestionValidationResponse
from exceptions import (
    ApiUnavailableError,
    AppError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


class ImportApiClient:
    """
    Client for /api/data and /api/suggestions.

    Usage:
        async with ImportApiClient() as client:
            page = await client.fetch_page(PageQuery(page=1))
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url or settings.api_base_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ImportApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    async def aclose(self) -> None:
        await self._client.aclose()

    # ===================
    # RECORDS
    # ===================

    async def fetch_page(self, query: PageQuery) -> PageResult:
        """GET /data: one page of records missing a product name."""
        body = await self._request("GET", "/data", params=query.to_params())
        return PageResult.model_validate(body)

    async def update_field(
        self,
        record_id: str,
        field: str,
        value: Optional[str]
    ) -> ImportRecord:
        """PUT /data/{id}: write the product name of one entity."""
        body = await self._request(
            "PUT",
            f"/data/{record_id}",
            json={"field": field, "value": value}
        )
        return ImportRecord.model_validate(body)

    async def batch_update(self, updates: list[BatchUpdateItem]) -> list[ImportRecord]:
        """PUT /data/batch: write several product names."""
        body = await self._request(
            "PUT",
            "/data/batch",
            json={"updates": [update.model_dump() for update in updates]}
        )
        return [ImportRecord.model_validate(row) for row in body]

    async def get_stats(self) -> TableStats:
        """GET /data/stats."""
        body = await self._request("GET", "/data/stats")
        return TableStats.model_validate(body)

    # ===================
    # SUGGESTIONS
    # ===================

    async def search_suggestions(self, query: str, limit: int = 10) -> SuggestionListResponse:
        """GET /suggestions: server-side autocomplete."""
        body = await self._request(
            "GET",
            "/suggestions",
            params={"q": query, "limit": limit}
        )
        return SuggestionListResponse.model_validate(body)

    async def validate_product_name(self, value: Optional[str]) -> SuggestionValidationResponse:
        """GET /suggestions/validate."""
        params = {"value": value} if value is not None else {}
        body = await self._request("GET", "/suggestions/validate", params=params)
        return SuggestionValidationResponse.model_validate(body)

    # ===================
    # HELPERS
    # ===================

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        logger.debug("api_request", method=method, path=path)

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("api_request_timeout", method=method, path=path)
            raise ApiUnavailableError(
                "The server took too long to respond, please retry",
                details={"path": path}
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "api_request_failed",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__
            )
            raise ApiUnavailableError(
                "Could not reach the server, please retry",
                details={"path": path, "error": str(e) or type(e).__name__}
            ) from e

        if response.is_error:
            error = error_from_response(response)
            logger.warning(
                "api_error_response",
                method=method,
                path=path,
                status_code=response.status_code,
                code=error.code
            )
            raise error

        return response.json()


def error_from_response(response: httpx.Response) -> AppError:
    """
    Rebuild an AppError from an error response.

    Understands the {"error": {...}} envelope and FastAPI's own
    {"detail": [...]} request validation body.
    """
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}

    envelope = body.get("error") if isinstance(body, dict) else None
    if isinstance(envelope, dict):
        code = envelope.get("code") or "API_ERROR"
        message = envelope.get("message") or response.reason_phrase
        details = envelope.get("details") or {}
    else:
        code = "VALIDATION_ERROR" if status == 422 else "API_ERROR"
        message = "Request validation failed" if status == 422 else response.reason_phrase
        details = {"errors": body.get("detail")} if isinstance(body, dict) and "detail" in body else {}

    if status == 404:
        error: AppError = NotFoundError(
            resource="Import record",
            identifier=str(details.get("id", "")),
            code=code
        )
    elif status == 422:
        error = ValidationError(message, code=code, details=details)
    elif status == 409:
        error = ConflictError(message, code=code, details=details)
    else:
        error = ExternalServiceError(
            service="import_api",
            message=message or "Server error",
            details={"status_code": status, **details},
            code=code
        )
    return error
