"""
Contract between the editing console and whatever serves the records.
"""

from typing import Optional, Protocol

from models.import_record import ImportRecord, PageQuery, PageResult, TableStats


class ImportDataSource(Protocol):
    """
    Async read/write access to import records.

    Implementations raise AppError subclasses: NotFoundError when the id does
    not resolve, ValidationError for a rejected field or value, and
    ExternalServiceError for transport failures.
    """

    async def fetch_page(self, query: PageQuery) -> PageResult:
        ...

    async def update_field(
        self,
        record_id: str,
        field: str,
        value: Optional[str]
    ) -> ImportRecord:
        ...

    async def get_stats(self) -> TableStats:
        ...
