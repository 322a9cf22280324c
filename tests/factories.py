"""
Test data factories.

Uses factory pattern to generate consistent import record rows.
"""

from datetime import date, timedelta
from typing import Optional

from config import settings
from models.import_record import ImportRecordListItem, PageResult

IMPORTS_TABLE = settings.imports_table


class ImportRecordFactory:
    """
    Factory for creating test import record rows.

    Usage:
        # Create with defaults
        row = ImportRecordFactory.create()

        # Create with overrides
        row = ImportRecordFactory.create(system_id=42, unique_product_name="Steel Rod")

        # One entity spread over several rows
        rows = ImportRecordFactory.create_entity(42, rows=3)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        system_id: Optional[int] = None,
        reg_date: Optional[str] = None,
        month_year: str = "Jan-2025",
        hs_code: int = 72142000,
        unique_product_name: Optional[str] = None,
        true_importer_name: str = "Acme Metals Pvt Ltd",
        product_name: str = "MS ROUND BAR 12MM",
        **extra
    ) -> dict:
        """
        Create a single row dict in the shape the database returns.

        Args:
            system_id: Entity key (auto-generated if not provided)
            reg_date: ISO date (derived from the counter if not provided)
            unique_product_name: Canonical product name, usually still None
            **extra: Any other column
        """
        counter = cls._next_counter()
        row = {
            "system_id": system_id if system_id is not None else 1000 + counter,
            "reg_date": reg_date or (date(2025, 1, 1) + timedelta(days=counter)).isoformat(),
            "month_year": month_year,
            "hs_code": hs_code,
            "unique_product_name": unique_product_name,
            "true_importer_name": true_importer_name,
            "product_name": product_name,
        }
        row.update(extra)
        return row

    @classmethod
    def create_entity(cls, system_id: int, rows: int = 2, **kwargs) -> list[dict]:
        """Rows sharing one system_id, differing in hs_code."""
        return [
            cls.create(system_id=system_id, hs_code=72142000 + i, **kwargs)
            for i in range(rows)
        ]

    @classmethod
    def create_batch(cls, count: int, **kwargs) -> list[dict]:
        """Create multiple rows with distinct system_ids."""
        return [cls.create(**kwargs) for _ in range(count)]


class PageResultFactory:
    """
    Factory for PageResult objects used by the console tests.

    Usage:
        page = PageResultFactory.create([row1, row2], page=1)
    """

    @classmethod
    def create(
        cls,
        rows: list[dict],
        page: int = 1,
        page_size: int = 50,
        total_count: Optional[int] = None
    ) -> PageResult:
        return PageResult.create(
            data=[ImportRecordListItem(**row) for row in rows],
            total_count=total_count if total_count is not None else len(rows),
            page=page,
            page_size=page_size
        )
