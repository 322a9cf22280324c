"""
Check the import records table before pointing the editor at it.

Prints table statistics, a few recent records, the top origin countries and
importers, and how many rows still need a product name.

Usage:
    python scripts/check_data.py
    python scripts/check_data.py --sample 20000
"""

import sys
import argparse
from collections import Counter
from pathlib import Path

# Add project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from config import DatabaseSession, settings
from services.import_record_service import get_import_record_service
from exceptions import AppError

FETCH_CHUNK = 1000


def print_header(title: str):
    """Print formatted header."""
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def fetch_sample(limit: int) -> list[dict]:
    """Read up to `limit` rows in chunks for the distributions."""
    rows = []
    with DatabaseSession("check_data_sample") as client:
        while len(rows) < limit:
            start = len(rows)
            end = min(start + FETCH_CHUNK, limit) - 1
            result = (
                client.table(settings.imports_table)
                .select("origin_country,true_importer_name,total_value_usd")
                .range(start, end)
                .execute()
            )
            if not result.data:
                break
            rows.extend(result.data)
            if len(result.data) < end - start + 1:
                break
    return rows


def print_sample_records():
    with DatabaseSession("check_data_recent") as client:
        result = (
            client.table(settings.imports_table)
            .select("system_id,unique_product_name,true_importer_name,origin_country,total_value_usd")
            .order("target_date", desc=True)
            .limit(5)
            .execute()
        )

    print_header("SAMPLE RECORDS")
    for i, record in enumerate(result.data, 1):
        print(f"{i}. System ID: {record['system_id']}")
        print(f"   Product:  {record.get('unique_product_name') or 'N/A'}")
        print(f"   Importer: {record.get('true_importer_name') or 'N/A'}")
        print(f"   Origin:   {record.get('origin_country') or 'N/A'}")
        print(f"   Value:    ${record.get('total_value_usd') or 0:,.2f}")


def print_distribution(title: str, counter: Counter, top: int = 10):
    print_header(title)
    for name, count in counter.most_common(top):
        print(f"  {name or 'Unknown':<40} {count:>10,}")


def main():
    parser = argparse.ArgumentParser(description="Check the import records table")
    parser.add_argument(
        "--sample",
        type=int,
        default=10000,
        help="Rows to read for the country/importer distributions"
    )
    args = parser.parse_args()

    service = get_import_record_service()

    try:
        stats = service.get_stats()

        print_header(f"TABLE {settings.imports_table}")
        print(f"  Total records: {stats.total_records:,}")
        print(f"  Last updated:  {stats.last_updated.isoformat()}")

        print_sample_records()

        rows = fetch_sample(args.sample)
        values = [row["total_value_usd"] for row in rows if row.get("total_value_usd") is not None]
        print_header(f"IMPORT VALUE (first {len(rows):,} rows)")
        print(f"  Total:   ${sum(values):,.2f}")
        print(f"  Average: ${(sum(values) / len(values)) if values else 0:,.2f}")

        print_distribution(
            "TOP 10 ORIGIN COUNTRIES",
            Counter(row.get("origin_country") for row in rows)
        )
        print_distribution(
            "TOP 10 IMPORTERS",
            Counter(row.get("true_importer_name") for row in rows)
        )

        missing = service.count_missing_names()
        print_header("EDITABLE RECORDS")
        print(f"  Rows without a product name: {missing:,}")

    except AppError as e:
        print(f"\n[ERROR] {e.code}: {e.message}")
        print("\nTroubleshooting:")
        print(f"  1. Ensure the table '{settings.imports_table}' exists")
        print("  2. Check SUPABASE_URL and SUPABASE_KEY in .env")
        print("  3. Verify the key can SELECT and UPDATE the table")
        sys.exit(1)

    print("\n[OK] Table is reachable and ready for the editor")


if __name__ == "__main__":
    main()
