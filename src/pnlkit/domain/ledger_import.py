"""Ledger CSV import domain service."""

import csv
import logging
import re
import uuid
from pathlib import Path
from typing import Any, Optional

from pnlkit.database.base import Database
from pnlkit.domain.entities import LineItem
from pnlkit.domain.errors import ValidationError
from pnlkit.utils.amount_parser import parse_amount
from pnlkit.utils.period_parser import parse_month, parse_year

logger = logging.getLogger(__name__)

HEADER_SEARCH_ROWS = 15
MIN_IMPORT_YEAR = 2015
MAX_IMPORT_YEAR = 2035

# Column name patterns of the PowerBI P&L export, checked in order
COLUMN_PATTERNS: dict[str, re.Pattern] = {
    "gl_account": re.compile(r"rgsniveau2|rgs niveau 2|gl.?account|rekening", re.I),
    "category": re.compile(r"rgsniveau3|rgs niveau 3|categorie|category", re.I),
    "subcategory": re.compile(r"grootboek|subcat", re.I),
    "year": re.compile(r"jaar|\byear\b", re.I),
    "month": re.compile(r"^mnd$|\bmnd\b|maand|\bmonth\b", re.I),
    "amount": re.compile(r"bedrag|amount|waarde|value|actueel|actual", re.I),
}

REQUIRED_COLUMNS = ("gl_account", "category", "year", "month", "amount")


def detect_columns(header: list[str]) -> dict[str, int]:
    """Map logical field names to column indices of a header row.

    Subcategory patterns are checked before category ones so that a
    "Subcategorie" column is not taken for the category.
    """
    columns: dict[str, int] = {}
    taken: set[int] = set()
    for name in ("subcategory", "gl_account", "category", "year", "month", "amount"):
        pattern = COLUMN_PATTERNS[name]
        for index, cell in enumerate(header):
            if index in taken:
                continue
            if pattern.search((cell or "").strip()):
                columns[name] = index
                taken.add(index)
                break
    return columns


def find_header(rows: list[list[str]]) -> tuple[int, dict[str, int]]:
    """Find the first row, within HEADER_SEARCH_ROWS, naming every required column.

    Raises:
        ValidationError: If no such row exists; the message names the columns
            missing from the closest candidate
    """
    best: dict[str, int] = {}
    for index, row in enumerate(rows[:HEADER_SEARCH_ROWS]):
        columns = detect_columns(row)
        if all(name in columns for name in REQUIRED_COLUMNS):
            return index, columns
        if len(columns) > len(best):
            best = columns

    missing = [name for name in REQUIRED_COLUMNS if name not in best]
    raise ValidationError(f"CSV file is missing required columns: {', '.join(missing)}")


def _cell(row: list[str], columns: dict[str, int], name: str) -> str:
    index = columns.get(name)
    if index is None or index >= len(row):
        return ""
    return (row[index] or "").strip()


class LedgerImportService:
    """Service for importing ledger exports as line items."""

    def __init__(self, db: Database):
        """Initialize ledger import service.

        Args:
            db: Database instance
        """
        self.db = db

    def import_csv(
        self,
        csv_file_path: str,
        location_id: str,
        import_id: Optional[str] = None,
        replace_existing: bool = False,
    ) -> dict[str, Any]:
        """Import line items from a P&L CSV export.

        Args:
            csv_file_path: Path to CSV file
            location_id: Location the export belongs to
            import_id: Batch identifier stored on every row (defaults to a new UUID)
            replace_existing: If True, delete stored line items of the imported
                periods for this location before inserting

        Returns:
            Dict with import statistics:
            - imported: number of line items stored
            - skipped: number of rows skipped
            - errors: list of error messages for skipped rows
            - periods: sorted list of (year, month) tuples imported
            - import_id: batch identifier used

        Raises:
            ValidationError: If location is empty or no header row is found
            FileNotFoundError: If CSV file doesn't exist
        """
        if not location_id or not location_id.strip():
            raise ValidationError("Location ID must be a non-empty string")

        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        import_id = import_id or str(uuid.uuid4())

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            # Try to detect delimiter
            sample = f.read(4096)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
            except csv.Error:
                delimiter = ","
            rows = list(csv.reader(f, delimiter=delimiter))

        header_index, columns = find_header(rows)

        items: list[LineItem] = []
        errors: list[str] = []
        skipped = 0

        for row_num, row in enumerate(rows[header_index + 1:], start=header_index + 2):
            if not any((cell or "").strip() for cell in row):
                continue

            gl_account = _cell(row, columns, "gl_account")
            if not gl_account:
                errors.append(f"Row {row_num}: Missing GL account")
                skipped += 1
                continue

            try:
                year = parse_year(_cell(row, columns, "year"), MIN_IMPORT_YEAR, MAX_IMPORT_YEAR)
                month = parse_month(_cell(row, columns, "month"))
                amount = parse_amount(_cell(row, columns, "amount"))
            except ValueError as e:
                errors.append(f"Row {row_num}: {e}")
                skipped += 1
                continue

            items.append(
                LineItem(
                    location_id=location_id,
                    year=year,
                    month=month,
                    category=_cell(row, columns, "category"),
                    subcategory=_cell(row, columns, "subcategory") or None,
                    gl_account=gl_account,
                    amount=amount,
                    import_id=import_id,
                )
            )

        periods = sorted({(item.year, item.month) for item in items})
        if replace_existing and items:
            deleted = self.db.replace_line_items(location_id, periods, items)
            logger.info(
                "Replaced %d line items for %s in %d periods", deleted, location_id, len(periods)
            )
            imported = len(items)
        else:
            imported = self.db.add_line_items(items) if items else 0
        logger.info(
            "Imported %d line items from %s (%d skipped)", imported, csv_path.name, skipped
        )

        return {
            "imported": imported,
            "skipped": skipped,
            "errors": errors,
            "periods": periods,
            "import_id": import_id,
        }
