"""CSV import and export domain service."""

import csv
import io
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

import structlog

from dentbooks.database.base import Database
from dentbooks.domain.category import DEFAULT_CATEGORY_ID
from dentbooks.domain.entities import ImportResult, TransactionStatus, TransactionType
from dentbooks.domain.errors import NotFoundError, category_not_found, practice_not_found
from dentbooks.utils.amount_parser import parse_amount, to_money
from dentbooks.utils.date_parser import parse_date

logger = structlog.get_logger(__name__)

DATE_COLUMNS = ("date", "transaction date", "posting date")
DESCRIPTION_COLUMNS = ("description", "memo", "payee", "transaction description")

# Checked in order; the first rule whose category exists wins.
CATEGORY_RULES = (
    (re.compile(r"lab|glidewell|crown|dental lab", re.IGNORECASE), "Lab Fees"),
    (re.compile(r"schein|patterson|supply|composite|bonding", re.IGNORECASE), "Dental Supplies"),
    (re.compile(r"ce course|continuing education|seminar", re.IGNORECASE), "Continuing Education"),
    (re.compile(r"payroll|salary|w-2|wage", re.IGNORECASE), "S-Corp Payroll"),
    (re.compile(r"patient|insurance payment|delta|cigna", re.IGNORECASE), "Clinical Income"),
    (re.compile(r"rent|lease", re.IGNORECASE), "Rent"),
    (re.compile(r"electric|gas|water|utility", re.IGNORECASE), "Utilities"),
)

EXPORT_HEADER = ["Date", "Description", "Amount", "Type", "Status", "Category ID", "Practice ID"]


def _first_value(row: dict[str, str], columns: tuple[str, ...]) -> Optional[str]:
    for column in columns:
        value = (row.get(column) or "").strip()
        if value:
            return value
    return None


def _nonzero_amount(value: Optional[str]) -> Optional[Decimal]:
    """Parse an amount cell to cents, treating blank, unparseable and zero as missing."""
    if not value or not value.strip():
        return None
    try:
        amount = to_money(parse_amount(value))
    except (ValueError, InvalidOperation):
        return None
    return amount if amount != 0 else None


def _detect_delimiter(sample: str) -> str:
    try:
        return csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
    except csv.Error:
        return ","


class CSVImportService:
    """Service for importing bank CSV exports and exporting transactions."""

    def __init__(self, db: Database):
        """Initialize CSV import service.

        Args:
            db: Database instance
        """
        self.db = db

    def parse_csv(self, csv_text: str) -> tuple[list[dict[str, Any]], int]:
        """Parse CSV text into transaction candidates.

        Headers are matched case-insensitively. A signed ``amount`` column
        decides the type (negative is an expense). Without a usable amount,
        a ``debit`` value makes an expense and a ``credit`` value makes
        income. An explicit ``type`` column of income/expense wins over both.

        Rows missing a date, description or non-zero amount are dropped.

        Args:
            csv_text: Raw CSV text

        Returns:
            Tuple of (candidate rows, dropped row count)
        """
        csv_text = csv_text.lstrip("\ufeff").strip()
        if not csv_text:
            return [], 0

        reader = csv.reader(io.StringIO(csv_text), delimiter=_detect_delimiter(csv_text[:2048]))
        try:
            headers = [h.strip().lower() for h in next(reader)]
        except StopIteration:
            return [], 0

        candidates: list[dict[str, Any]] = []
        dropped = 0
        for line_num, values in enumerate(reader, start=2):
            if not any(v.strip() for v in values):
                continue
            row = dict(zip(headers, values))
            candidate = self._parse_row(row)
            if candidate is None:
                logger.debug("csv_row_dropped", line=line_num)
                dropped += 1
                continue
            candidates.append(candidate)

        return candidates, dropped

    def _parse_row(self, row: dict[str, str]) -> Optional[dict[str, Any]]:
        date_str = _first_value(row, DATE_COLUMNS)
        description = _first_value(row, DESCRIPTION_COLUMNS)
        if date_str is None or description is None:
            return None
        try:
            txn_date = parse_date(date_str)
        except ValueError:
            return None

        signed = _nonzero_amount(row.get("amount"))
        if signed is not None:
            amount = abs(signed)
            txn_type = TransactionType.EXPENSE if signed < 0 else TransactionType.INCOME
        else:
            debit = _nonzero_amount(row.get("debit"))
            credit = _nonzero_amount(row.get("credit"))
            if debit is not None:
                amount, txn_type = abs(debit), TransactionType.EXPENSE
            elif credit is not None:
                amount, txn_type = abs(credit), TransactionType.INCOME
            else:
                return None

        explicit_type = (row.get("type") or "").strip().lower()
        if explicit_type in (TransactionType.INCOME.value, TransactionType.EXPENSE.value):
            txn_type = TransactionType(explicit_type)

        return {
            "date": txn_date,
            "description": description,
            "amount": amount,
            "type": txn_type.value,
            "status": TransactionStatus.PENDING.value,
            "category_id": DEFAULT_CATEGORY_ID,
            "reconciled": False,
        }

    def auto_categorize(
        self, description: str, categories: Optional[dict[str, int]] = None
    ) -> int:
        """Pick a category ID for a description using keyword rules.

        Args:
            description: Transaction description
            categories: Optional name to ID map, loaded from the store if omitted

        Returns:
            Matching category ID, or the default category ID
        """
        if categories is None:
            categories = {c.name: c.id for c in self.db.list_categories()}

        for pattern, category_name in CATEGORY_RULES:
            if pattern.search(description) and category_name in categories:
                return categories[category_name]
        return DEFAULT_CATEGORY_ID

    def import_csv(self, csv_text: str, practice_id: Optional[int] = None) -> ImportResult:
        """Import transactions from CSV text.

        Args:
            csv_text: Raw CSV text
            practice_id: Practice to attach to every imported row

        Returns:
            ImportResult with imported and dropped counts

        Raises:
            NotFoundError: If the practice or the default category doesn't exist
        """
        if practice_id is not None and self.db.get_practice(practice_id) is None:
            raise NotFoundError(practice_not_found(practice_id))
        if self.db.get_category(DEFAULT_CATEGORY_ID) is None:
            raise NotFoundError(category_not_found(DEFAULT_CATEGORY_ID))

        candidates, dropped = self.parse_csv(csv_text)
        categories = {c.name: c.id for c in self.db.list_categories()}
        for candidate in candidates:
            candidate["category_id"] = self.auto_categorize(candidate["description"], categories)
            candidate["practice_id"] = practice_id

        ids = self.db.bulk_create_transactions(candidates) if candidates else []
        transactions = tuple(self.db.get_transaction(txn_id) for txn_id in ids)

        logger.info(
            "csv_imported", imported=len(ids), dropped=dropped, practice_id=practice_id
        )
        return ImportResult(imported=len(ids), dropped=dropped, transactions=transactions)

    def import_csv_file(self, csv_file_path: str, practice_id: Optional[int] = None) -> ImportResult:
        """Import transactions from a CSV file.

        Raises:
            FileNotFoundError: If CSV file doesn't exist
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            return self.import_csv(f.read(), practice_id=practice_id)

    def export_csv(
        self,
        practice_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> str:
        """Export transactions as CSV text, oldest first.

        The date range only applies when both bounds are given.
        """
        if start_date is not None and end_date is not None:
            transactions = self.db.list_transactions(
                start_date=start_date, end_date=end_date, practice_id=practice_id
            )
        else:
            transactions = self.db.list_transactions(practice_id=practice_id)

        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for txn in sorted(transactions, key=lambda t: (t.date, t.id)):
            writer.writerow(
                [
                    txn.date.isoformat(),
                    txn.description,
                    str(txn.amount),
                    txn.type.value,
                    txn.status.value,
                    txn.category_id,
                    txn.practice_id if txn.practice_id is not None else "",
                ]
            )
        return output.getvalue()
