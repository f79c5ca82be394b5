"""Transaction domain service."""

from datetime import date as date_type
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

import structlog

from dentbooks.database.base import Database
from dentbooks.domain.category import coerce_type
from dentbooks.domain.entities import (
    BulkResult,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from dentbooks.domain.errors import (
    DomainError,
    NotFoundError,
    StorageError,
    ValidationError,
    category_not_found,
    practice_not_found,
    transaction_not_found,
)
from dentbooks.utils.amount_parser import to_money
from dentbooks.utils.date_parser import parse_date

logger = structlog.get_logger(__name__)

SORT_FIELDS = ("date", "amount", "description", "type", "status")
MIN_DESCRIPTION_LENGTH = 2


def coerce_status(value: str | TransactionStatus) -> TransactionStatus:
    """Convert a string to TransactionStatus, raising ValidationError if invalid."""
    try:
        return TransactionStatus(str(getattr(value, "value", value)).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid status '{value}'. Must be one of: pending, cleared, flagged"
        )


def coerce_date(value: date_type | str) -> date_type:
    """Accept a date or a parseable date string."""
    if isinstance(value, date_type):
        return value
    try:
        return parse_date(value)
    except ValueError:
        raise ValidationError(f"Invalid date format: '{value}'")


def coerce_positive_amount(value: Decimal | int | float | str) -> Decimal:
    """Accept an amount that is positive once rounded to cents.

    Direction is carried by the transaction type.
    """
    try:
        amount = to_money(Decimal(str(value)))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: '{value}'")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    return amount


def validate_description(description: Optional[str]) -> str:
    description = (description or "").strip()
    if len(description) < MIN_DESCRIPTION_LENGTH:
        raise ValidationError("Description is too short")
    return description


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_category(self, category_id: int) -> None:
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def _check_practice(self, practice_id: int) -> None:
        if self.db.get_practice(practice_id) is None:
            raise NotFoundError(practice_not_found(practice_id))

    def create_transaction(
        self,
        date: date_type | str,
        description: str,
        amount: Decimal | int | float | str,
        type: str | TransactionType,
        category_id: int,
        practice_id: Optional[int] = None,
        status: str | TransactionStatus = TransactionStatus.PENDING,
        payment_method: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        """Validate and create a transaction.

        Args:
            date: Transaction date (date or parseable string)
            description: At least two characters
            amount: Positive amount
            type: income or expense
            category_id: Existing category ID
            practice_id: Optional existing practice ID
            status: pending, cleared or flagged
            payment_method: Optional payment method (check, ach, ...)
            note: Optional free-text note

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the transaction shape is invalid
            NotFoundError: If the category or practice doesn't exist
        """
        txn_date = coerce_date(date)
        description = validate_description(description)
        txn_amount = coerce_positive_amount(amount)
        txn_type = coerce_type(type)
        txn_status = coerce_status(status)

        self._check_category(category_id)
        if practice_id is not None:
            self._check_practice(practice_id)

        return self.db.create_transaction(
            date=txn_date,
            description=description,
            amount=txn_amount,
            type=txn_type.value,
            category_id=category_id,
            practice_id=practice_id,
            status=txn_status.value,
            reconciled=False,
            payment_method=payment_method,
            note=note,
        )

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date_type] = None,
        end_date: Optional[date_type] = None,
        practice_id: Optional[int] = None,
        type: Optional[str | TransactionType] = None,
        status: Optional[str | TransactionStatus] = None,
        category_id: Optional[int] = None,
        reconciled: Optional[bool] = None,
        search: Optional[str] = None,
        sort_field: str = "date",
        sort_direction: str = "desc",
    ) -> list[Transaction]:
        """List transactions with filters, search and sorting.

        Args:
            start_date: Inclusive start date
            end_date: Inclusive end date
            practice_id: Practice filter
            type: income or expense
            status: pending, cleared or flagged
            category_id: Category filter
            reconciled: Reconciled flag filter
            search: Case-insensitive description match, or substring of the amount
            sort_field: One of date, amount, description, type, status
            sort_direction: asc or desc

        Returns:
            List of transaction entities
        """
        if sort_field not in SORT_FIELDS:
            raise ValidationError(
                f"Invalid sort field '{sort_field}'. Must be one of: {', '.join(SORT_FIELDS)}"
            )
        if sort_direction not in ("asc", "desc"):
            raise ValidationError("Sort direction must be 'asc' or 'desc'")

        transactions = self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            practice_id=practice_id,
            type=coerce_type(type).value if type is not None else None,
            status=coerce_status(status).value if status is not None else None,
            category_id=category_id,
            reconciled=reconciled,
        )

        if search:
            term = search.lower()
            transactions = [
                t for t in transactions
                if term in t.description.lower() or term in str(t.amount)
            ]

        def sort_key(txn: Transaction):
            value = getattr(txn, sort_field)
            return getattr(value, "value", value)

        return sorted(transactions, key=sort_key, reverse=sort_direction == "desc")

    def list_by_category(self, category_id: int) -> list[Transaction]:
        """List all transactions in a category (e.g., all Lab Fees)."""
        return self.db.list_transactions(category_id=category_id)

    def update_transaction(
        self,
        transaction_id: int,
        date: Optional[date_type | str] = None,
        description: Optional[str] = None,
        amount: Optional[Decimal | int | float | str] = None,
        type: Optional[str | TransactionType] = None,
        category_id: Optional[int] = None,
        practice_id: Optional[int] = None,
        status: Optional[str | TransactionStatus] = None,
        payment_method: Optional[str] = None,
        note: Optional[str] = None,
    ) -> None:
        """Update the provided transaction fields (inline edit).

        Raises:
            NotFoundError: If transaction, category or practice doesn't exist
            ValidationError: If a provided field is invalid
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        if category_id is not None:
            self._check_category(category_id)
        if practice_id is not None:
            self._check_practice(practice_id)

        self.db.update_transaction(
            transaction_id,
            date=coerce_date(date) if date is not None else None,
            description=validate_description(description) if description is not None else None,
            amount=coerce_positive_amount(amount) if amount is not None else None,
            type=coerce_type(type).value if type is not None else None,
            category_id=category_id,
            practice_id=practice_id,
            status=coerce_status(status).value if status is not None else None,
            payment_method=payment_method,
            note=note,
        )

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        self.db.delete_transaction(transaction_id)

    def bulk_delete(self, transaction_ids: Iterable[int]) -> BulkResult:
        """Delete several transactions as independent operations.

        There is no rollback: a failure for one ID leaves the others deleted.

        Returns:
            BulkResult with succeeded and failed IDs
        """
        succeeded: list[int] = []
        failed: list[int] = []
        for transaction_id in transaction_ids:
            try:
                self.db.delete_transaction(transaction_id)
                succeeded.append(transaction_id)
            except (DomainError, StorageError) as e:
                logger.warning(
                    "bulk_delete_item_failed", transaction_id=transaction_id, error=str(e)
                )
                failed.append(transaction_id)

        if failed:
            logger.warning(
                "bulk_delete_incomplete", succeeded=len(succeeded), failed=len(failed)
            )
        return BulkResult(succeeded=tuple(succeeded), failed=tuple(failed))
