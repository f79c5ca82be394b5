"""Bank reconciliation domain service."""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

import structlog

from dentbooks.database.base import Database
from dentbooks.domain.entities import (
    BulkResult,
    MonthStatus,
    Reconciliation,
    ReconciliationStatus,
    Transaction,
)
from dentbooks.domain.errors import (
    DomainError,
    NotFoundError,
    StorageError,
    ValidationError,
    practice_not_found,
)
from dentbooks.utils.amount_parser import to_money
from dentbooks.utils.date_parser import month_range

logger = structlog.get_logger(__name__)

# Differences below one cent count as a match.
MATCH_TOLERANCE = Decimal("0.01")


def calculate_book_balance(transactions: Sequence[Transaction]) -> Decimal:
    """Signed sum of transactions: income adds, expense subtracts."""
    return sum((t.signed_amount for t in transactions), Decimal("0"))


class ReconciliationService:
    """Service for reconciling a month of transactions against a bank balance."""

    def __init__(self, db: Database):
        """Initialize reconciliation service.

        Args:
            db: Database instance
        """
        self.db = db

    def _month_bounds(self, month: int, year: int):
        try:
            return month_range(year, month)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def get_unreconciled(
        self, practice_id: Optional[int], month: int, year: int
    ) -> list[Transaction]:
        """Transactions in the calendar month that are not yet reconciled."""
        start, end = self._month_bounds(month, year)
        return self.db.list_transactions(
            start_date=start, end_date=end, practice_id=practice_id, reconciled=False
        )

    def get_month_status(self, practice_id: Optional[int], month: int, year: int) -> MonthStatus:
        """Count reconciled vs. unreconciled transactions for a month."""
        start, end = self._month_bounds(month, year)
        transactions = self.db.list_transactions(
            start_date=start, end_date=end, practice_id=practice_id
        )
        total = len(transactions)
        reconciled = sum(1 for t in transactions if t.reconciled)
        return MonthStatus(
            total=total,
            reconciled=reconciled,
            unreconciled=total - reconciled,
            percentage=(reconciled / total * 100) if total else 0.0,
        )

    def calculate_book_balance(self, transactions: Sequence[Transaction]) -> Decimal:
        return calculate_book_balance(transactions)

    def mark_reconciled(self, transaction_ids: Iterable[int]) -> BulkResult:
        """Flag transactions as reconciled, one independent update per ID.

        Returns:
            BulkResult; on partial failure the succeeded rows stay marked
        """
        succeeded: list[int] = []
        failed: list[int] = []
        for transaction_id in transaction_ids:
            try:
                self.db.update_transaction(transaction_id, reconciled=True)
                succeeded.append(transaction_id)
            except (DomainError, StorageError) as e:
                logger.warning(
                    "mark_reconciled_item_failed", transaction_id=transaction_id, error=str(e)
                )
                failed.append(transaction_id)

        if failed:
            logger.warning(
                "mark_reconciled_incomplete", succeeded=len(succeeded), failed=len(failed)
            )
        return BulkResult(succeeded=tuple(succeeded), failed=tuple(failed))

    def mark_unreconciled(self, transaction_id: int) -> None:
        """Clear the reconciled flag.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        self.db.update_transaction(transaction_id, reconciled=False)

    def create_reconciliation(
        self,
        practice_id: Optional[int],
        month: int,
        year: int,
        bank_balance: Decimal | int | float | str,
    ) -> Reconciliation:
        """Record a reconciliation of the month's open transactions.

        The book balance is the signed sum of the month's unreconciled
        transactions. The stored difference is ``bank - book`` and the
        record is ``matched`` when it is under one cent.

        Raises:
            NotFoundError: If the practice doesn't exist
            ValidationError: If month is out of range
        """
        if practice_id is not None and self.db.get_practice(practice_id) is None:
            raise NotFoundError(practice_not_found(practice_id))

        bank = to_money(bank_balance)
        book = to_money(calculate_book_balance(self.get_unreconciled(practice_id, month, year)))
        difference = bank - book
        status = (
            ReconciliationStatus.MATCHED
            if abs(difference) < MATCH_TOLERANCE
            else ReconciliationStatus.DISCREPANCY
        )

        reconciliation_id = self.db.create_reconciliation(
            practice_id=practice_id,
            month=month,
            year=year,
            bank_balance=bank,
            book_balance=book,
            difference=difference,
            status=status.value,
        )
        logger.info(
            "reconciliation_recorded",
            reconciliation_id=reconciliation_id,
            practice_id=practice_id,
            period=f"{year}-{month:02d}",
            status=status.value,
            difference=str(difference),
        )
        return self.db.get_reconciliation(reconciliation_id)

    def get_history(self, practice_id: Optional[int] = None) -> list[Reconciliation]:
        """Reconciliation records, newest period first."""
        return self.db.list_reconciliations(practice_id=practice_id)
