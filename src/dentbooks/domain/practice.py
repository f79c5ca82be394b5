"""Practice domain service."""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog

from dentbooks.database.base import Database
from dentbooks.domain.entities import Practice, TransactionType
from dentbooks.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_name,
    practice_not_found,
)

logger = structlog.get_logger(__name__)


class PracticeService:
    """Service for managing practices (the contractor's clients)."""

    def __init__(self, db: Database):
        """Initialize practice service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_practice(
        self,
        name: str,
        address: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        tax_id: Optional[str] = None,
    ) -> int:
        """Create a new, active practice.

        Args:
            name: Practice name (unique)
            address: Street address
            city: City
            state: State
            zip_code: ZIP code
            tax_id: Practice TIN

        Returns:
            Practice ID

        Raises:
            ValidationError: If name is empty
            ConflictError: If practice name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Practice name is required")
        if self.db.get_practice_by_name(name) is not None:
            raise ConflictError(duplicate_name("Practice", name))

        practice_id = self.db.create_practice(
            name=name,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            tax_id=tax_id,
        )
        logger.info("practice_created", practice_id=practice_id, name=name)
        return practice_id

    def get_practice(self, practice_id: int) -> Optional[Practice]:
        """Get practice by ID."""
        return self.db.get_practice(practice_id)

    def require_practice(self, practice_id: int) -> Practice:
        """Get practice by ID, raising NotFoundError if missing."""
        practice = self.db.get_practice(practice_id)
        if practice is None:
            raise NotFoundError(practice_not_found(practice_id))
        return practice

    def list_practices(self, active_only: bool = False) -> list[Practice]:
        """List practices.

        Args:
            active_only: If True, skip deactivated practices
        """
        return self.db.list_practices(active_only=active_only)

    def update_practice(
        self,
        practice_id: int,
        name: Optional[str] = None,
        address: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        tax_id: Optional[str] = None,
    ) -> None:
        """Update practice details.

        Raises:
            NotFoundError: If practice doesn't exist
            ConflictError: If the new name belongs to another practice
        """
        self.require_practice(practice_id)

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Practice name is required")
            existing = self.db.get_practice_by_name(name)
            if existing is not None and existing.id != practice_id:
                raise ConflictError(duplicate_name("Practice", name))

        self.db.update_practice(
            practice_id,
            name=name,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            tax_id=tax_id,
        )

    def deactivate_practice(self, practice_id: int) -> None:
        """Soft-delete a practice. Its transactions are left untouched."""
        self.require_practice(practice_id)
        self.db.update_practice(practice_id, is_active=False)
        logger.info("practice_deactivated", practice_id=practice_id)

    def get_stats(self, practice_id: int, start_date: date, end_date: date) -> dict[str, Any]:
        """Summarize a practice's transactions in a date range.

        Returns:
            Dict with total_income, total_expenses, net_profit, transaction_count
        """
        self.require_practice(practice_id)
        transactions = self.db.list_transactions(
            start_date=start_date, end_date=end_date, practice_id=practice_id
        )

        income = sum(
            (t.amount for t in transactions if t.type == TransactionType.INCOME), Decimal("0")
        )
        expenses = sum(
            (t.amount for t in transactions if t.type == TransactionType.EXPENSE), Decimal("0")
        )

        return {
            "total_income": income,
            "total_expenses": expenses,
            "net_profit": income - expenses,
            "transaction_count": len(transactions),
        }
