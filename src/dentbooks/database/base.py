"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from dentbooks.domain.entities import (
    Category,
    Collection,
    Practice,
    Production,
    Reconciliation,
    Setting,
    TaxEvent,
    Transaction,
)

# Bump when the declared schema changes; recorded in the settings table.
SCHEMA_VERSION = 2


class Database(ABC):
    """Abstract database interface for dentbooks."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, type: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name."""
        pass

    @abstractmethod
    def list_categories(self, type: Optional[str] = None) -> list[Category]:
        """List categories, optionally filtered by type."""
        pass

    # Practice operations
    @abstractmethod
    def create_practice(
        self,
        name: str,
        address: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        tax_id: Optional[str] = None,
    ) -> int:
        """Create a practice. Returns practice ID."""
        pass

    @abstractmethod
    def get_practice(self, practice_id: int) -> Optional[Practice]:
        """Get practice by ID."""
        pass

    @abstractmethod
    def get_practice_by_name(self, name: str) -> Optional[Practice]:
        """Get practice by exact name."""
        pass

    @abstractmethod
    def list_practices(self, active_only: bool = False) -> list[Practice]:
        """List practices, optionally only active ones."""
        pass

    @abstractmethod
    def update_practice(
        self,
        practice_id: int,
        name: Optional[str] = None,
        address: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        tax_id: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update practice fields that are not None."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        date: date,
        description: str,
        amount: Decimal,
        type: str,
        category_id: int,
        practice_id: Optional[int] = None,
        status: str = "pending",
        reconciled: bool = False,
        payment_method: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def bulk_create_transactions(self, rows: list[dict[str, Any]]) -> list[int]:
        """Insert many transactions in one commit. Returns their IDs in order."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        practice_id: Optional[int] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        reconciled: Optional[bool] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first.

        Args:
            start_date: Inclusive start date
            end_date: Inclusive end date
            practice_id: Only transactions for this practice
            type: income or expense
            status: pending, cleared or flagged
            category_id: Only transactions in this category
            reconciled: Only reconciled (True) or unreconciled (False)
        """
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        date: Optional[date] = None,
        description: Optional[str] = None,
        amount: Optional[Decimal] = None,
        type: Optional[str] = None,
        category_id: Optional[int] = None,
        practice_id: Optional[int] = None,
        status: Optional[str] = None,
        reconciled: Optional[bool] = None,
        payment_method: Optional[str] = None,
        note: Optional[str] = None,
    ) -> None:
        """Update transaction fields that are not None."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    # Production and collection operations
    @abstractmethod
    def create_production(
        self,
        date: date,
        practice_id: int,
        amount: Decimal,
        patient_id: Optional[str] = None,
    ) -> int:
        """Create a production entry. Returns production ID."""
        pass

    @abstractmethod
    def get_production(self, production_id: int) -> Optional[Production]:
        """Get production entry by ID."""
        pass

    @abstractmethod
    def list_productions(
        self,
        practice_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Production]:
        """List production entries with optional filters."""
        pass

    @abstractmethod
    def create_collection(
        self,
        date: date,
        practice_id: int,
        amount: Decimal,
        production_id: Optional[int] = None,
        payment_method: Optional[str] = None,
    ) -> int:
        """Create a collection entry. Returns collection ID."""
        pass

    @abstractmethod
    def list_collections(
        self,
        practice_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        production_id: Optional[int] = None,
    ) -> list[Collection]:
        """List collection entries with optional filters."""
        pass

    # Reconciliation operations
    @abstractmethod
    def create_reconciliation(
        self,
        practice_id: Optional[int],
        month: int,
        year: int,
        bank_balance: Decimal,
        book_balance: Decimal,
        difference: Decimal,
        status: str,
    ) -> int:
        """Append a reconciliation record. Returns reconciliation ID."""
        pass

    @abstractmethod
    def get_reconciliation(self, reconciliation_id: int) -> Optional[Reconciliation]:
        """Get reconciliation record by ID."""
        pass

    @abstractmethod
    def list_reconciliations(self, practice_id: Optional[int] = None) -> list[Reconciliation]:
        """List reconciliations, newest period first."""
        pass

    # Tax event operations
    @abstractmethod
    def create_tax_event(
        self,
        year: int,
        type: str,
        quarter: Optional[int] = None,
        due_date: Optional[date] = None,
        amount: Optional[Decimal] = None,
        paid_date: Optional[date] = None,
        note: Optional[str] = None,
    ) -> int:
        """Create a tax event. Returns tax event ID."""
        pass

    @abstractmethod
    def list_tax_events(self, year: Optional[int] = None) -> list[TaxEvent]:
        """List tax events, optionally for a single year."""
        pass

    # Setting operations
    @abstractmethod
    def get_setting(self, key: str) -> Optional[Setting]:
        """Get a setting by key."""
        pass

    @abstractmethod
    def set_setting(self, key: str, value: Any) -> None:
        """Create or replace a setting."""
        pass

    @abstractmethod
    def list_settings(self) -> list[Setting]:
        """List all settings ordered by key."""
        pass
