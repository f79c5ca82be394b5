"""Generic SQLAlchemy database implementation."""

import json
from typing import Any, Optional
from datetime import date
from decimal import Decimal

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dentbooks.database.base import Database
from dentbooks.database.models import (
    Category,
    Collection,
    Practice,
    Production,
    Reconciliation,
    Setting,
    TaxEvent,
    Transaction,
    create_session_factory,
)
from dentbooks.database.mappers import (
    category_to_domain,
    collection_to_domain,
    practice_to_domain,
    production_to_domain,
    reconciliation_to_domain,
    setting_to_domain,
    tax_event_to_domain,
    transaction_to_domain,
)
from dentbooks.domain import entities as domain
from dentbooks.domain.errors import (
    NotFoundError,
    StorageError,
    practice_not_found,
    transaction_not_found,
)

logger = structlog.get_logger(__name__)


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def _commit(self, operation: str) -> None:
        """Commit the session, rolling back and logging on failure."""
        session = self._get_session()
        try:
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("store_commit_failed", operation=operation, error=str(e))
            raise StorageError(f"Database operation '{operation}' failed: {e}") from e

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is declared by create_session_factory
        pass

    # Category operations
    def create_category(self, name: str, type: str) -> int:
        """Create a category. Returns category ID."""
        session = self._get_session()
        category = Category(name=name, type=type)
        session.add(category)
        self._commit("create_category")
        return category.id

    def get_category(self, category_id: int) -> Optional[domain.Category]:
        """Get category by ID."""
        session = self._get_session()
        cat = session.get(Category, category_id)
        if cat is None:
            return None
        return category_to_domain(cat)

    def get_category_by_name(self, name: str) -> Optional[domain.Category]:
        """Get category by exact name."""
        session = self._get_session()
        cat = session.query(Category).filter(Category.name == name).first()
        if cat is None:
            return None
        return category_to_domain(cat)

    def list_categories(self, type: Optional[str] = None) -> list[domain.Category]:
        """List categories, optionally filtered by type."""
        session = self._get_session()
        query = session.query(Category)
        if type is not None:
            query = query.filter(Category.type == type)
        return [category_to_domain(cat) for cat in query.order_by(Category.id).all()]

    # Practice operations
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
        session = self._get_session()
        practice = Practice(
            name=name,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            tax_id=tax_id,
            is_active=True,
        )
        session.add(practice)
        self._commit("create_practice")
        return practice.id

    def get_practice(self, practice_id: int) -> Optional[domain.Practice]:
        """Get practice by ID."""
        session = self._get_session()
        practice = session.get(Practice, practice_id)
        if practice is None:
            return None
        return practice_to_domain(practice)

    def get_practice_by_name(self, name: str) -> Optional[domain.Practice]:
        """Get practice by exact name."""
        session = self._get_session()
        practice = session.query(Practice).filter(Practice.name == name).first()
        if practice is None:
            return None
        return practice_to_domain(practice)

    def list_practices(self, active_only: bool = False) -> list[domain.Practice]:
        """List practices, optionally only active ones."""
        session = self._get_session()
        query = session.query(Practice)
        if active_only:
            query = query.filter(Practice.is_active.is_(True))
        return [practice_to_domain(p) for p in query.order_by(Practice.name).all()]

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
        session = self._get_session()
        practice = session.get(Practice, practice_id)
        if practice is None:
            raise NotFoundError(practice_not_found(practice_id))

        changes = {
            "name": name,
            "address": address,
            "city": city,
            "state": state,
            "zip_code": zip_code,
            "tax_id": tax_id,
            "is_active": is_active,
        }
        for field_name, value in changes.items():
            if value is not None:
                setattr(practice, field_name, value)
        self._commit("update_practice")

    # Transaction operations
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
        session = self._get_session()
        transaction = Transaction(
            date=date,
            description=description,
            amount=amount,
            type=type,
            category_id=category_id,
            practice_id=practice_id,
            status=status,
            reconciled=reconciled,
            payment_method=payment_method,
            note=note,
        )
        session.add(transaction)
        self._commit("create_transaction")
        return transaction.id

    def bulk_create_transactions(self, rows: list[dict[str, Any]]) -> list[int]:
        """Insert many transactions in one commit. Returns their IDs in order."""
        session = self._get_session()
        transactions = [Transaction(**row) for row in rows]
        session.add_all(transactions)
        self._commit("bulk_create_transactions")
        return [txn.id for txn in transactions]

    def get_transaction(self, transaction_id: int) -> Optional[domain.Transaction]:
        """Get transaction by ID."""
        session = self._get_session()
        txn = session.get(Transaction, transaction_id)
        if txn is None:
            return None
        return transaction_to_domain(txn)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        practice_id: Optional[int] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        reconciled: Optional[bool] = None,
    ) -> list[domain.Transaction]:
        """List transactions with optional filters, newest first."""
        session = self._get_session()
        query = session.query(Transaction)

        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)
        if practice_id is not None:
            query = query.filter(Transaction.practice_id == practice_id)
        if type is not None:
            query = query.filter(Transaction.type == type)
        if status is not None:
            query = query.filter(Transaction.status == status)
        if category_id is not None:
            query = query.filter(Transaction.category_id == category_id)
        if reconciled is not None:
            query = query.filter(Transaction.reconciled.is_(reconciled))

        transactions = query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()
        return [transaction_to_domain(txn) for txn in transactions]

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
        session = self._get_session()
        transaction = session.get(Transaction, transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        changes = {
            "date": date,
            "description": description,
            "amount": amount,
            "type": type,
            "category_id": category_id,
            "practice_id": practice_id,
            "status": status,
            "reconciled": reconciled,
            "payment_method": payment_method,
            "note": note,
        }
        for field_name, value in changes.items():
            if value is not None:
                setattr(transaction, field_name, value)
        self._commit("update_transaction")

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        session = self._get_session()
        transaction = session.get(Transaction, transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        session.delete(transaction)
        self._commit("delete_transaction")

    # Production and collection operations
    def create_production(
        self,
        date: date,
        practice_id: int,
        amount: Decimal,
        patient_id: Optional[str] = None,
    ) -> int:
        """Create a production entry. Returns production ID."""
        session = self._get_session()
        production = Production(
            date=date, practice_id=practice_id, amount=amount, patient_id=patient_id
        )
        session.add(production)
        self._commit("create_production")
        return production.id

    def get_production(self, production_id: int) -> Optional[domain.Production]:
        """Get production entry by ID."""
        session = self._get_session()
        production = session.get(Production, production_id)
        if production is None:
            return None
        return production_to_domain(production)

    def list_productions(
        self,
        practice_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[domain.Production]:
        """List production entries with optional filters."""
        session = self._get_session()
        query = session.query(Production)
        if practice_id is not None:
            query = query.filter(Production.practice_id == practice_id)
        if start_date is not None:
            query = query.filter(Production.date >= start_date)
        if end_date is not None:
            query = query.filter(Production.date <= end_date)
        productions = query.order_by(Production.date, Production.id).all()
        return [production_to_domain(p) for p in productions]

    def create_collection(
        self,
        date: date,
        practice_id: int,
        amount: Decimal,
        production_id: Optional[int] = None,
        payment_method: Optional[str] = None,
    ) -> int:
        """Create a collection entry. Returns collection ID."""
        session = self._get_session()
        collection = Collection(
            date=date,
            practice_id=practice_id,
            amount=amount,
            production_id=production_id,
            payment_method=payment_method,
        )
        session.add(collection)
        self._commit("create_collection")
        return collection.id

    def list_collections(
        self,
        practice_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        production_id: Optional[int] = None,
    ) -> list[domain.Collection]:
        """List collection entries with optional filters."""
        session = self._get_session()
        query = session.query(Collection)
        if practice_id is not None:
            query = query.filter(Collection.practice_id == practice_id)
        if start_date is not None:
            query = query.filter(Collection.date >= start_date)
        if end_date is not None:
            query = query.filter(Collection.date <= end_date)
        if production_id is not None:
            query = query.filter(Collection.production_id == production_id)
        collections = query.order_by(Collection.date, Collection.id).all()
        return [collection_to_domain(c) for c in collections]

    # Reconciliation operations
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
        session = self._get_session()
        reconciliation = Reconciliation(
            practice_id=practice_id,
            month=month,
            year=year,
            bank_balance=bank_balance,
            book_balance=book_balance,
            difference=difference,
            status=status,
        )
        session.add(reconciliation)
        self._commit("create_reconciliation")
        return reconciliation.id

    def get_reconciliation(self, reconciliation_id: int) -> Optional[domain.Reconciliation]:
        """Get reconciliation record by ID."""
        session = self._get_session()
        reconciliation = session.get(Reconciliation, reconciliation_id)
        if reconciliation is None:
            return None
        return reconciliation_to_domain(reconciliation)

    def list_reconciliations(self, practice_id: Optional[int] = None) -> list[domain.Reconciliation]:
        """List reconciliations, newest period first."""
        session = self._get_session()
        query = session.query(Reconciliation)
        if practice_id is not None:
            query = query.filter(Reconciliation.practice_id == practice_id)
        records = query.order_by(
            Reconciliation.year.desc(), Reconciliation.month.desc(), Reconciliation.id.desc()
        ).all()
        return [reconciliation_to_domain(r) for r in records]

    # Tax event operations
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
        session = self._get_session()
        event = TaxEvent(
            year=year,
            type=type,
            quarter=quarter,
            due_date=due_date,
            amount=amount,
            paid_date=paid_date,
            note=note,
        )
        session.add(event)
        self._commit("create_tax_event")
        return event.id

    def list_tax_events(self, year: Optional[int] = None) -> list[domain.TaxEvent]:
        """List tax events, optionally for a single year."""
        session = self._get_session()
        query = session.query(TaxEvent)
        if year is not None:
            query = query.filter(TaxEvent.year == year)
        events = query.order_by(TaxEvent.year, TaxEvent.quarter, TaxEvent.id).all()
        return [tax_event_to_domain(e) for e in events]

    # Setting operations
    def get_setting(self, key: str) -> Optional[domain.Setting]:
        """Get a setting by key."""
        session = self._get_session()
        setting = session.get(Setting, key)
        if setting is None:
            return None
        return setting_to_domain(setting)

    def set_setting(self, key: str, value: Any) -> None:
        """Create or replace a setting."""
        session = self._get_session()
        session.merge(Setting(key=key, value=json.dumps(value)))
        self._commit("set_setting")

    def list_settings(self) -> list[domain.Setting]:
        """List all settings ordered by key."""
        session = self._get_session()
        settings = session.query(Setting).order_by(Setting.key).all()
        return [setting_to_domain(s) for s in settings]
