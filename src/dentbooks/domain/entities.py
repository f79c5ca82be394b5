"""Domain model entities for dentbooks.

These are pure data classes representing business concepts, independent of
database schema. Services and commands only ever see these; ORM rows stay
inside the database package.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class TransactionType(str, Enum):
    """Direction of a transaction. Amounts are always positive."""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, Enum):
    """Workflow status of a transaction."""

    PENDING = "pending"
    CLEARED = "cleared"
    FLAGGED = "flagged"


class ReconciliationStatus(str, Enum):
    """Outcome of a reconciliation pass."""

    MATCHED = "matched"
    DISCREPANCY = "discrepancy"


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    name: str
    type: TransactionType
    created_at: datetime


@dataclass(frozen=True)
class Practice:
    """Dental practice (client) domain entity."""

    id: int
    name: str
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    tax_id: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category_id: int
    practice_id: Optional[int]
    status: TransactionStatus
    reconciled: bool
    payment_method: Optional[str]
    note: Optional[str]
    created_at: datetime

    @property
    def signed_amount(self) -> Decimal:
        """Amount with income positive and expense negative."""
        return self.amount if self.type == TransactionType.INCOME else -self.amount


@dataclass(frozen=True)
class Production:
    """Billed (not necessarily collected) revenue."""

    id: int
    date: date
    practice_id: int
    patient_id: Optional[str]
    amount: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Collection:
    """Cash received, optionally against a production entry."""

    id: int
    date: date
    practice_id: int
    production_id: Optional[int]
    amount: Decimal
    payment_method: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Reconciliation:
    """A completed reconciliation pass for a month."""

    id: int
    practice_id: Optional[int]
    month: int
    year: int
    bank_balance: Decimal
    book_balance: Decimal
    difference: Decimal
    status: ReconciliationStatus
    created_at: datetime


@dataclass(frozen=True)
class TaxEvent:
    """Recorded tax payment or obligation."""

    id: int
    quarter: Optional[int]
    year: int
    type: str
    due_date: Optional[date]
    amount: Optional[Decimal]
    paid_date: Optional[date]
    note: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Setting:
    """Key-value preference stored alongside the books."""

    key: str
    value: Any


@dataclass(frozen=True)
class BulkResult:
    """Outcome of a bulk operation made of independent per-id updates."""

    succeeded: tuple[int, ...] = ()
    failed: tuple[int, ...] = ()

    @property
    def is_partial(self) -> bool:
        return bool(self.succeeded) and bool(self.failed)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a CSV import."""

    imported: int
    dropped: int
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AgingReport:
    """Outstanding production balances bucketed by days since production."""

    current: Decimal = Decimal("0")
    days_31_60: Decimal = Decimal("0")
    days_61_90: Decimal = Decimal("0")
    days_90_plus: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.current + self.days_31_60 + self.days_61_90 + self.days_90_plus


@dataclass(frozen=True)
class MonthStatus:
    """Reconciliation progress for a calendar month."""

    total: int
    reconciled: int
    unreconciled: int
    percentage: float
