"""Production and collections domain service."""

from collections import defaultdict
from datetime import date as date_type
from decimal import Decimal
from typing import Any, Optional

import structlog

from dentbooks.database.base import Database
from dentbooks.domain.entities import AgingReport, Production
from dentbooks.domain.errors import (
    NotFoundError,
    ValidationError,
    practice_mismatch,
    practice_not_found,
    production_not_found,
)
from dentbooks.domain.transaction import coerce_date, coerce_positive_amount

logger = structlog.get_logger(__name__)

UNKNOWN_METHOD = "Unknown"


class ProductionService:
    """Service for production (billed) and collection (received) tracking."""

    def __init__(self, db: Database):
        """Initialize production service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_practice(self, practice_id: int) -> None:
        if self.db.get_practice(practice_id) is None:
            raise NotFoundError(practice_not_found(practice_id))

    def create_production(
        self,
        date: date_type | str,
        practice_id: int,
        amount: Decimal | int | float | str,
        patient_id: Optional[str] = None,
    ) -> int:
        """Record billed production.

        Returns:
            Production ID

        Raises:
            ValidationError: If date or amount is invalid
            NotFoundError: If the practice doesn't exist
        """
        production_date = coerce_date(date)
        production_amount = coerce_positive_amount(amount)
        self._check_practice(practice_id)

        return self.db.create_production(
            date=production_date,
            practice_id=practice_id,
            amount=production_amount,
            patient_id=patient_id,
        )

    def get_production(self, production_id: int) -> Optional[Production]:
        """Get production entry by ID."""
        return self.db.get_production(production_id)

    def create_collection(
        self,
        date: date_type | str,
        amount: Decimal | int | float | str,
        production_id: Optional[int] = None,
        practice_id: Optional[int] = None,
        payment_method: Optional[str] = None,
    ) -> int:
        """Record cash received, optionally against a production entry.

        The practice defaults to the linked production's practice. Collecting
        more than the production's amount is allowed but logged.

        Returns:
            Collection ID

        Raises:
            ValidationError: If date or amount is invalid, no practice can be
                determined, or the practice differs from the production's
            NotFoundError: If the production or practice doesn't exist
        """
        collection_date = coerce_date(date)
        collection_amount = coerce_positive_amount(amount)

        production = None
        if production_id is not None:
            production = self.db.get_production(production_id)
            if production is None:
                raise NotFoundError(production_not_found(production_id))
            if practice_id is None:
                practice_id = production.practice_id
            elif practice_id != production.practice_id:
                raise ValidationError(
                    practice_mismatch(production_id, production.practice_id, practice_id)
                )

        if practice_id is None:
            raise ValidationError("A practice is required for collections without a production")
        self._check_practice(practice_id)

        if production is not None:
            collected = sum(
                (c.amount for c in self.db.list_collections(production_id=production_id)),
                Decimal("0"),
            )
            if collected + collection_amount > production.amount:
                logger.warning(
                    "over_collection",
                    production_id=production_id,
                    production_amount=str(production.amount),
                    collected=str(collected + collection_amount),
                )

        return self.db.create_collection(
            date=collection_date,
            practice_id=practice_id,
            amount=collection_amount,
            production_id=production_id,
            payment_method=payment_method,
        )

    def get_summary(
        self,
        practice_id: Optional[int],
        start_date: date_type,
        end_date: date_type,
    ) -> dict[str, Any]:
        """Compare production with collections over an inclusive date range.

        Returns:
            Dict with production, collections, collection_percentage and
            outstanding_ar
        """
        productions = self.db.list_productions(
            practice_id=practice_id, start_date=start_date, end_date=end_date
        )
        collections = self.db.list_collections(
            practice_id=practice_id, start_date=start_date, end_date=end_date
        )

        total_production = sum((p.amount for p in productions), Decimal("0"))
        total_collections = sum((c.amount for c in collections), Decimal("0"))

        return {
            "production": total_production,
            "collections": total_collections,
            "collection_percentage": (
                float(total_collections / total_production * 100) if total_production > 0 else 0.0
            ),
            "outstanding_ar": total_production - total_collections,
        }

    def get_aging(
        self,
        practice_id: Optional[int] = None,
        as_of: Optional[date_type] = None,
    ) -> AgingReport:
        """Bucket open production balances by age.

        A production's open balance is its amount minus its linked
        collections. Only positive balances are bucketed, by days since the
        production date: up to 30, 31-60, 61-90 and over 90.
        """
        as_of = as_of or date_type.today()
        collected: dict[int, Decimal] = defaultdict(Decimal)
        for collection in self.db.list_collections():
            if collection.production_id is not None:
                collected[collection.production_id] += collection.amount

        buckets = {
            "current": Decimal("0"),
            "days_31_60": Decimal("0"),
            "days_61_90": Decimal("0"),
            "days_90_plus": Decimal("0"),
        }
        for production in self.db.list_productions(practice_id=practice_id):
            balance = production.amount - collected[production.id]
            if balance <= 0:
                continue

            days = (as_of - production.date).days
            if days <= 30:
                buckets["current"] += balance
            elif days <= 60:
                buckets["days_31_60"] += balance
            elif days <= 90:
                buckets["days_61_90"] += balance
            else:
                buckets["days_90_plus"] += balance

        return AgingReport(**buckets)

    def get_collections_by_method(
        self,
        practice_id: Optional[int],
        start_date: date_type,
        end_date: date_type,
    ) -> dict[str, Decimal]:
        """Total collections per payment method."""
        breakdown: dict[str, Decimal] = defaultdict(Decimal)
        for collection in self.db.list_collections(
            practice_id=practice_id, start_date=start_date, end_date=end_date
        ):
            breakdown[collection.payment_method or UNKNOWN_METHOD] += collection.amount
        return dict(breakdown)

    def get_collection_velocity(self, practice_id: Optional[int] = None) -> float:
        """Average days from production to linked collection.

        Collections dated before their production are left out.
        """
        productions = {p.id: p for p in self.db.list_productions(practice_id=practice_id)}

        lags = []
        for collection in self.db.list_collections():
            production = productions.get(collection.production_id)
            if production is None:
                continue
            days = (collection.date - production.date).days
            if days >= 0:
                lags.append(days)

        return sum(lags) / len(lags) if lags else 0.0
