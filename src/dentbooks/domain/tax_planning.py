"""Tax planning estimators for S-Corp dental contractors.

Every figure here is net profit multiplied by a flat rate from
``dentbooks.domain.tax_rates``.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog

from dentbooks.database.base import Database
from dentbooks.domain.entities import TaxEvent
from dentbooks.domain.errors import ValidationError
from dentbooks.domain.report import ReportService
from dentbooks.domain.tax_rates import (
    COMPENSATION_HIGH,
    COMPENSATION_LOW,
    COMPENSATION_MID,
    FEDERAL_RATE,
    QBI_MARGINAL_RATE,
    QBI_RATE,
    QUARTER_DUE_DATES,
    SAFE_HARBOR_HIGH_INCOME,
    SAFE_HARBOR_STANDARD,
    SAFE_HARBOR_THRESHOLD,
    SE_COMPENSATION_FRACTION,
    SELF_EMPLOYMENT_RATE,
    STATE_RATE,
)
from dentbooks.domain.transaction import coerce_positive_amount
from dentbooks.utils.date_parser import quarter_range, year_range

logger = structlog.get_logger(__name__)

ESTIMATED_TAX = "Estimated Tax"


def _check_quarter(quarter: int) -> None:
    if quarter not in QUARTER_DUE_DATES:
        raise ValidationError(f"Quarter must be between 1 and 4, got {quarter}")


def get_tax_due_date(year: int, quarter: int) -> date:
    """Return the 1040-ES due date for a quarter's estimated payment."""
    _check_quarter(quarter)
    month, day, year_offset = QUARTER_DUE_DATES[quarter]
    return date(year + year_offset, month, day)


class TaxPlanningService:
    """Service for quarterly estimates, safe harbor, compensation and QBI."""

    def __init__(self, db: Database):
        """Initialize tax planning service.

        Args:
            db: Database instance
        """
        self.db = db
        self.report_service = ReportService(db)

    def _annual_net(self, year: int, practice_id: Optional[int] = None) -> Decimal:
        start, end = year_range(year)
        return self.report_service.get_pl_summary(start, end, practice_id)["net_profit"]

    def get_quarterly_estimate(
        self, year: int, quarter: int, practice_id: Optional[int] = None
    ) -> dict[str, Any]:
        """Estimate federal, self-employment and state tax for a quarter.

        Args:
            year: Tax year
            quarter: 1-4
            practice_id: Optional practice filter

        Returns:
            Dict with net_profit, estimated_federal, estimated_se,
            estimated_state, total_estimated and due_date
        """
        _check_quarter(quarter)
        start, end = quarter_range(year, quarter)
        net = self.report_service.get_pl_summary(start, end, practice_id)["net_profit"]

        federal = net * FEDERAL_RATE
        se = net * SE_COMPENSATION_FRACTION * SELF_EMPLOYMENT_RATE
        state = net * STATE_RATE

        return {
            "year": year,
            "quarter": quarter,
            "net_profit": net,
            "estimated_federal": federal,
            "estimated_se": se,
            "estimated_state": state,
            "total_estimated": federal + se + state,
            "due_date": get_tax_due_date(year, quarter),
        }

    def get_safe_harbor(
        self,
        current_year: int,
        prior_year_tax: Optional[Decimal] = None,
    ) -> dict[str, Any]:
        """Minimum estimated payments that avoid an underpayment penalty.

        Without an explicit prior-year tax, it is estimated as 25% of the
        prior year's recorded net profit. Prior-year tax over $150,000 uses
        the 110% multiplier.
        """
        if prior_year_tax is None:
            prior_year_tax = self._annual_net(current_year - 1) * FEDERAL_RATE
        prior_year_tax = Decimal(str(prior_year_tax))

        multiplier = (
            SAFE_HARBOR_HIGH_INCOME if prior_year_tax > SAFE_HARBOR_THRESHOLD else SAFE_HARBOR_STANDARD
        )
        total = prior_year_tax * multiplier

        return {
            "prior_year_tax": prior_year_tax,
            "safe_harbor_multiplier": multiplier,
            "total_safe_harbor": total,
            "quarterly_payment": total / 4,
        }

    def calculate_reasonable_compensation(
        self, year: int, practice_id: Optional[int] = None
    ) -> dict[str, Any]:
        """Suggest an officer salary range of 40/50/60% of net profit."""
        net = self._annual_net(year, practice_id)
        mid = net * COMPENSATION_MID

        return {
            "net_profit": net,
            "low": net * COMPENSATION_LOW,
            "mid": mid,
            "high": net * COMPENSATION_HIGH,
            "estimated_savings": net * SELF_EMPLOYMENT_RATE - mid * SELF_EMPLOYMENT_RATE,
        }

    def calculate_qbi_deduction(
        self, year: int, practice_id: Optional[int] = None
    ) -> dict[str, Any]:
        """Flat 20% qualified business income deduction."""
        net = self._annual_net(year, practice_id)
        deduction = net * QBI_RATE

        return {
            "qualified_business_income": net,
            "qbi_deduction": deduction,
            "tax_savings": deduction * QBI_MARGINAL_RATE,
        }

    def get_tax_calendar(self, year: int) -> list[dict[str, Any]]:
        """Federal filing and payment dates for a tax year."""
        calendar = [
            {
                "quarter": quarter,
                "type": ESTIMATED_TAX,
                "due_date": get_tax_due_date(year, quarter),
                "form": "1040-ES",
            }
            for quarter in sorted(QUARTER_DUE_DATES)
        ]
        calendar.append(
            {"quarter": None, "type": "S-Corp Tax Return", "due_date": date(year + 1, 3, 15), "form": "1120-S"}
        )
        calendar.append(
            {"quarter": None, "type": "Personal Tax Return", "due_date": date(year + 1, 4, 15), "form": "1040"}
        )
        return calendar

    def record_tax_payment(
        self,
        year: int,
        type: str = ESTIMATED_TAX,
        quarter: Optional[int] = None,
        amount: Optional[Decimal | int | float | str] = None,
        paid_date: Optional[date] = None,
        due_date: Optional[date] = None,
        note: Optional[str] = None,
    ) -> int:
        """Record a tax payment or obligation.

        The due date defaults to the quarter's voucher date.

        Returns:
            Tax event ID
        """
        if quarter is not None:
            _check_quarter(quarter)
            if due_date is None:
                due_date = get_tax_due_date(year, quarter)
        if amount is not None:
            amount = coerce_positive_amount(amount)

        event_id = self.db.create_tax_event(
            year=year,
            type=type,
            quarter=quarter,
            due_date=due_date,
            amount=amount,
            paid_date=paid_date,
            note=note,
        )
        logger.info("tax_event_recorded", tax_event_id=event_id, year=year, quarter=quarter)
        return event_id

    def get_tax_history(self, year: int) -> list[TaxEvent]:
        """Tax events recorded for a year."""
        return self.db.list_tax_events(year=year)
