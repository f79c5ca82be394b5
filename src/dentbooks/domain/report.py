"""Profit & loss and KPI reporting service."""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from dentbooks.database.base import Database
from dentbooks.domain.entities import TransactionType
from dentbooks.domain.errors import ValidationError
from dentbooks.domain.tax_rates import (
    COMPENSATION_MID,
    FEDERAL_RATE,
    LAB_FEE_BENCHMARK,
    SELF_EMPLOYMENT_RATE,
)
from dentbooks.utils.date_parser import quarter_range, year_range

LAB_FEES_CATEGORY = "Lab Fees"
SUPPLIES_CATEGORY = "Dental Supplies"


def _percentage(part: Decimal, whole: Decimal) -> float:
    return float(part / whole * 100) if whole > 0 else 0.0


class ReportService:
    """Service for P&L summaries and dental practice KPIs."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_pl_summary(
        self,
        start_date: date,
        end_date: date,
        practice_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """Profit & loss over an inclusive date range.

        Args:
            start_date: First day included
            end_date: Last day included
            practice_id: Optional practice filter

        Returns:
            Dict with income, expenses, net_profit and overhead_ratio
            (expenses as a percentage of income, 0 with no income)
        """
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date")

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
            "income": income,
            "expenses": expenses,
            "net_profit": income - expenses,
            "overhead_ratio": _percentage(expenses, income),
        }

    def get_dental_kpis(self, year: int, practice_id: Optional[int] = None) -> dict[str, Any]:
        """Lab fee and supply spend as a share of the year's income.

        Lab fees are healthy at or below 10% of income.
        """
        start, end = year_range(year)
        transactions = self.db.list_transactions(
            start_date=start, end_date=end, practice_id=practice_id
        )
        names = {c.id: c.name for c in self.db.list_categories()}

        def category_total(name: str) -> Decimal:
            return sum(
                (t.amount for t in transactions if names.get(t.category_id) == name),
                Decimal("0"),
            )

        income = sum(
            (t.amount for t in transactions if t.type == TransactionType.INCOME), Decimal("0")
        )
        lab_fees = category_total(LAB_FEES_CATEGORY)
        supplies = category_total(SUPPLIES_CATEGORY)

        return {
            "income": income,
            "lab_fees": lab_fees,
            "supplies": supplies,
            "lab_fee_percentage": _percentage(lab_fees, income),
            "supply_percentage": _percentage(supplies, income),
            "is_lab_healthy": income > 0 and lab_fees / income <= LAB_FEE_BENCHMARK,
        }

    def get_tax_projection(
        self, year: int, quarter: int, practice_id: Optional[int] = None
    ) -> dict[str, Any]:
        """Quarterly voucher estimate: 25% of a positive quarterly net."""
        try:
            start, end = quarter_range(year, quarter)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        net = self.get_pl_summary(start, end, practice_id)["net_profit"]
        return {
            "year": year,
            "quarter": quarter,
            "projected_net": net,
            "estimated_voucher_amount": net * FEDERAL_RATE if net > 0 else Decimal("0"),
        }

    def get_scorp_metrics(self, year: int, practice_id: Optional[int] = None) -> dict[str, Any]:
        """Dashboard salary/distribution split for the year.

        Assumes half of net profit is paid as salary; the rest is
        distributed free of self-employment tax.
        """
        start, end = year_range(year)
        net = self.get_pl_summary(start, end, practice_id)["net_profit"]
        salary = net * COMPENSATION_MID

        return {
            "net_profit": net,
            "recommended_salary": salary,
            "estimated_distributions": net - salary,
            "tax_savings": net * SELF_EMPLOYMENT_RATE - salary * SELF_EMPLOYMENT_RATE,
        }
