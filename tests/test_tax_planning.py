"""Tests for tax planning estimators."""

from datetime import date
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from dentbooks.cli.main import cli
from dentbooks.domain.errors import ValidationError
from dentbooks.domain.tax_planning import ESTIMATED_TAX, get_tax_due_date


@pytest.fixture
def add_txn(transaction_service, sample_categories):
    def _add(when, amount, txn_type, category="Clinical Income", practice_id=None):
        return transaction_service.create_transaction(
            date=when,
            description="Tax planning entry",
            amount=amount,
            type=txn_type,
            category_id=sample_categories[category],
            practice_id=practice_id,
        )

    return _add


@pytest.mark.parametrize(
    "quarter, expected",
    [
        (1, date(2024, 4, 15)),
        (2, date(2024, 6, 15)),
        (3, date(2024, 9, 15)),
        (4, date(2025, 1, 15)),
    ],
)
def test_tax_due_dates(quarter, expected):
    assert get_tax_due_date(2024, quarter) == expected


def test_tax_due_date_invalid_quarter():
    with pytest.raises(ValidationError):
        get_tax_due_date(2024, 0)


def test_quarterly_estimate(tax_service, add_txn):
    add_txn(date(2024, 4, 1), "20000", "income")
    add_txn(date(2024, 6, 30), "8000", "expense", "Rent")
    add_txn(date(2024, 7, 1), "40000", "income")

    estimate = tax_service.get_quarterly_estimate(2024, 2)

    assert estimate["net_profit"] == Decimal("12000")
    assert estimate["estimated_federal"] == Decimal("3000")
    assert estimate["estimated_se"] == Decimal("734.4")
    assert estimate["estimated_state"] == Decimal("600")
    assert estimate["total_estimated"] == Decimal("4334.4")
    assert estimate["due_date"] == date(2024, 6, 15)


def test_quarterly_estimate_filters_by_practice(tax_service, add_txn, sample_practice, other_practice):
    add_txn(date(2024, 1, 10), "1000", "income", practice_id=sample_practice.id)
    add_txn(date(2024, 1, 10), "3000", "income", practice_id=other_practice.id)

    estimate = tax_service.get_quarterly_estimate(2024, 1, sample_practice.id)

    assert estimate["net_profit"] == Decimal("1000")


def test_quarterly_estimate_invalid_quarter(tax_service):
    with pytest.raises(ValidationError, match="Quarter"):
        tax_service.get_quarterly_estimate(2024, 5)


@pytest.mark.parametrize(
    "prior_tax, multiplier, quarterly",
    [
        (Decimal("40000"), Decimal("1.0"), Decimal("10000")),
        (Decimal("150000"), Decimal("1.0"), Decimal("37500")),
        (Decimal("200000"), Decimal("1.1"), Decimal("55000")),
    ],
)
def test_safe_harbor(tax_service, prior_tax, multiplier, quarterly):
    result = tax_service.get_safe_harbor(2024, prior_tax)

    assert result["safe_harbor_multiplier"] == multiplier
    assert result["total_safe_harbor"] == prior_tax * multiplier
    assert result["quarterly_payment"] == quarterly


def test_safe_harbor_zero_prior_tax_is_respected(tax_service, add_txn):
    add_txn(date(2023, 5, 1), "100000", "income")

    result = tax_service.get_safe_harbor(2024, Decimal("0"))

    assert result["prior_year_tax"] == Decimal("0")
    assert result["quarterly_payment"] == Decimal("0")


def test_safe_harbor_estimates_prior_year(tax_service, add_txn):
    add_txn(date(2023, 5, 1), "100000", "income")
    add_txn(date(2023, 8, 1), "20000", "expense", "Rent")

    result = tax_service.get_safe_harbor(2024)

    assert result["prior_year_tax"] == Decimal("20000")
    assert result["quarterly_payment"] == Decimal("5000")


def test_reasonable_compensation(tax_service, add_txn):
    add_txn(date(2024, 3, 1), "200000", "income")

    result = tax_service.calculate_reasonable_compensation(2024)

    assert result["low"] == Decimal("80000")
    assert result["mid"] == Decimal("100000")
    assert result["high"] == Decimal("120000")
    assert result["estimated_savings"] == Decimal("15300")


def test_qbi_deduction(tax_service, add_txn):
    add_txn(date(2024, 3, 1), "100000", "income")

    result = tax_service.calculate_qbi_deduction(2024)

    assert result["qualified_business_income"] == Decimal("100000")
    assert result["qbi_deduction"] == Decimal("20000")
    assert result["tax_savings"] == Decimal("7400")


def test_tax_calendar(tax_service):
    calendar = tax_service.get_tax_calendar(2024)

    assert [entry["due_date"] for entry in calendar] == [
        date(2024, 4, 15),
        date(2024, 6, 15),
        date(2024, 9, 15),
        date(2025, 1, 15),
        date(2025, 3, 15),
        date(2025, 4, 15),
    ]
    assert [entry["form"] for entry in calendar] == ["1040-ES"] * 4 + ["1120-S", "1040"]


def test_record_tax_payment(tax_service):
    with capture_logs() as logs:
        event_id = tax_service.record_tax_payment(
            year=2024, quarter=3, amount="4500", paid_date=date(2024, 9, 10), note="EFTPS"
        )

    (event,) = tax_service.get_tax_history(2024)
    assert event.id == event_id
    assert event.type == ESTIMATED_TAX
    assert event.due_date == date(2024, 9, 15)
    assert event.amount == Decimal("4500")
    assert event.paid_date == date(2024, 9, 10)
    assert any(e["event"] == "tax_event_recorded" for e in logs)


def test_record_tax_payment_validates(tax_service):
    with pytest.raises(ValidationError):
        tax_service.record_tax_payment(year=2024, quarter=7)
    with pytest.raises(ValidationError):
        tax_service.record_tax_payment(year=2024, quarter=1, amount="-1")


def test_tax_history_is_per_year(tax_service):
    tax_service.record_tax_payment(year=2023, quarter=4, amount="100")
    tax_service.record_tax_payment(year=2024, quarter=1, amount="200")

    assert [e.year for e in tax_service.get_tax_history(2024)] == [2024]
    assert tax_service.get_tax_history(2022) == []


def test_tax_commands(cli_runner, temp_db, add_txn):
    add_txn(date(2024, 2, 1), "10000", "income")
    base = ["--db-path", temp_db.database_path, "tax"]

    result = cli_runner.invoke(cli, base + ["quarterly", "--year", "2024", "--quarter", "1"])
    assert result.exit_code == 0
    assert "Q1 2024 estimate (due 2024-04-15)" in result.output
    assert "2,500.00" in result.output

    result = cli_runner.invoke(cli, base + ["safe-harbor", "--year", "2025", "--prior-year-tax", "200,000"])
    assert result.exit_code == 0
    assert "55,000.00" in result.output

    result = cli_runner.invoke(cli, base + ["calendar", "--year", "2024"])
    assert "2025-03-15" in result.output
    assert "1120-S" in result.output

    result = cli_runner.invoke(cli, base + ["history", "--year", "2024"])
    assert "No tax events recorded for 2024." in result.output

    result = cli_runner.invoke(
        cli,
        base + ["record", "--year", "2024", "--quarter", "1", "--amount", "2500", "--paid-date", "2024-04-10"],
    )
    assert result.exit_code == 0
    assert "Recorded tax event 1" in result.output

    result = cli_runner.invoke(cli, base + ["history", "--year", "2024"])
    assert "2,500.00" in result.output
    assert "due 2024-04-15" in result.output


def test_tax_record_rejects_bad_amount(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "tax", "record", "--amount", "lots"]
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
