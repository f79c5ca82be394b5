"""Tests for P&L and KPI reporting."""

from datetime import date
from decimal import Decimal

import pytest

from dentbooks.cli.main import cli
from dentbooks.domain.errors import ValidationError


@pytest.fixture
def add_txn(transaction_service, sample_categories):
    def _add(when, amount, txn_type, category, practice_id=None):
        return transaction_service.create_transaction(
            date=when,
            description=f"{category} entry",
            amount=amount,
            type=txn_type,
            category_id=sample_categories[category],
            practice_id=practice_id,
        )

    return _add


@pytest.fixture
def year_2024(add_txn, sample_practice):
    add_txn(date(2024, 1, 1), "10000", "income", "Clinical Income", sample_practice.id)
    add_txn(date(2024, 2, 10), "800", "expense", "Lab Fees", sample_practice.id)
    add_txn(date(2024, 5, 3), "500", "expense", "Dental Supplies", sample_practice.id)
    add_txn(date(2024, 12, 31), "1700", "expense", "Rent", sample_practice.id)
    add_txn(date(2023, 12, 31), "9999", "income", "Clinical Income", sample_practice.id)


def test_pl_summary(report_service, year_2024):
    pl = report_service.get_pl_summary(date(2024, 1, 1), date(2024, 12, 31))

    assert pl["income"] == Decimal("10000")
    assert pl["expenses"] == Decimal("3000")
    assert pl["net_profit"] == Decimal("7000")
    assert pl["overhead_ratio"] == pytest.approx(30.0)


def test_pl_summary_bounds_are_inclusive(report_service, year_2024):
    pl = report_service.get_pl_summary(date(2024, 12, 31), date(2024, 12, 31))

    assert pl["expenses"] == Decimal("1700")
    assert pl["income"] == Decimal("0")
    assert pl["overhead_ratio"] == 0.0


def test_pl_summary_filters_by_practice(report_service, add_txn, year_2024, other_practice):
    add_txn(date(2024, 6, 1), "400", "income", "Clinical Income", other_practice.id)

    pl = report_service.get_pl_summary(date(2024, 1, 1), date(2024, 12, 31), other_practice.id)

    assert pl["income"] == Decimal("400")
    assert pl["expenses"] == Decimal("0")


def test_pl_summary_rejects_reversed_range(report_service):
    with pytest.raises(ValidationError):
        report_service.get_pl_summary(date(2024, 2, 1), date(2024, 1, 1))


def test_dental_kpis(report_service, year_2024):
    kpis = report_service.get_dental_kpis(2024)

    assert kpis["lab_fees"] == Decimal("800")
    assert kpis["supplies"] == Decimal("500")
    assert kpis["lab_fee_percentage"] == pytest.approx(8.0)
    assert kpis["supply_percentage"] == pytest.approx(5.0)
    assert kpis["is_lab_healthy"] is True


def test_dental_kpis_lab_over_benchmark(report_service, add_txn):
    add_txn(date(2024, 3, 1), "1000", "income", "Clinical Income")
    add_txn(date(2024, 3, 2), "150", "expense", "Lab Fees")

    kpis = report_service.get_dental_kpis(2024)

    assert kpis["lab_fee_percentage"] == pytest.approx(15.0)
    assert kpis["is_lab_healthy"] is False


def test_dental_kpis_without_income(report_service, sample_categories):
    kpis = report_service.get_dental_kpis(2024)

    assert kpis["lab_fee_percentage"] == 0.0
    assert kpis["is_lab_healthy"] is False


def test_tax_projection(report_service, add_txn):
    add_txn(date(2024, 4, 1), "20000", "income", "Clinical Income")
    add_txn(date(2024, 6, 30), "8000", "expense", "Rent")
    add_txn(date(2024, 7, 1), "50000", "income", "Clinical Income")

    projection = report_service.get_tax_projection(2024, 2)

    assert projection["projected_net"] == Decimal("12000")
    assert projection["estimated_voucher_amount"] == Decimal("3000")


def test_tax_projection_loss_owes_nothing(report_service, add_txn):
    add_txn(date(2024, 2, 1), "500", "expense", "Rent")

    projection = report_service.get_tax_projection(2024, 1)

    assert projection["projected_net"] == Decimal("-500")
    assert projection["estimated_voucher_amount"] == Decimal("0")


def test_tax_projection_invalid_quarter(report_service):
    with pytest.raises(ValidationError, match="Quarter"):
        report_service.get_tax_projection(2024, 5)


def test_scorp_metrics(report_service, year_2024):
    metrics = report_service.get_scorp_metrics(2024)

    assert metrics["net_profit"] == Decimal("7000")
    assert metrics["recommended_salary"] == Decimal("3500")
    assert metrics["estimated_distributions"] == Decimal("3500")
    assert metrics["tax_savings"] == Decimal("535.5")


def test_report_pl_command(cli_runner, temp_db, year_2024):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "report",
            "pl",
            "--start-date",
            "2024-01-01",
            "--end-date",
            "2024-12-31",
        ],
    )

    assert result.exit_code == 0
    assert "Profit & loss: 2024-01-01 to 2024-12-31" in result.output
    assert "10,000.00" in result.output
    assert "7,000.00" in result.output
    assert "30.0%" in result.output


def test_report_pl_reversed_range(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "report",
            "pl",
            "--start-date",
            "2024-02-01",
            "--end-date",
            "2024-01-01",
        ],
    )

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_report_kpis_and_dashboard(cli_runner, temp_db, year_2024):
    base = ["--db-path", temp_db.database_path, "report"]

    result = cli_runner.invoke(cli, base + ["kpis", "--year", "2024"])
    assert result.exit_code == 0
    assert "Lab fees are within the 10% benchmark" in result.output

    result = cli_runner.invoke(cli, base + ["dashboard", "--year", "2024", "--practice", "Smile Dental"])
    assert result.exit_code == 0
    assert "Recommended salary" in result.output
    assert "3,500.00" in result.output


def test_report_projection_rejects_bad_quarter(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "report", "projection", "--quarter", "5"]
    )

    assert result.exit_code == 2
