"""Tests for bank reconciliation."""

from datetime import date
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from dentbooks.cli.main import cli
from dentbooks.domain.entities import ReconciliationStatus
from dentbooks.domain.errors import NotFoundError, ValidationError
from dentbooks.domain.reconciliation import calculate_book_balance


@pytest.fixture
def june(transaction_service, sample_categories, sample_practice):
    """Two deposits and a lab bill in June, plus a July deposit."""
    ids = [
        transaction_service.create_transaction(
            date=date(2024, 6, 3),
            description="Delta Dental payment",
            amount="500",
            type="income",
            category_id=sample_categories["Clinical Income"],
            practice_id=sample_practice.id,
        ),
        transaction_service.create_transaction(
            date=date(2024, 6, 17),
            description="Cigna claim",
            amount="700",
            type="income",
            category_id=sample_categories["Clinical Income"],
            practice_id=sample_practice.id,
        ),
        transaction_service.create_transaction(
            date=date(2024, 6, 30),
            description="Glidewell crown",
            amount="200",
            type="expense",
            category_id=sample_categories["Lab Fees"],
            practice_id=sample_practice.id,
        ),
        transaction_service.create_transaction(
            date=date(2024, 7, 1),
            description="Patient deposit",
            amount="90",
            type="income",
            category_id=sample_categories["Clinical Income"],
            practice_id=sample_practice.id,
        ),
    ]
    return ids


def test_get_unreconciled_is_limited_to_month(reconciliation_service, june, sample_practice):
    open_items = reconciliation_service.get_unreconciled(sample_practice.id, 6, 2024)

    assert sorted(t.id for t in open_items) == sorted(june[:3])


def test_book_balance_is_signed_sum(reconciliation_service, june, sample_practice):
    open_items = reconciliation_service.get_unreconciled(sample_practice.id, 6, 2024)

    assert calculate_book_balance(open_items) == Decimal("1000")
    assert reconciliation_service.calculate_book_balance([]) == Decimal("0")


def test_create_reconciliation_matched(reconciliation_service, june, sample_practice):
    with capture_logs() as logs:
        record = reconciliation_service.create_reconciliation(sample_practice.id, 6, 2024, "1000.00")

    assert record.status == ReconciliationStatus.MATCHED
    assert record.bank_balance == Decimal("1000.00")
    assert record.book_balance == Decimal("1000.00")
    assert record.difference == Decimal("0")
    assert (record.month, record.year, record.practice_id) == (6, 2024, sample_practice.id)
    assert any(e["event"] == "reconciliation_recorded" for e in logs)


def test_create_reconciliation_discrepancy(reconciliation_service, june, sample_practice):
    record = reconciliation_service.create_reconciliation(sample_practice.id, 6, 2024, Decimal("950"))

    assert record.status == ReconciliationStatus.DISCREPANCY
    assert record.difference == Decimal("-50.00")


def test_sub_cent_difference_still_matches(reconciliation_service, june, sample_practice):
    # Rounded to the cent before comparing
    record = reconciliation_service.create_reconciliation(sample_practice.id, 6, 2024, "1000.004")

    assert record.status == ReconciliationStatus.MATCHED


def test_reconciled_transactions_leave_book_balance(reconciliation_service, june, sample_practice):
    reconciliation_service.mark_reconciled([june[0]])

    record = reconciliation_service.create_reconciliation(sample_practice.id, 6, 2024, "500")

    assert record.book_balance == Decimal("500.00")
    assert record.status == ReconciliationStatus.MATCHED


def test_create_reconciliation_does_not_mark_transactions(reconciliation_service, june, sample_practice):
    reconciliation_service.create_reconciliation(sample_practice.id, 6, 2024, "1000")

    assert len(reconciliation_service.get_unreconciled(sample_practice.id, 6, 2024)) == 3


def test_create_reconciliation_unknown_practice(reconciliation_service):
    with pytest.raises(NotFoundError):
        reconciliation_service.create_reconciliation(42, 6, 2024, "0")


def test_invalid_month(reconciliation_service):
    with pytest.raises(ValidationError, match="Month"):
        reconciliation_service.get_unreconciled(None, 13, 2024)


def test_mark_reconciled_partial_failure(reconciliation_service, transaction_service, june):
    with capture_logs() as logs:
        result = reconciliation_service.mark_reconciled([june[0], 999, june[1]])

    assert result.succeeded == (june[0], june[1])
    assert result.failed == (999,)
    assert result.is_partial
    assert transaction_service.get_transaction(june[0]).reconciled is True
    assert transaction_service.get_transaction(june[1]).reconciled is True

    events = [(e["event"], e["log_level"]) for e in logs]
    assert ("mark_reconciled_item_failed", "warning") in events
    assert ("mark_reconciled_incomplete", "warning") in events


def test_mark_unreconciled(reconciliation_service, transaction_service, june):
    reconciliation_service.mark_reconciled([june[2]])
    reconciliation_service.mark_unreconciled(june[2])

    assert transaction_service.get_transaction(june[2]).reconciled is False

    with pytest.raises(NotFoundError):
        reconciliation_service.mark_unreconciled(999)


def test_month_status(reconciliation_service, june, sample_practice):
    reconciliation_service.mark_reconciled(june[:2])

    status = reconciliation_service.get_month_status(sample_practice.id, 6, 2024)

    assert (status.total, status.reconciled, status.unreconciled) == (3, 2, 1)
    assert status.percentage == pytest.approx(66.67, abs=0.01)


def test_month_status_empty(reconciliation_service):
    status = reconciliation_service.get_month_status(None, 2, 2024)

    assert status.total == 0
    assert status.percentage == 0.0


def test_history_newest_period_first(reconciliation_service, sample_practice, other_practice):
    reconciliation_service.create_reconciliation(sample_practice.id, 5, 2024, "0")
    reconciliation_service.create_reconciliation(sample_practice.id, 1, 2025, "0")
    reconciliation_service.create_reconciliation(other_practice.id, 12, 2024, "0")

    history = reconciliation_service.get_history()
    assert [(r.year, r.month) for r in history] == [(2025, 1), (2024, 12), (2024, 5)]

    own = reconciliation_service.get_history(sample_practice.id)
    assert [(r.year, r.month) for r in own] == [(2025, 1), (2024, 5)]


def test_reconcile_complete_command(cli_runner, temp_db, june):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "reconcile",
            "complete",
            "--month",
            "6",
            "--year",
            "2024",
            "--practice",
            "Smile Dental",
            "--bank-balance",
            "$1,000.00",
        ],
    )

    assert result.exit_code == 0
    assert "Reconciliation 2024-06: MATCHED" in result.output
    assert "Book balance: $1,000.00" in result.output


def test_reconcile_pending_command(cli_runner, temp_db, june):
    args = ["--db-path", temp_db.database_path, "reconcile", "pending", "--year", "2024"]

    result = cli_runner.invoke(cli, args + ["--month", "6"])
    assert result.exit_code == 0
    assert "Glidewell crown" in result.output
    assert "Book balance: $1,000.00" in result.output

    result = cli_runner.invoke(cli, args + ["--month", "8"])
    assert "No unreconciled transactions for 2024-08." in result.output


def test_reconcile_mark_command(cli_runner, temp_db, june):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "reconcile", "mark", str(june[0]), "999"]
    )

    assert result.exit_code == 1
    assert "Marked 1 transaction(s) reconciled" in result.output
    assert "Error: Could not mark: 999" in result.output


def test_reconcile_month_out_of_range(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "reconcile", "status", "--month", "13"]
    )

    assert result.exit_code == 2


def test_reconcile_history_command(cli_runner, temp_db, reconciliation_service, june, sample_practice):
    args = ["--db-path", temp_db.database_path, "reconcile", "history"]

    result = cli_runner.invoke(cli, args)
    assert "No reconciliations recorded." in result.output

    reconciliation_service.create_reconciliation(sample_practice.id, 6, 2024, "900")
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "2024-06" in result.output
    assert "Smile Dental" in result.output
    assert "discrepancy" in result.output
