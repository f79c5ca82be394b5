"""Tests for production, collections and AR aging."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from dentbooks.cli.main import cli
from dentbooks.domain.errors import NotFoundError, ValidationError


def test_create_production(production_service, sample_practice):
    production_id = production_service.create_production(
        date=date(2024, 3, 1), practice_id=sample_practice.id, amount="1250.00", patient_id="P-17"
    )

    production = production_service.get_production(production_id)
    assert production.amount == Decimal("1250.00")
    assert production.patient_id == "P-17"
    assert production.practice_id == sample_practice.id


@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"amount": "0"}, ValidationError),
        ({"amount": "-10"}, ValidationError),
        ({"amount": "0.004"}, ValidationError),
        ({"date": "not a date"}, ValidationError),
        ({"practice_id": 99}, NotFoundError),
    ],
)
def test_create_production_rejects(production_service, sample_practice, kwargs, error):
    args = {"date": date(2024, 3, 1), "practice_id": sample_practice.id, "amount": "100"}
    args.update(kwargs)

    with pytest.raises(error):
        production_service.create_production(**args)


def test_collection_defaults_to_production_practice(production_service, temp_db, sample_practice):
    production_id = production_service.create_production(
        date=date(2024, 3, 1), practice_id=sample_practice.id, amount="500"
    )

    collection_id = production_service.create_collection(
        date=date(2024, 3, 20), amount="200", production_id=production_id
    )

    (collection,) = temp_db.list_collections(production_id=production_id)
    assert collection.id == collection_id
    assert collection.practice_id == sample_practice.id


def test_collection_practice_mismatch(production_service, sample_practice, other_practice):
    production_id = production_service.create_production(
        date=date(2024, 3, 1), practice_id=sample_practice.id, amount="500"
    )

    with pytest.raises(ValidationError, match="belongs to practice"):
        production_service.create_collection(
            date=date(2024, 3, 20),
            amount="200",
            production_id=production_id,
            practice_id=other_practice.id,
        )


def test_collection_requires_practice(production_service):
    with pytest.raises(ValidationError, match="practice is required"):
        production_service.create_collection(date=date(2024, 3, 20), amount="200")


def test_collection_unknown_production(production_service):
    with pytest.raises(NotFoundError, match="Production 5"):
        production_service.create_collection(date=date(2024, 3, 20), amount="200", production_id=5)


def test_over_collection_is_allowed_but_logged(production_service, temp_db, sample_practice):
    production_id = production_service.create_production(
        date=date(2024, 3, 1), practice_id=sample_practice.id, amount="500"
    )
    production_service.create_collection(date=date(2024, 3, 10), amount="400", production_id=production_id)

    with capture_logs() as logs:
        production_service.create_collection(
            date=date(2024, 3, 20), amount="200", production_id=production_id
        )

    assert len(temp_db.list_collections(production_id=production_id)) == 2
    (entry,) = [e for e in logs if e["event"] == "over_collection"]
    assert entry["log_level"] == "warning"
    assert entry["collected"] == "600.00"


def test_summary(production_service, sample_practice):
    production_service.create_production(date=date(2024, 1, 5), practice_id=sample_practice.id, amount="1000")
    production_service.create_production(date=date(2024, 2, 5), practice_id=sample_practice.id, amount="1000")
    production_service.create_collection(date=date(2024, 2, 1), amount="1500", practice_id=sample_practice.id)
    # Outside the range
    production_service.create_production(date=date(2023, 12, 31), practice_id=sample_practice.id, amount="999")

    summary = production_service.get_summary(sample_practice.id, date(2024, 1, 1), date(2024, 12, 31))

    assert summary["production"] == Decimal("2000")
    assert summary["collections"] == Decimal("1500")
    assert summary["collection_percentage"] == pytest.approx(75.0)
    assert summary["outstanding_ar"] == Decimal("500")


def test_summary_without_production(production_service, sample_practice):
    summary = production_service.get_summary(sample_practice.id, date(2024, 1, 1), date(2024, 12, 31))

    assert summary["collection_percentage"] == 0.0
    assert summary["outstanding_ar"] == Decimal("0")


def test_aging_buckets_open_balance(production_service, sample_practice):
    produced = date(2024, 3, 1)
    production_id = production_service.create_production(
        date=produced, practice_id=sample_practice.id, amount="1000"
    )
    production_service.create_collection(date=date(2024, 3, 15), amount="600", production_id=production_id)

    report = production_service.get_aging(as_of=produced + timedelta(days=45))

    assert report.days_31_60 == Decimal("400")
    assert report.current == report.days_61_90 == report.days_90_plus == Decimal("0")
    assert report.total == Decimal("400")


def test_aging_ignores_paid_productions(production_service, sample_practice):
    production_id = production_service.create_production(
        date=date(2024, 1, 1), practice_id=sample_practice.id, amount="300"
    )
    production_service.create_collection(date=date(2024, 1, 2), amount="300", production_id=production_id)
    # Overpaid
    overpaid = production_service.create_production(
        date=date(2024, 1, 1), practice_id=sample_practice.id, amount="100"
    )
    production_service.create_collection(date=date(2024, 1, 2), amount="150", production_id=overpaid)

    assert production_service.get_aging(as_of=date(2024, 12, 31)).total == Decimal("0")


@pytest.mark.parametrize(
    "age, bucket",
    [
        (0, "current"),
        (30, "current"),
        (31, "days_31_60"),
        (60, "days_31_60"),
        (61, "days_61_90"),
        (90, "days_61_90"),
        (91, "days_90_plus"),
    ],
)
def test_aging_bucket_edges(production_service, sample_practice, age, bucket):
    as_of = date(2024, 6, 30)
    production_service.create_production(
        date=as_of - timedelta(days=age), practice_id=sample_practice.id, amount="100"
    )

    report = production_service.get_aging(as_of=as_of)

    assert getattr(report, bucket) == Decimal("100")
    assert report.total == Decimal("100")


def test_aging_total_equals_open_production(production_service, sample_practice, other_practice):
    as_of = date(2024, 6, 30)
    entries = [(5, "120"), (40, "80.50"), (75, "300"), (200, "45.25")]
    for age, amount in entries:
        production_service.create_production(
            date=as_of - timedelta(days=age), practice_id=sample_practice.id, amount=amount
        )
    production_service.create_production(date=as_of, practice_id=other_practice.id, amount="999")

    report = production_service.get_aging(practice_id=sample_practice.id, as_of=as_of)

    assert report.total == sum(Decimal(a) for _, a in entries)


def test_collections_by_method(production_service, sample_practice):
    for method, amount in [("insurance", "500"), ("card", "120"), ("insurance", "250"), (None, "40")]:
        production_service.create_collection(
            date=date(2024, 5, 1), amount=amount, practice_id=sample_practice.id, payment_method=method
        )

    breakdown = production_service.get_collections_by_method(
        sample_practice.id, date(2024, 1, 1), date(2024, 12, 31)
    )

    assert breakdown == {
        "insurance": Decimal("750"),
        "card": Decimal("120"),
        "Unknown": Decimal("40"),
    }


def test_collection_velocity(production_service, sample_practice):
    first = production_service.create_production(
        date=date(2024, 1, 1), practice_id=sample_practice.id, amount="500"
    )
    second = production_service.create_production(
        date=date(2024, 2, 1), practice_id=sample_practice.id, amount="500"
    )
    production_service.create_collection(date=date(2024, 1, 11), amount="100", production_id=first)
    production_service.create_collection(date=date(2024, 2, 21), amount="100", production_id=second)
    # Dated before its production, left out
    production_service.create_collection(date=date(2023, 12, 1), amount="100", production_id=first)
    # No production link, left out
    production_service.create_collection(date=date(2024, 3, 1), amount="100", practice_id=sample_practice.id)

    assert production_service.get_collection_velocity() == pytest.approx(15.0)


def test_collection_velocity_empty(production_service):
    assert production_service.get_collection_velocity() == 0.0


def test_production_add_requires_practice(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "production", "add", "--amount", "100"]
    )

    assert result.exit_code == 1
    assert "No practice given" in result.output


def test_production_commands(cli_runner, temp_db, sample_practice):
    base = ["--db-path", temp_db.database_path, "production"]

    result = cli_runner.invoke(
        cli, base + ["add", "--amount", "1,000", "--date", "2024-03-01", "--practice", "Smile Dental"]
    )
    assert result.exit_code == 0
    assert "Recorded production 1: $1,000.00" in result.output

    result = cli_runner.invoke(
        cli,
        base + ["collect", "--amount", "600", "--date", "2024-03-15", "--production", "1", "--method", "insurance"],
    )
    assert result.exit_code == 0
    assert "Recorded collection 1: $600.00" in result.output

    result = cli_runner.invoke(cli, base + ["aging", "--as-of", "2024-04-15"])
    assert result.exit_code == 0
    (line,) = [l for l in result.output.splitlines() if "31-60 days" in l]
    assert line.endswith("400.00")

    result = cli_runner.invoke(cli, base + ["velocity"])
    assert "Average days to collect: 14.0" in result.output

    result = cli_runner.invoke(
        cli, base + ["summary", "--start-date", "2024-01-01", "--end-date", "2024-12-31"]
    )
    assert result.exit_code == 0
    assert "60.0%" in result.output


def test_production_collect_mismatch_command(cli_runner, temp_db, production_service, sample_practice, other_practice):
    production_service.create_production(date=date(2024, 3, 1), practice_id=sample_practice.id, amount="500")

    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "production",
            "collect",
            "--amount",
            "100",
            "--production",
            "1",
            "--practice",
            "Bright Smiles",
        ],
    )

    assert result.exit_code == 1
    assert "Error: Production 1 belongs to practice" in result.output


def test_collection_rejects_sub_cent_amount(production_service, sample_practice):
    with pytest.raises(ValidationError, match="greater than 0"):
        production_service.create_collection(
            date=date(2024, 3, 20), amount="0.004", practice_id=sample_practice.id
        )
