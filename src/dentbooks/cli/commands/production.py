"""Production and collections commands."""

import click

from dentbooks.cli.date_filters import collect_period_flags, period_options, resolve_cli_date_range
from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.cli.practice_resolution import require_practice, resolve_optional_practice
from dentbooks.domain.errors import DomainError
from dentbooks.domain.production import ProductionService
from dentbooks.utils.amount_parser import parse_amount
from dentbooks.utils.date_parser import get_date_range, parse_date


def _parse_or_exit(ctx, parser, value: str, label: str):
    try:
        return parser(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _range_or_exit(ctx, start_date, end_date, periods):
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(periods),
        default_range=get_date_range("this-year"),
    )
    if start is None or end is None:
        click.echo("Error: Both --start-date and --end-date are required.", err=True)
        ctx.exit(1)
    return start, end


@click.group()
def production_group():
    """Track production (billed) and collections (received)."""
    pass


@production_group.command("add")
@click.option("--amount", required=True, help="Billed amount")
@click.option("--date", default="today", show_default=True, help="Production date")
@click.option("--practice", help="Practice name or ID (defaults to the active practice)")
@click.option("--patient", "patient_id", help="Patient reference")
@click.pass_context
def add_production(ctx, amount: str, date: str, practice: str | None, patient_id: str | None):
    """Record production for a practice."""
    db = ctx.obj["db"]
    service = ProductionService(db)
    practice_id = require_practice(ctx, practice)
    production_date = _parse_or_exit(ctx, parse_date, date, "date")
    production_amount = _parse_or_exit(ctx, parse_amount, amount, "amount")

    try:
        production_id = service.create_production(
            date=production_date,
            practice_id=practice_id,
            amount=production_amount,
            patient_id=patient_id,
        )
        click.echo(f"Recorded production {production_id}: ${production_amount:,.2f}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@production_group.command("collect")
@click.option("--amount", required=True, help="Amount received")
@click.option("--date", default="today", show_default=True, help="Collection date")
@click.option("--production", "production_id", type=int, help="Production ID being paid")
@click.option("--practice", help="Practice name or ID (defaults to the production's practice)")
@click.option("--method", "payment_method", help="Payment method (insurance, check, card, ...)")
@click.pass_context
def add_collection(
    ctx,
    amount: str,
    date: str,
    production_id: int | None,
    practice: str | None,
    payment_method: str | None,
):
    """Record a collection, optionally against a production entry."""
    db = ctx.obj["db"]
    service = ProductionService(db)
    practice_id = resolve_optional_practice(ctx, practice, use_active=production_id is None)
    collection_date = _parse_or_exit(ctx, parse_date, date, "date")
    collection_amount = _parse_or_exit(ctx, parse_amount, amount, "amount")

    try:
        collection_id = service.create_collection(
            date=collection_date,
            amount=collection_amount,
            production_id=production_id,
            practice_id=practice_id,
            payment_method=payment_method,
        )
        click.echo(f"Recorded collection {collection_id}: ${collection_amount:,.2f}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@production_group.command("summary")
@click.option("--practice", help="Practice name or ID (defaults to the active practice)")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@period_options
@click.pass_context
def production_summary(ctx, practice: str | None, start_date: str | None, end_date: str | None, **periods):
    """Compare production with collections. Defaults to this year."""
    db = ctx.obj["db"]
    service = ProductionService(db)
    practice_id = resolve_optional_practice(ctx, practice)
    start, end = _range_or_exit(ctx, start_date, end_date, periods)

    summary = service.get_summary(practice_id, start, end)
    click.echo(f"\nProduction vs. collections: {start} to {end}")
    click.echo("-" * 40)
    click.echo(f"  Production:     ${summary['production']:>12,.2f}")
    click.echo(f"  Collections:    ${summary['collections']:>12,.2f}")
    click.echo(f"  Collection %:   {summary['collection_percentage']:>12.1f}%")
    click.echo(f"  Outstanding AR: ${summary['outstanding_ar']:>12,.2f}")


@production_group.command("aging")
@click.option("--practice", help="Practice name or ID (defaults to the active practice)")
@click.option("--as-of", help="Age balances as of this date (default today)")
@click.pass_context
def aging(ctx, practice: str | None, as_of: str | None):
    """Show outstanding production balances by age."""
    db = ctx.obj["db"]
    service = ProductionService(db)
    practice_id = resolve_optional_practice(ctx, practice)
    as_of_date = _parse_or_exit(ctx, parse_date, as_of, "date") if as_of else None

    report = service.get_aging(practice_id=practice_id, as_of=as_of_date)
    click.echo("\nAccounts receivable aging:")
    click.echo("-" * 40)
    click.echo(f"  0-30 days:   ${report.current:>12,.2f}")
    click.echo(f"  31-60 days:  ${report.days_31_60:>12,.2f}")
    click.echo(f"  61-90 days:  ${report.days_61_90:>12,.2f}")
    click.echo(f"  90+ days:    ${report.days_90_plus:>12,.2f}")
    click.echo(f"  Total:       ${report.total:>12,.2f}")


@production_group.command("velocity")
@click.option("--practice", help="Practice name or ID (defaults to the active practice)")
@click.pass_context
def velocity(ctx, practice: str | None):
    """Average days from production to collection."""
    db = ctx.obj["db"]
    service = ProductionService(db)
    practice_id = resolve_optional_practice(ctx, practice)

    days = service.get_collection_velocity(practice_id)
    click.echo(f"Average days to collect: {days:.1f}")


@production_group.command("methods")
@click.option("--practice", help="Practice name or ID (defaults to the active practice)")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@period_options
@click.pass_context
def methods(ctx, practice: str | None, start_date: str | None, end_date: str | None, **periods):
    """Break collections down by payment method. Defaults to this year."""
    db = ctx.obj["db"]
    service = ProductionService(db)
    practice_id = resolve_optional_practice(ctx, practice)
    start, end = _range_or_exit(ctx, start_date, end_date, periods)

    breakdown = service.get_collections_by_method(practice_id, start, end)
    if not breakdown:
        click.echo("No collections found.")
        return

    click.echo(f"\nCollections by method: {start} to {end}")
    click.echo("-" * 40)
    for method, total in sorted(breakdown.items(), key=lambda item: item[1], reverse=True):
        click.echo(f"  {method:<20s} ${total:>12,.2f}")


def register_commands(cli):
    """Register production commands with main CLI."""
    cli.add_command(production_group, name="production")
