"""Practice management commands."""

import click

from dentbooks.cli.date_filters import collect_period_flags, period_options, resolve_cli_date_range
from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.cli.practice_resolution import resolve_practice_or_exit
from dentbooks.domain.errors import DomainError
from dentbooks.domain.practice import PracticeService
from dentbooks.domain.settings import SettingService
from dentbooks.utils.date_parser import get_date_range


@click.group()
def practice_group():
    """Manage practices (the offices you contract with)."""
    pass


@practice_group.command("add")
@click.argument("name", metavar="PRACTICE_NAME")
@click.option("--address", help="Street address")
@click.option("--city", help="City")
@click.option("--state", help="State")
@click.option("--zip", "zip_code", help="ZIP code")
@click.option("--tax-id", help="Practice tax ID (TIN)")
@click.pass_context
def add_practice(
    ctx,
    name: str,
    address: str | None,
    city: str | None,
    state: str | None,
    zip_code: str | None,
    tax_id: str | None,
):
    """Add a practice.

    Examples:
        dentbooks practice add "Smile Dental"
        dentbooks practice add "Bright Smiles" --city Austin --state TX
    """
    db = ctx.obj["db"]
    service = PracticeService(db)

    try:
        practice_id = service.create_practice(
            name=name,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            tax_id=tax_id,
        )
        click.echo(f"Created practice '{name}' (ID: {practice_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@practice_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include deactivated practices")
@click.pass_context
def list_practices(ctx, show_all: bool):
    """List practices."""
    db = ctx.obj["db"]
    service = PracticeService(db)
    active_id = SettingService(db).get_active_practice_id()

    practices = service.list_practices(active_only=not show_all)
    if not practices:
        click.echo("No practices found.")
        return

    click.echo("\nPractices:")
    click.echo("-" * 60)
    for p in practices:
        marker = "*" if p.id == active_id else " "
        location = ", ".join(part for part in (p.city, p.state) if part)
        status = "" if p.is_active else " (inactive)"
        click.echo(f"{marker} ID: {p.id:3d} | {p.name:25s} | {location}{status}")


@practice_group.command("update")
@click.argument("practice", metavar="PRACTICE")
@click.option("--name", help="New practice name")
@click.option("--address", help="Street address")
@click.option("--city", help="City")
@click.option("--state", help="State")
@click.option("--zip", "zip_code", help="ZIP code")
@click.option("--tax-id", help="Practice tax ID (TIN)")
@click.pass_context
def update_practice(
    ctx,
    practice: str,
    name: str | None,
    address: str | None,
    city: str | None,
    state: str | None,
    zip_code: str | None,
    tax_id: str | None,
):
    """Update practice details.

    PRACTICE can be a practice name or ID.
    """
    db = ctx.obj["db"]
    service = PracticeService(db)
    practice_id = resolve_practice_or_exit(ctx, service, practice)

    try:
        service.update_practice(
            practice_id,
            name=name,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            tax_id=tax_id,
        )
        click.echo(f"Updated practice {practice_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@practice_group.command("deactivate")
@click.argument("practice", metavar="PRACTICE")
@click.pass_context
def deactivate_practice(ctx, practice: str):
    """Deactivate a practice. Its transactions are kept.

    PRACTICE can be a practice name or ID.
    """
    db = ctx.obj["db"]
    service = PracticeService(db)
    practice_id = resolve_practice_or_exit(ctx, service, practice)

    try:
        service.deactivate_practice(practice_id)
        click.echo(f"Deactivated practice {practice_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@practice_group.command("use")
@click.argument("practice", metavar="PRACTICE")
@click.pass_context
def use_practice(ctx, practice: str):
    """Set the active practice used when --practice is omitted.

    PRACTICE can be a practice name or ID.
    """
    db = ctx.obj["db"]
    service = PracticeService(db)
    practice_id = resolve_practice_or_exit(ctx, service, practice)

    practice_obj = service.get_practice(practice_id)
    if not practice_obj.is_active:
        click.echo(f"Error: Practice '{practice_obj.name}' is inactive", err=True)
        ctx.exit(1)

    SettingService(db).set_active_practice_id(practice_id)
    click.echo(f"Active practice set to '{practice_obj.name}' (ID: {practice_id})")


@practice_group.command("stats")
@click.argument("practice", metavar="PRACTICE")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_options
@click.pass_context
def practice_stats(ctx, practice: str, start_date: str | None, end_date: str | None, **periods):
    """Show income, expenses and net profit for a practice.

    Defaults to this year.
    """
    db = ctx.obj["db"]
    service = PracticeService(db)
    practice_id = resolve_practice_or_exit(ctx, service, practice)

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

    try:
        stats = service.get_stats(practice_id, start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    practice_obj = service.get_practice(practice_id)
    click.echo(f"\n{practice_obj.name}: {start} to {end}")
    click.echo("-" * 40)
    click.echo(f"  Income:       ${stats['total_income']:>12,.2f}")
    click.echo(f"  Expenses:     ${stats['total_expenses']:>12,.2f}")
    click.echo(f"  Net profit:   ${stats['net_profit']:>12,.2f}")
    click.echo(f"  Transactions: {stats['transaction_count']:>13d}")


def register_commands(cli):
    """Register practice commands with main CLI."""
    cli.add_command(practice_group, name="practice")
