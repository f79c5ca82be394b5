"""Tax planning commands."""

from datetime import date

import click

from dentbooks.cli.date_filters import resolve_year
from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.cli.practice_resolution import resolve_optional_practice
from dentbooks.domain.errors import DomainError, StorageError
from dentbooks.domain.tax_planning import ESTIMATED_TAX, TaxPlanningService
from dentbooks.utils.amount_parser import parse_amount
from dentbooks.utils.date_parser import parse_date, quarter_of


def _money(label: str, value) -> None:
    click.echo(f"  {label:<26s} ${value:>12,.2f}")


def year_option(func):
    return click.option(
        "--year", type=int, help="Tax year (default: the fiscalYear setting)"
    )(func)


def practice_option(func):
    return click.option("--practice", help="Practice name or ID (all practices if omitted)")(func)


@click.group()
def tax_group():
    """Quarterly estimates and S-Corp tax planning."""
    pass


@tax_group.command("quarterly")
@year_option
@click.option(
    "--quarter",
    type=click.IntRange(1, 4),
    default=lambda: quarter_of(date.today()),
    help="Quarter 1-4 (default: current quarter)",
)
@practice_option
@click.pass_context
def quarterly(ctx, year: int | None, quarter: int, practice: str | None):
    """Estimated federal, SE and state tax for a quarter."""
    service = TaxPlanningService(ctx.obj["db"])
    year = resolve_year(ctx, year)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)

    estimate = service.get_quarterly_estimate(year, quarter, practice_id)
    click.echo(f"\nQ{quarter} {year} estimate (due {estimate['due_date']}):")
    click.echo("-" * 44)
    _money("Net profit", estimate["net_profit"])
    _money("Federal (25%)", estimate["estimated_federal"])
    _money("Self-employment", estimate["estimated_se"])
    _money("State (5%)", estimate["estimated_state"])
    _money("Total", estimate["total_estimated"])


@tax_group.command("safe-harbor")
@year_option
@click.option("--prior-year-tax", help="Last year's total tax (estimated from books if omitted)")
@click.pass_context
def safe_harbor(ctx, year: int | None, prior_year_tax: str | None):
    """Minimum estimated payments to avoid an underpayment penalty."""
    service = TaxPlanningService(ctx.obj["db"])
    year = resolve_year(ctx, year)

    prior = None
    if prior_year_tax is not None:
        try:
            prior = parse_amount(prior_year_tax)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    result = service.get_safe_harbor(year, prior)
    click.echo(f"\nSafe harbor for {year}:")
    _money("Prior-year tax", result["prior_year_tax"])
    click.echo(f"  {'Multiplier':<26s} {result['safe_harbor_multiplier']:>13}")
    _money("Total safe harbor", result["total_safe_harbor"])
    _money("Quarterly payment", result["quarterly_payment"])


@tax_group.command("compensation")
@year_option
@practice_option
@click.pass_context
def compensation(ctx, year: int | None, practice: str | None):
    """Reasonable S-Corp officer salary range."""
    service = TaxPlanningService(ctx.obj["db"])
    year = resolve_year(ctx, year)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)

    result = service.calculate_reasonable_compensation(year, practice_id)
    click.echo(f"\nReasonable compensation for {year}:")
    _money("Net profit", result["net_profit"])
    _money("Low (40%)", result["low"])
    _money("Mid (50%)", result["mid"])
    _money("High (60%)", result["high"])
    _money("Estimated SE tax savings", result["estimated_savings"])


@tax_group.command("qbi")
@year_option
@practice_option
@click.pass_context
def qbi(ctx, year: int | None, practice: str | None):
    """Qualified business income deduction estimate."""
    service = TaxPlanningService(ctx.obj["db"])
    year = resolve_year(ctx, year)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)

    result = service.calculate_qbi_deduction(year, practice_id)
    click.echo(f"\nQBI deduction for {year}:")
    _money("Qualified business income", result["qualified_business_income"])
    _money("Deduction (20%)", result["qbi_deduction"])
    _money("Tax savings", result["tax_savings"])


@tax_group.command("calendar")
@year_option
@click.pass_context
def calendar(ctx, year: int | None):
    """Federal due dates for a tax year."""
    service = TaxPlanningService(ctx.obj["db"])
    year = resolve_year(ctx, year)

    click.echo(f"\nTax calendar for {year}:")
    click.echo("-" * 60)
    for entry in service.get_tax_calendar(year):
        label = entry["type"]
        if entry["quarter"] is not None:
            label = f"Q{entry['quarter']} {label}"
        click.echo(f"  {entry['due_date']}  {label:<28s} {entry['form']}")


@tax_group.command("record")
@year_option
@click.option("--quarter", type=click.IntRange(1, 4), help="Quarter the payment covers")
@click.option("--amount", help="Amount paid")
@click.option("--type", "event_type", default=ESTIMATED_TAX, show_default=True, help="Payment type")
@click.option("--paid-date", help="Date paid (default: today)", default="today")
@click.option("--note", help="Note")
@click.pass_context
def record(
    ctx,
    year: int | None,
    quarter: int | None,
    amount: str | None,
    event_type: str,
    paid_date: str,
    note: str | None,
):
    """Record a tax payment."""
    service = TaxPlanningService(ctx.obj["db"])
    year = resolve_year(ctx, year)

    try:
        paid = parse_date(paid_date)
        payment = parse_amount(amount) if amount is not None else None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        event_id = service.record_tax_payment(
            year=year,
            type=event_type,
            quarter=quarter,
            amount=payment,
            paid_date=paid,
            note=note,
        )
        click.echo(f"Recorded tax event {event_id}")
    except (DomainError, StorageError) as e:
        handle_domain_error(ctx, e)


@tax_group.command("history")
@year_option
@click.pass_context
def history(ctx, year: int | None):
    """List recorded tax events for a year."""
    service = TaxPlanningService(ctx.obj["db"])
    year = resolve_year(ctx, year)

    events = service.get_tax_history(year)
    if not events:
        click.echo(f"No tax events recorded for {year}.")
        return

    click.echo(f"\nTax events for {year}:")
    click.echo("-" * 70)
    for e in events:
        quarter = f"Q{e.quarter}" if e.quarter else "--"
        amount = f"${e.amount:,.2f}" if e.amount is not None else "-"
        click.echo(
            f"{e.id:<5} {quarter:<4} {e.type:<20s} {amount:>12}  due {e.due_date or '-'}  "
            f"paid {e.paid_date or '-'}"
        )


def register_commands(cli):
    """Register tax commands with main CLI."""
    cli.add_command(tax_group, name="tax")
