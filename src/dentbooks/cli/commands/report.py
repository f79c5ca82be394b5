"""Reporting commands."""

from datetime import date

import click

from dentbooks.cli.date_filters import (
    collect_period_flags,
    period_options,
    resolve_cli_date_range,
    resolve_year,
)
from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.cli.practice_resolution import resolve_optional_practice
from dentbooks.domain.errors import DomainError
from dentbooks.domain.report import ReportService
from dentbooks.utils.date_parser import get_date_range, quarter_of, year_range


def _money(label: str, value) -> None:
    click.echo(f"  {label:<24s} ${value:>12,.2f}")


@click.group()
def report_group():
    """Profit & loss, KPIs and S-Corp projections."""
    pass


@report_group.command("pl")
@click.option("--practice", help="Practice name or ID (all practices if omitted)")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@period_options
@click.pass_context
def profit_and_loss(ctx, practice: str | None, start_date: str | None, end_date: str | None, **periods):
    """Profit & loss summary. Defaults to this year."""
    db = ctx.obj["db"]
    service = ReportService(db)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)
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
        pl = service.get_pl_summary(start, end, practice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nProfit & loss: {start} to {end}")
    click.echo("-" * 42)
    _money("Income", pl["income"])
    _money("Expenses", pl["expenses"])
    _money("Net profit", pl["net_profit"])
    click.echo(f"  {'Overhead ratio':<24s} {pl['overhead_ratio']:>12.1f}%")


@report_group.command("kpis")
@click.option("--year", type=int, help="Year (default: the fiscalYear setting)")
@click.option("--practice", help="Practice name or ID (all practices if omitted)")
@click.pass_context
def kpis(ctx, year: int | None, practice: str | None):
    """Lab fee and supply ratios against income."""
    db = ctx.obj["db"]
    service = ReportService(db)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)
    year = resolve_year(ctx, year)

    result = service.get_dental_kpis(year, practice_id)
    click.echo(f"\nDental KPIs for {year}:")
    click.echo("-" * 42)
    click.echo(f"  {'Lab fees % of income':<24s} {result['lab_fee_percentage']:>12.1f}%")
    click.echo(f"  {'Supplies % of income':<24s} {result['supply_percentage']:>12.1f}%")
    click.echo(
        f"  Lab fees are {'within' if result['is_lab_healthy'] else 'above'} the 10% benchmark"
    )


@report_group.command("projection")
@click.option("--year", type=int, help="Year (default: the fiscalYear setting)")
@click.option(
    "--quarter",
    type=click.IntRange(1, 4),
    default=lambda: quarter_of(date.today()),
    help="Quarter 1-4 (default: current quarter)",
)
@click.option("--practice", help="Practice name or ID (all practices if omitted)")
@click.pass_context
def projection(ctx, year: int | None, quarter: int, practice: str | None):
    """Estimated tax voucher for a quarter."""
    db = ctx.obj["db"]
    service = ReportService(db)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)
    year = resolve_year(ctx, year)

    result = service.get_tax_projection(year, quarter, practice_id)
    click.echo(f"\nQ{quarter} {year} projection:")
    _money("Projected net", result["projected_net"])
    _money("Voucher amount", result["estimated_voucher_amount"])


@report_group.command("dashboard")
@click.option("--year", type=int, help="Year (default: the fiscalYear setting)")
@click.option("--practice", help="Practice name or ID (all practices if omitted)")
@click.pass_context
def dashboard(ctx, year: int | None, practice: str | None):
    """Year-to-date overview with the S-Corp salary/distribution split."""
    db = ctx.obj["db"]
    service = ReportService(db)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)
    year = resolve_year(ctx, year)

    start, end = year_range(year)
    pl = service.get_pl_summary(start, end, practice_id)
    metrics = service.get_scorp_metrics(year, practice_id)

    click.echo(f"\nDashboard {year}")
    click.echo("=" * 42)
    _money("Income", pl["income"])
    _money("Expenses", pl["expenses"])
    _money("Net profit", pl["net_profit"])
    click.echo("-" * 42)
    _money("Recommended salary", metrics["recommended_salary"])
    _money("Estimated distributions", metrics["estimated_distributions"])
    _money("SE tax savings", metrics["tax_savings"])


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
