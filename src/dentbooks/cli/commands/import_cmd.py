"""CSV import and export commands."""

from pathlib import Path

import click

from dentbooks.cli.date_filters import resolve_cli_date_range
from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.cli.practice_resolution import resolve_optional_practice
from dentbooks.domain.csv_import import CSVImportService
from dentbooks.domain.errors import DomainError, StorageError


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--practice", help="Practice name or ID (defaults to the active practice)")
@click.pass_context
def import_csv(ctx, csv_file: str, practice: str | None):
    """Import transactions from a bank CSV export.

    Columns are matched by header (date, description/memo/payee,
    amount or debit/credit). Rows are auto-categorized from their
    description and imported as pending.
    """
    db = ctx.obj["db"]
    service = CSVImportService(db)
    practice_id = resolve_optional_practice(ctx, practice)

    try:
        result = service.import_csv_file(csv_file, practice_id=practice_id)
    except (DomainError, StorageError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported} transactions")
    if result.dropped:
        click.echo(f"  Dropped: {result.dropped} rows missing a date, description or amount")


@click.command("export")
@click.option("--practice", help="Practice name or ID (all practices if omitted)")
@click.option("--start-date", help="Start date (used together with --end-date)")
@click.option("--end-date", help="End date (used together with --start-date)")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def export_csv(
    ctx,
    practice: str | None,
    start_date: str | None,
    end_date: str | None,
    output: str | None,
):
    """Export transactions as CSV."""
    db = ctx.obj["db"]
    service = CSVImportService(db)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags={}
    )

    csv_text = service.export_csv(practice_id=practice_id, start_date=start, end_date=end)

    if output:
        Path(output).write_text(csv_text, encoding="utf-8")
        click.echo(f"Exported transactions to {output}")
    else:
        click.echo(csv_text, nl=False)


def register_commands(cli):
    """Register import and export commands with main CLI."""
    cli.add_command(import_csv)
    cli.add_command(export_csv)
