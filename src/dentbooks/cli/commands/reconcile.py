"""Bank reconciliation commands."""

from datetime import date

import click

from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.cli.practice_resolution import resolve_optional_practice
from dentbooks.domain.errors import DomainError, StorageError
from dentbooks.domain.practice import PracticeService
from dentbooks.domain.reconciliation import ReconciliationService
from dentbooks.utils.amount_parser import parse_amount


def period_arguments(func):
    """Attach --month, --year and --practice, defaulting to the current month."""
    func = click.option("--practice", help="Practice name or ID (defaults to the active practice)")(func)
    func = click.option("--year", type=int, default=lambda: date.today().year, help="Year (default: this year)")(func)
    func = click.option(
        "--month",
        type=click.IntRange(1, 12),
        default=lambda: date.today().month,
        help="Month number (default: this month)",
    )(func)
    return func


@click.group()
def reconcile_group():
    """Reconcile monthly transactions against bank statements."""
    pass


@reconcile_group.command("status")
@period_arguments
@click.pass_context
def status(ctx, month: int, year: int, practice: str | None):
    """Show how much of a month is reconciled."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    practice_id = resolve_optional_practice(ctx, practice)

    try:
        month_status = service.get_month_status(practice_id, month, year)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{year}-{month:02d}:")
    click.echo(f"  Transactions: {month_status.total}")
    click.echo(f"  Reconciled:   {month_status.reconciled}")
    click.echo(f"  Open:         {month_status.unreconciled}")
    click.echo(f"  Progress:     {month_status.percentage:.0f}%")


@reconcile_group.command("pending")
@period_arguments
@click.pass_context
def pending(ctx, month: int, year: int, practice: str | None):
    """List the month's unreconciled transactions and their book balance."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    practice_id = resolve_optional_practice(ctx, practice)

    try:
        transactions = service.get_unreconciled(practice_id, month, year)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not transactions:
        click.echo(f"No unreconciled transactions for {year}-{month:02d}.")
        return

    click.echo(f"\nUnreconciled transactions for {year}-{month:02d}:")
    click.echo("-" * 70)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {txn.signed_amount:>12,.2f}  {txn.description[:36]}"
        )
    click.echo("-" * 70)
    click.echo(f"Book balance: ${service.calculate_book_balance(transactions):,.2f}")


@reconcile_group.command("mark")
@click.argument("transaction_ids", type=int, nargs=-1, required=True)
@click.pass_context
def mark(ctx, transaction_ids: tuple[int, ...]):
    """Mark transactions as reconciled."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    result = service.mark_reconciled(transaction_ids)
    click.echo(f"Marked {len(result.succeeded)} transaction(s) reconciled")
    if result.failed:
        click.echo(
            f"Error: Could not mark: {', '.join(str(i) for i in result.failed)}", err=True
        )
        ctx.exit(1)


@reconcile_group.command("unmark")
@click.argument("transaction_id", type=int)
@click.pass_context
def unmark(ctx, transaction_id: int):
    """Clear the reconciled flag on a transaction."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    try:
        service.mark_unreconciled(transaction_id)
        click.echo(f"Transaction {transaction_id} marked unreconciled")
    except (DomainError, StorageError) as e:
        handle_domain_error(ctx, e)


@reconcile_group.command("complete")
@period_arguments
@click.option("--bank-balance", required=True, help="Balance shown on the bank statement")
@click.pass_context
def complete(ctx, month: int, year: int, practice: str | None, bank_balance: str):
    """Record a reconciliation against the bank statement balance."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    practice_id = resolve_optional_practice(ctx, practice)

    try:
        bank = parse_amount(bank_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid bank balance: {e}", err=True)
        ctx.exit(1)

    try:
        record = service.create_reconciliation(practice_id, month, year, bank)
    except (DomainError, StorageError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nReconciliation {year}-{month:02d}: {record.status.value.upper()}")
    click.echo(f"  Bank balance: ${record.bank_balance:,.2f}")
    click.echo(f"  Book balance: ${record.book_balance:,.2f}")
    click.echo(f"  Difference:   ${record.difference:,.2f}")


@reconcile_group.command("history")
@click.option("--practice", help="Practice name or ID (all practices if omitted)")
@click.pass_context
def history(ctx, practice: str | None):
    """List past reconciliations, newest first."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)

    records = service.get_history(practice_id)
    if not records:
        click.echo("No reconciliations recorded.")
        return

    practices = {p.id: p.name for p in PracticeService(db).list_practices()}
    click.echo("\nReconciliation history:")
    click.echo("-" * 80)
    for r in records:
        practice_name = practices.get(r.practice_id, "All practices")
        click.echo(
            f"{r.year}-{r.month:02d}  {practice_name[:20]:<20} bank ${r.bank_balance:>11,.2f}  "
            f"book ${r.book_balance:>11,.2f}  {r.status.value}"
        )


def register_commands(cli):
    """Register reconcile commands with main CLI."""
    cli.add_command(reconcile_group, name="reconcile")
