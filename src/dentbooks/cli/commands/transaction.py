"""Transaction management commands."""

import click

from dentbooks.cli.category_resolution import resolve_category_or_exit
from dentbooks.cli.date_filters import collect_period_flags, period_options, resolve_cli_date_range
from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.cli.practice_resolution import resolve_optional_practice
from dentbooks.domain.category import CategoryService
from dentbooks.domain.errors import DomainError, StorageError
from dentbooks.domain.practice import PracticeService
from dentbooks.domain.transaction import SORT_FIELDS, TransactionService
from dentbooks.utils.amount_parser import parse_amount
from dentbooks.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@period_options
@click.option("--practice", help="Practice name or ID")
@click.option("--type", "txn_type", type=click.Choice(["income", "expense"], case_sensitive=False))
@click.option("--status", type=click.Choice(["pending", "cleared", "flagged"], case_sensitive=False))
@click.option("--category", help="Category name or ID")
@click.option(
    "--reconciled/--unreconciled",
    default=None,
    help="Only reconciled or only unreconciled transactions",
)
@click.option("--search", help="Match description text or amount digits")
@click.option("--sort", "sort_field", type=click.Choice(SORT_FIELDS), default="date", show_default=True)
@click.option("--asc", "ascending", is_flag=True, help="Sort ascending (default is descending)")
@click.option("--verbose", "-v", is_flag=True, help="Show payment method, note and practice")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    practice: str | None,
    txn_type: str | None,
    status: str | None,
    category: str | None,
    reconciled: bool | None,
    search: str | None,
    sort_field: str,
    ascending: bool,
    verbose: bool,
    **periods,
):
    """View transactions with optional filters.

    Examples:
        dentbooks transaction list --this-month --type expense
        dentbooks transaction list --search glidewell --sort amount
        dentbooks transaction list --practice "Smile Dental" --unreconciled
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=collect_period_flags(periods),
    )
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)
    category_id = (
        resolve_category_or_exit(ctx, category_service, category) if category is not None else None
    )

    try:
        transactions = service.list_transactions(
            start_date=start,
            end_date=end,
            practice_id=practice_id,
            type=txn_type,
            status=status,
            category_id=category_id,
            reconciled=reconciled,
            search=search,
            sort_field=sort_field,
            sort_direction="asc" if ascending else "desc",
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not transactions:
        click.echo("No transactions found.")
        return

    categories = {c.id: c.name for c in category_service.list_categories()}
    practices = {p.id: p.name for p in PracticeService(db).list_practices()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Amount':>12}  {'Type':<8} {'Status':<8} {'R':<2}"
        f"{'Category':<22} {'Description':<30}"
    )
    click.echo("-" * 100)

    for txn in transactions:
        amount_str = f"${txn.amount:,.2f}"
        reconciled_mark = "✓" if txn.reconciled else ""
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {amount_str:>12}  {txn.type.value:<8} "
            f"{txn.status.value:<8} {reconciled_mark:<2}"
            f"{categories.get(txn.category_id, 'Unknown')[:21]:<22} {txn.description[:30]:<30}"
        )
        if verbose:
            if txn.practice_id is not None:
                click.echo(f"{'':<6} Practice: {practices.get(txn.practice_id, txn.practice_id)}")
            if txn.payment_method:
                click.echo(f"{'':<6} Payment method: {txn.payment_method}")
            if txn.note:
                click.echo(f"{'':<6} Note: {txn.note}")

    total_income = sum(t.amount for t in transactions if t.type.value == "income")
    total_expenses = sum(t.amount for t in transactions if t.type.value == "expense")
    click.echo("-" * 100)
    click.echo(
        f"{'TOTAL':<6} Income: ${total_income:,.2f} | Expenses: ${total_expenses:,.2f} | "
        f"Count: {len(transactions)}"
    )


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--description", help="Transaction description")
@click.option("--amount", help="Transaction amount (e.g., 1250.00)")
@click.option("--type", "txn_type", type=click.Choice(["income", "expense"], case_sensitive=False))
@click.option("--category", help="Category name or ID")
@click.option("--practice", help="Practice name or ID")
@click.option("--status", type=click.Choice(["pending", "cleared", "flagged"], case_sensitive=False))
@click.option("--payment-method", help="Payment method")
@click.option("--note", help="Note")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    date: str | None,
    description: str | None,
    amount: str | None,
    txn_type: str | None,
    category: str | None,
    practice: str | None,
    status: str | None,
    payment_method: str | None,
    note: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        dentbooks transaction update 12 --status cleared
        dentbooks transaction update 12 --category "Lab Fees" --amount 210.00
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    txn_amount = None
    if amount is not None:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    category_id = None
    if category is not None:
        category_id = resolve_category_or_exit(ctx, CategoryService(db), category)
    practice_id = resolve_optional_practice(ctx, practice, use_active=False)

    try:
        transaction_service.update_transaction(
            transaction_id,
            date=txn_date,
            description=description,
            amount=txn_amount,
            type=txn_type,
            category_id=category_id,
            practice_id=practice_id,
            status=status,
            payment_method=payment_method,
            note=note,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        dentbooks transaction delete 12
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    txn = transaction_service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete transaction {transaction_id}?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        transaction_service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except (DomainError, StorageError) as e:
        handle_domain_error(ctx, e)


@transaction_group.command("bulk-delete")
@click.argument("transaction_ids", type=int, nargs=-1, required=True)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def bulk_delete(ctx, transaction_ids: tuple[int, ...], yes: bool) -> None:
    """Delete several transactions.

    Each delete stands alone; IDs that fail are reported and the rest are
    still deleted.

    Examples:
        dentbooks transaction bulk-delete 4 5 9
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    if not yes and not click.confirm(f"Delete {len(transaction_ids)} transaction(s)?"):
        click.echo("Deletion cancelled.")
        return

    result = transaction_service.bulk_delete(transaction_ids)
    click.echo(f"Deleted {len(result.succeeded)} transaction(s)")
    if result.failed:
        click.echo(
            f"Error: Could not delete: {', '.join(str(i) for i in result.failed)}", err=True
        )
        ctx.exit(1)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
