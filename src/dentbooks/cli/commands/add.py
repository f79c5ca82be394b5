"""Add transaction command."""

import click

from dentbooks.cli.category_resolution import resolve_category_or_exit
from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.cli.practice_resolution import resolve_optional_practice
from dentbooks.domain.category import CategoryService
from dentbooks.domain.errors import DomainError
from dentbooks.domain.transaction import TransactionService
from dentbooks.utils.amount_parser import parse_amount
from dentbooks.utils.date_parser import parse_date


@click.command("add")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--description", required=True, help="Transaction description")
@click.option("--amount", required=True, help="Transaction amount (e.g., 1250.00)")
@click.option(
    "--type",
    "txn_type",
    required=True,
    type=click.Choice(["income", "expense"], case_sensitive=False),
    help="Income or expense",
)
@click.option("--category", required=True, help="Category name or ID")
@click.option("--practice", help="Practice name or ID (defaults to the active practice)")
@click.option(
    "--status",
    type=click.Choice(["pending", "cleared", "flagged"], case_sensitive=False),
    default="pending",
    show_default=True,
)
@click.option("--payment-method", help="Payment method (check, ach, card, ...)")
@click.option("--note", help="Free-text note")
@click.pass_context
def add_transaction(
    ctx,
    date: str,
    description: str,
    amount: str,
    txn_type: str,
    category: str,
    practice: str | None,
    status: str,
    payment_method: str | None,
    note: str | None,
):
    """Add a transaction manually.

    Examples:
        dentbooks add --description "Glidewell crown" --amount 180 --type expense --category "Lab Fees"
        dentbooks add --date 2024-06-03 --description "Delta Dental" --amount 1250 --type income --category 1
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    category_id = resolve_category_or_exit(ctx, CategoryService(db), category)
    practice_id = resolve_optional_practice(ctx, practice)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = transaction_service.create_transaction(
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
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: ${txn_amount:,.2f} ({txn_type.lower()})")
    click.echo(f"  Description: {description}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
