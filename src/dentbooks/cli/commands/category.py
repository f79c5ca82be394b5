"""Category management commands."""

import click

from dentbooks.cli.error_handling import handle_domain_error
from dentbooks.domain.category import CategoryService
from dentbooks.domain.errors import DomainError


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    help="Only list income or expense categories",
)
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(type=category_type)
    if not categories:
        click.echo("No categories found. Run 'dentbooks init' to create default categories.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 50)
    for cat in categories:
        click.echo(f"ID: {cat.id:3d} | {cat.name:25s} | {cat.type.value}")


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    default="expense",
    help="Category type (default: expense)",
)
@click.pass_context
def create_category(ctx, name: str, category_type: str):
    """Create a new category.

    Examples:
        dentbooks category create "Malpractice Insurance"
        dentbooks category create "Teaching Income" --type income
    """
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(name=name, type=category_type)
        click.echo(f"Created category '{name}' (ID: {category_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
