"""CLI helper for resolving categories by name or ID."""

from __future__ import annotations

import click

from dentbooks.domain.category import CategoryService


def resolve_category_or_exit(
    ctx: click.Context, category_service: CategoryService, category: str
) -> int:
    """Resolve a category name or ID, or exit with a CLI error."""
    if category.isdigit():
        category_obj = category_service.get_category(int(category))
    else:
        category_obj = category_service.get_category_by_name(category)

    if category_obj is None:
        click.echo(f"Error: Category '{category}' not found", err=True)
        ctx.exit(1)
    return category_obj.id
