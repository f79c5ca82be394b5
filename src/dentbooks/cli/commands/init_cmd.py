"""First-run setup command."""

import click

from dentbooks.domain.category import CategoryService
from dentbooks.domain.settings import SettingService


@click.command("init")
@click.pass_context
def init(ctx):
    """Seed the default dental categories and first-run settings.

    Safe to run more than once; existing categories and settings are kept.
    """
    db = ctx.obj["db"]

    created = CategoryService(db).seed_defaults()
    if created:
        click.echo(f"Created {created} default categories.")
    else:
        click.echo("Categories already exist.")

    if SettingService(db).seed_defaults():
        click.echo("Wrote default settings.")
    else:
        click.echo("Setup already complete.")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init)
