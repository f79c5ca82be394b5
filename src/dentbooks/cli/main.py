"""Main CLI entry point."""

import click
import structlog

from dentbooks.database.factories import create_sqlite_database
from dentbooks.log import configure_logging

# Import and register all commands at module level
from dentbooks.cli.commands import (
    init_cmd,
    category,
    practice,
    add,
    transaction,
    import_cmd,
    production,
    reconcile,
    report,
    tax,
    setting,
)

logger = structlog.get_logger(__name__)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides DENTBOOKS_DB_PATH environment variable)",
    envvar="DENTBOOKS_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Minimum log level written to stderr",
    envvar="DENTBOOKS_LOG_LEVEL",
)
@click.option(
    "--log-json",
    is_flag=True,
    help="Write log lines as JSON",
    envvar="DENTBOOKS_LOG_JSON",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_json: bool):
    """Dentbooks - bookkeeping for S-Corp dental contractors.

    Track income and expenses per practice, import bank CSV exports,
    reconcile months against bank statements, follow production and
    collections, and estimate quarterly taxes.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level, json_output=log_json)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)
        logger.debug("database_opened", command=ctx.invoked_subcommand)


# Register all commands
init_cmd.register_commands(cli)
category.register_commands(cli)
practice.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
import_cmd.register_commands(cli)
production.register_commands(cli)
reconcile.register_commands(cli)
report.register_commands(cli)
tax.register_commands(cli)
setting.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
