"""Main CLI entry point."""

import click
from finwise.database.factories import create_database, create_sqlite_database
from finwise.logging_setup import configure_logging

# Import and register all commands at module level
from finwise.cli.commands import (
    user,
    import_cmd,
    extract,
    view,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINWISE_DB_PATH environment variable)",
    envvar="FINWISE_DB_PATH",
)
@click.option(
    "--log-level",
    help="Logging level (DEBUG, INFO, WARNING, ...)",
    envvar="FINWISE_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Finwise - Bank statement import.

    Import transactions from ING and Revolut CSV exports or from free-form
    statement text, with duplicate detection across imports.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(db_path) if db_path else create_database()
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
import_cmd.register_commands(cli)
extract.register_commands(cli)
view.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
