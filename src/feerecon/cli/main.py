"""Main CLI entry point."""

import click

from feerecon.config import DB_PATH_ENV, configure_logging
from feerecon.database.factories import create_sqlite_database

# Import and register all commands at module level
from feerecon.cli.commands import (
    analyze,
    reconcile,
    profile,
    invoice,
    holder,
    payments,
    uploads,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Feerecon - School fee bank statement reconciliation.

    Reads CSV and PDF bank statements, matches incoming payments to open
    invoices and updates invoice balances.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
analyze.register_commands(cli)
reconcile.register_commands(cli)
profile.register_commands(cli)
invoice.register_commands(cli)
holder.register_commands(cli)
payments.register_commands(cli)
uploads.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
