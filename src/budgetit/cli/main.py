"""Main CLI entry point."""

import logging

import click
from budgetit.database.factories import create_sqlite_database

# Import and register all commands at module level
from budgetit.cli.commands import forecast, import_cmd, template


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BUDGETIT_DB_PATH environment variable)",
    envvar="BUDGETIT_DB_PATH",
)
@click.option("--verbose", is_flag=True, default=False, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Budgetit - Expense planning ledger.

    Import planned expense lines and actual transactions from CSV or XLSX
    files, with column mapping templates and duplicate detection.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
import_cmd.register_commands(cli)
template.register_commands(cli)
forecast.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
