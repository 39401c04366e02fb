"""Main CLI entry point."""

import click
from pnlkit.config import Settings
from pnlkit.database.factories import create_database
from pnlkit.domain.errors import ValidationError
from pnlkit.logging_config import configure_logging

# Import and register all commands at module level
from pnlkit.cli.commands import aggregate, check, import_cmd, summary


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides PNLKIT_DB_PATH environment variable)",
    envvar="PNLKIT_DB_PATH",
)
@click.option(
    "--db-url",
    help="SQLAlchemy database URL (overrides PNLKIT_DB_URL environment variable)",
    envvar="PNLKIT_DB_URL",
)
@click.option("-v", "--verbose", count=True, help="Log progress (-v) or debug output (-vv)")
@click.pass_context
def cli(ctx, db_path: str | None, db_url: str | None, verbose: int):
    """Pnlkit - Profit and loss aggregation for hospitality locations.

    Import monthly ledger exports per location and aggregate them into
    categorized P&L summaries.
    """
    ctx.ensure_object(dict)

    try:
        settings = Settings.from_env()
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if db_path:
        settings.database_path = db_path
    if db_url:
        settings.database_url = db_url
    if verbose:
        settings.log_level = "DEBUG" if verbose > 1 else "INFO"

    configure_logging(settings.log_level)
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(
            database_url=settings.database_url, database_path=settings.database_path
        )
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
import_cmd.register_commands(cli)
aggregate.register_commands(cli)
summary.register_commands(cli)
check.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
