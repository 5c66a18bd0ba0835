"""Main CLI entry point."""

import logging
import sys

import click
from pocketledger.config import get_settings
from pocketledger.database.factories import create_database
from pocketledger.cli.notifier import ClickNotifier
from pocketledger.domain.state import LedgerState

# Import and register all commands at module level
from pocketledger.cli.commands import account, bill, transaction

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides POCKETLEDGER_DB_PATH environment variable)",
    envvar="POCKETLEDGER_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    help="Authenticated user ID (overrides POCKETLEDGER_USER environment variable)",
    envvar="POCKETLEDGER_USER",
)
@click.option(
    "--demo",
    is_flag=True,
    default=False,
    help="Use the demo tables instead of the live ones",
    envvar="POCKETLEDGER_DEMO",
)
@click.option(
    "--no-aggregates",
    is_flag=True,
    default=False,
    help="Disable the SQL aggregate procedures and rebuild balances from transactions",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (overrides POCKETLEDGER_LOG_LEVEL environment variable)",
    envvar="POCKETLEDGER_LOG_LEVEL",
)
@click.option("--quiet", "-q", is_flag=True, default=False, help="Suppress notifications")
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    user_id: str | None,
    demo: bool,
    no_aggregates: bool,
    log_level: str | None,
    quiet: bool,
):
    """Pocketledger - personal finance ledger.

    Track accounts, transactions and bills. Account balances are reconciled
    from the ledger's aggregate queries, falling back to replaying
    transactions when those are unavailable.
    """
    ctx.ensure_object(dict)
    settings = get_settings()

    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(
            settings,
            database_path=db_path,
            user_id=user_id,
            aggregates_enabled=False if no_aggregates else None,
        )
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["is_demo"] = demo or settings.demo
        ctx.obj["notifier"] = ClickNotifier(quiet=quiet)
        ctx.obj["state"] = LedgerState()


# Register all commands
account.register_commands(cli)
transaction.register_commands(cli)
bill.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
