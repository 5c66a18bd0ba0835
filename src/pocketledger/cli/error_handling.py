"""CLI error handling helpers."""

import click

from pocketledger.domain.errors import DomainError, LedgerError


def handle_domain_error(ctx: click.Context, error: DomainError | LedgerError | ValueError) -> None:
    """Render a domain or ledger error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
