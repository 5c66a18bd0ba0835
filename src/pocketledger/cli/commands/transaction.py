"""Transaction management commands."""

import click
from datetime import date
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.formatting import format_money
from pocketledger.domain.account import AccountService
from pocketledger.domain.entities import TransactionStatus, TransactionType
from pocketledger.domain.errors import DomainError, LedgerError
from pocketledger.domain.transaction import TransactionService
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date

TRANSACTION_TYPES = [t.value for t in TransactionType]
TRANSACTION_STATUSES = [s.value for s in TransactionStatus]


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), required=True)
@click.option("--amount", required=True, help="Transaction amount (e.g., 42.50)")
@click.option("--from", "from_account", help="Source account name or ID")
@click.option("--to", "to_account", help="Destination account name or ID")
@click.option("--date", "txn_date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--status", type=click.Choice(TRANSACTION_STATUSES), default="completed", show_default=True)
@click.option("--name", help="Short label (defaults to the transaction type)")
@click.option("--description", help="Transaction description")
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    amount: str,
    from_account: str | None,
    to_account: str | None,
    txn_date: str | None,
    status: str,
    name: str | None,
    description: str | None,
) -> None:
    """Record a transaction.

    Expenses leave the --from account, income arrives in the --to account,
    and transfers need both.

    Examples:
        pocketledger transaction add --type income --amount 2500 --to "Checking"
        pocketledger transaction add --type expense --amount 42.50 --from 1 --name Groceries
        pocketledger transaction add --type transfer --amount 200 --from Checking --to Savings
    """
    db = ctx.obj["db"]
    is_demo = ctx.obj["is_demo"]
    account_service = AccountService(db)
    transaction_service = TransactionService(db, notifier=ctx.obj["notifier"])

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    parsed_date = date.today()
    if txn_date is not None:
        try:
            parsed_date = parse_date(txn_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    source_id = None
    if from_account is not None:
        source_id = resolve_account_or_exit(ctx, account_service, from_account)
    destination_id = None
    if to_account is not None:
        destination_id = resolve_account_or_exit(ctx, account_service, to_account)

    try:
        txn = transaction_service.create_transaction(
            name=name,
            amount=txn_amount,
            type=txn_type,
            date=parsed_date,
            source_account_id=source_id,
            destination_account_id=destination_id,
            status=status,
            description=description,
            is_demo=is_demo,
        )
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Recorded transaction {txn.id}: {txn.name} {format_money(txn.amount)}")


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--status", type=click.Choice(TRANSACTION_STATUSES), help="Only transactions with this status")
@click.pass_context
def list_transactions(ctx, account: str | None, status: str | None) -> None:
    """List transactions, most recent first."""
    db = ctx.obj["db"]
    is_demo = ctx.obj["is_demo"]
    transaction_service = TransactionService(db)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    try:
        transactions = transaction_service.list_transactions(
            account_id=account_id, status=status, is_demo=is_demo
        )
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):\n")
    for txn in transactions:
        source = txn.source_account_id if txn.source_account_id is not None else "-"
        destination = txn.destination_account_id if txn.destination_account_id is not None else "-"
        click.echo(
            f"ID: {txn.id:4d} | {txn.date.isoformat()} | {txn.type.value:15s} | "
            f"{format_money(txn.amount):>10s} | {source} -> {destination} | "
            f"{txn.status.value:9s} | {txn.name}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
