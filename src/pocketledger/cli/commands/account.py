"""Account management commands."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.formatting import format_money
from pocketledger.domain.account import AccountService
from pocketledger.domain.entities import AccountType
from pocketledger.domain.errors import DomainError, LedgerError
from pocketledger.utils.amount_parser import parse_amount

ACCOUNT_TYPES = [t.value for t in AccountType]


def _service(ctx) -> AccountService:
    return AccountService(ctx.obj["db"], notifier=ctx.obj["notifier"])


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default="checking", show_default=True)
@click.option("--institution", help="Bank or institution name")
@click.option("--account-number", help="Account number")
@click.option("--initial-balance", default="0", help="Opening balance (e.g., 1500.00)")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    institution: str | None,
    account_number: str | None,
    initial_balance: str,
):
    """Create a new account.

    A positive initial balance is recorded as an opening balance transaction.

    Examples:
        pocketledger account create "Everyday Checking" --initial-balance 1500
        pocketledger account create "Rainy Day" --type savings --institution "Credit Union"
    """
    service = _service(ctx)

    try:
        opening = parse_amount(initial_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        account = service.add_account_with_initial_balance(
            name=name,
            type=account_type,
            institution=institution,
            initial_balance=opening,
            account_number=account_number,
            is_demo=ctx.obj["is_demo"],
        )
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    ctx.obj["state"].upsert_account(account)
    click.echo(
        f"Created account '{account.name}' (ID: {account.id}) "
        f"with balance {format_money(account.current_balance)}"
    )


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List active accounts with their balances."""
    service = _service(ctx)
    state = ctx.obj["state"]

    try:
        accounts = service.refresh(state, is_demo=ctx.obj["is_demo"])
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account.type.value:8s} | "
            f"Balance: {format_money(acc.current_balance):>12s}"
        )
    totals = state.totals
    click.echo("-" * 72)
    click.echo(
        f"Total balance: {format_money(totals.total_balance)} | "
        f"Income: {format_money(totals.total_income)} | "
        f"Expenses: {format_money(totals.total_expenses)} | "
        f"Active accounts: {totals.active_accounts}"
    )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str) -> None:
    """Show an account's reconciled summary.

    ACCOUNT can be an account name or ID.
    """
    service = _service(ctx)
    is_demo = ctx.obj["is_demo"]
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        account_obj = service.get_account(account_id, is_demo=is_demo)
        summary = service.get_account_summary(account_id, is_demo=is_demo)
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Account: {account_obj.name} (ID: {account_obj.id})")
    click.echo(f"Type: {account_obj.type.value}")
    if account_obj.institution:
        click.echo(f"Institution: {account_obj.institution}")
    click.echo(f"Status: {'active' if account_obj.is_active else 'inactive'}")
    click.echo(f"Initial balance: {format_money(account_obj.initial_balance)}")
    click.echo(f"Current balance: {format_money(summary.current_balance)}")
    click.echo(f"Total income: {format_money(summary.total_income)}")
    click.echo(f"Total expenses: {format_money(summary.total_expenses)}")
    click.echo(f"Transactions: {summary.transaction_count}")
    if summary.last_transaction_date is not None:
        click.echo(f"Last transaction: {summary.last_transaction_date.isoformat()}")
    click.echo(f"Computed by: {summary.source.value}")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.option("--institution", help="New institution name")
@click.option("--account-number", help="New account number")
@click.option("--active/--inactive", default=None, help="Reactivate or deactivate the account")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    account_type: str | None,
    institution: str | None,
    account_number: str | None,
    active: bool | None,
) -> None:
    """Update account details.

    ACCOUNT can be an account name or ID. Balances cannot be edited; record a
    transaction instead.

    Examples:
        pocketledger account update "Everyday Checking" --name "Main Checking"
        pocketledger account update 2 --inactive
    """
    service = _service(ctx)
    account_id = resolve_account_or_exit(ctx, service, account)

    updates = {}
    if name is not None:
        updates["name"] = name
    if account_type is not None:
        updates["type"] = account_type
    if institution is not None:
        updates["institution"] = institution
    if account_number is not None:
        updates["account_number"] = account_number
    if active is not None:
        updates["is_active"] = active

    if not updates:
        click.echo("Nothing to update.")
        return

    try:
        updated = service.update_account(account_id, updates, is_demo=ctx.obj["is_demo"])
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    ctx.obj["state"].upsert_account(updated)
    click.echo(f"Updated account '{updated.name}' (balance {format_money(updated.current_balance)})")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    Accounts with transactions are deactivated instead of deleted, so their
    history stays intact.

    Examples:
        pocketledger account delete "Old Savings"
        pocketledger account delete 3 --yes
    """
    service = _service(ctx)
    is_demo = ctx.obj["is_demo"]
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id, is_demo=is_demo)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id, is_demo=is_demo)
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    ctx.obj["state"].remove_account(account_id)


@account_group.command("history")
@click.argument("account", metavar="ACCOUNT")
@click.option("--months", type=click.IntRange(1, 120), default=12, show_default=True)
@click.pass_context
def account_history(ctx, account: str, months: int) -> None:
    """Show an account's balance at the start of each month.

    ACCOUNT can be an account name or ID.
    """
    service = _service(ctx)
    account_id = resolve_account_or_exit(ctx, service, account)

    history = service.get_account_balance_history(
        account_id, months=months, is_demo=ctx.obj["is_demo"]
    )
    if not history:
        click.echo("No balance history available.")
        return

    for point in history:
        click.echo(f"{point.date.isoformat()} {point.month:3s} {format_money(point.balance):>12s}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
