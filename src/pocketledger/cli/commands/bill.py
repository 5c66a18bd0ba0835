"""Bill management commands."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.formatting import format_money
from pocketledger.domain.account import AccountService
from pocketledger.domain.bill import BillService
from pocketledger.domain.entities import BillWithStatus
from pocketledger.domain.errors import DomainError, LedgerError
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date


def _service(ctx) -> BillService:
    return BillService(ctx.obj["db"], notifier=ctx.obj["notifier"])


def _describe(bill: BillWithStatus) -> str:
    status = bill.display_status.value.replace("_", " ")
    return (
        f"ID: {bill.bill.id:3d} | {bill.bill.name:20s} | {format_money(bill.bill.amount):>10s} | "
        f"due {bill.bill.due_date.isoformat()} | {status}"
    )


@click.group()
def bill_group():
    """Manage bills."""
    pass


@bill_group.command("add")
@click.argument("name", metavar="BILL_NAME")
@click.option("--amount", required=True, help="Bill amount (e.g., 89.99)")
@click.option("--due-date", required=True, help="Due date (YYYY-MM-DD or relative like 'tomorrow')")
@click.option("--account", help="Account the bill is usually paid from")
@click.pass_context
def add_bill(ctx, name: str, amount: str, due_date: str, account: str | None) -> None:
    """Add an upcoming bill.

    Examples:
        pocketledger bill add "Electricity" --amount 89.99 --due-date 2025-08-15
        pocketledger bill add "Rent" --amount 1200 --due-date "in 5 days" --account Checking
    """
    service = _service(ctx)

    try:
        bill_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        bill_due = parse_date(due_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(ctx.obj["db"]), account)

    try:
        bill = service.create_bill(
            name=name,
            amount=bill_amount,
            due_date=bill_due,
            account_id=account_id,
            is_demo=ctx.obj["is_demo"],
        )
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added bill '{bill.bill.name}' (ID: {bill.bill.id}), {bill.display_status.value.replace('_', ' ')}")


@bill_group.command("list")
@click.pass_context
def list_bills(ctx) -> None:
    """List bills, most urgent first."""
    service = _service(ctx)

    try:
        bills = service.refresh(ctx.obj["state"], is_demo=ctx.obj["is_demo"])
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    if not bills:
        click.echo("No bills found.")
        return

    click.echo("\nBills:")
    click.echo("-" * 72)
    for bill in bills:
        click.echo(_describe(bill))


def _transition_command(name: str, method: str, help_text: str):
    @click.argument("bill_id", type=int)
    @click.pass_context
    def command(ctx, bill_id: int) -> None:
        service = _service(ctx)
        try:
            bill = getattr(service, method)(bill_id, is_demo=ctx.obj["is_demo"])
        except (DomainError, LedgerError) as e:
            handle_domain_error(ctx, e)
        click.echo(_describe(bill))

    command.__doc__ = help_text
    bill_group.command(name)(command)


_transition_command("pause", "pause", "Pause a bill.")
_transition_command("end", "end", "End a bill. Ended bills can still be resumed.")
_transition_command("resume", "resume", "Resume a paused or ended bill.")
_transition_command("paid", "mark_paid", "Mark a bill as paid without recording a payment.")
_transition_command("unpaid", "unmark_paid", "Return a paid bill to its due-date status.")


@bill_group.command("pay")
@click.argument("bill_id", type=int)
@click.option("--account", required=True, help="Account name or ID to pay from")
@click.option("--amount", help="Amount paid (defaults to the bill amount)")
@click.option("--date", "payment_date", help="Payment date (defaults to today)")
@click.pass_context
def pay_bill(ctx, bill_id: int, account: str, amount: str | None, payment_date: str | None) -> None:
    """Pay a bill from an account.

    Records an expense transaction on the account and marks the bill paid.

    Examples:
        pocketledger bill pay 4 --account Checking
        pocketledger bill pay 4 --account 1 --amount 75.00 --date yesterday
    """
    service = _service(ctx)
    account_id = resolve_account_or_exit(ctx, AccountService(ctx.obj["db"]), account)

    paid_amount = None
    if amount is not None:
        try:
            paid_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    paid_on = None
    if payment_date is not None:
        try:
            paid_on = parse_date(payment_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        payment = service.pay_bill(
            bill_id,
            account_id,
            amount=paid_amount,
            payment_date=paid_on,
            is_demo=ctx.obj["is_demo"],
        )
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Recorded payment {payment.id} of {format_money(payment.amount)} "
        f"on {payment.payment_date.isoformat()} (transaction {payment.transaction_id})"
    )


@bill_group.command("payments")
@click.argument("bill_id", type=int, required=False)
@click.pass_context
def list_payments(ctx, bill_id: int | None) -> None:
    """List bill payments, optionally for one bill."""
    service = _service(ctx)

    try:
        payments = service.list_payments(bill_id=bill_id, is_demo=ctx.obj["is_demo"])
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    if not payments:
        click.echo("No payments found.")
        return

    for payment in payments:
        click.echo(
            f"ID: {payment.id:3d} | bill {payment.bill_id} | {payment.payment_date.isoformat()} | "
            f"{format_money(payment.amount):>10s} | {payment.status.value}"
        )


@bill_group.command("update")
@click.argument("bill_id", type=int)
@click.option("--name", help="New bill name")
@click.option("--amount", help="New bill amount")
@click.option("--due-date", help="New due date (YYYY-MM-DD or relative like 'next month')")
@click.option("--account", help="Account the bill is usually paid from")
@click.pass_context
def update_bill(
    ctx, bill_id: int, name: str | None, amount: str | None, due_date: str | None, account: str | None
) -> None:
    """Update a bill's details.

    Examples:
        pocketledger bill update 3 --amount 95.50
        pocketledger bill update 3 --due-date "next month" --account Checking
    """
    service = _service(ctx)
    updates = {}

    if name is not None:
        updates["name"] = name
    if amount is not None:
        try:
            updates["amount"] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    if due_date is not None:
        try:
            updates["due_date"] = parse_date(due_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    if account is not None:
        updates["account_id"] = resolve_account_or_exit(ctx, AccountService(ctx.obj["db"]), account)

    if not updates:
        click.echo("Nothing to update.")
        return

    try:
        bill = service.update_bill(bill_id, updates, is_demo=ctx.obj["is_demo"])
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    click.echo(_describe(bill))


@bill_group.command("stats")
@click.argument("bill_id", type=int)
@click.pass_context
def payment_stats(ctx, bill_id: int) -> None:
    """Show totals over a bill's completed payments."""
    service = _service(ctx)

    try:
        stats = service.get_payment_stats(bill_id, is_demo=ctx.obj["is_demo"])
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    last = stats.last_payment_date.isoformat() if stats.last_payment_date else "never"
    click.echo(f"Total paid: {format_money(stats.total_paid)}")
    click.echo(f"Payments: {stats.payment_count}")
    click.echo(f"Last payment: {last}")
    click.echo(f"Average payment: {format_money(stats.average_payment)}")


@bill_group.command("delete-payment")
@click.argument("payment_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_payment(ctx, payment_id: int, yes: bool) -> None:
    """Delete a bill payment. The recorded transaction is kept."""
    service = _service(ctx)

    if not yes and not click.confirm(f"Are you sure you want to delete payment {payment_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_payment(payment_id, is_demo=ctx.obj["is_demo"])
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted payment {payment_id}")


@bill_group.command("delete")
@click.argument("bill_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_bill(ctx, bill_id: int, yes: bool) -> None:
    """Delete a bill and its payments."""
    service = _service(ctx)

    if not yes and not click.confirm(f"Are you sure you want to delete bill {bill_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_bill(bill_id, is_demo=ctx.obj["is_demo"])
    except (DomainError, LedgerError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted bill {bill_id}")


def register_commands(cli):
    """Register bill commands with main CLI."""
    cli.add_command(bill_group, name="bill")
