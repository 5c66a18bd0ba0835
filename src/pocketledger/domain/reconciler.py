"""Account balance reconciliation.

Balances come from the ledger store's aggregate procedures when they are
available. When an aggregate fails with a store-side error, the balance is
rebuilt by replaying the account's completed transactions on top of its
initial balance.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    AccountSummary,
    CREDIT_TYPES,
    DEBIT_TYPES,
    SummarySource,
    Transaction,
    TransactionStatus,
)
from pocketledger.domain.errors import (
    AggregateUnavailableError,
    LedgerError,
    LedgerUnavailableError,
)

logger = logging.getLogger(__name__)

# Primary-path errors that are recovered by replaying transactions. Anything
# else (permission, not found, authentication) is surfaced to the caller.
FALLBACK_ERRORS = (AggregateUnavailableError, LedgerUnavailableError)

ZERO = Decimal("0")


def transaction_effect(transaction: Transaction, account_id: int) -> Decimal:
    """Signed effect of one transaction on an account's balance.

    The stored sign of the amount is ignored. An account that is the source
    is debited for DEBIT_TYPES; an account that is the destination is
    credited for CREDIT_TYPES. Every other combination is a no-op.
    """
    if transaction.status != TransactionStatus.COMPLETED:
        return ZERO

    amount = abs(transaction.amount)
    if transaction.source_account_id == account_id:
        return -amount if transaction.type in DEBIT_TYPES else ZERO
    if transaction.destination_account_id == account_id:
        return amount if transaction.type in CREDIT_TYPES else ZERO
    return ZERO


def replay_transactions(
    account_id: int,
    initial_balance: Optional[Decimal],
    transactions: Iterable[Transaction],
) -> AccountSummary:
    """Fold transactions over an initial balance.

    Args:
        account_id: Account whose balance is being rebuilt
        initial_balance: Opening balance; None is treated as 0
        transactions: Transactions referencing the account

    Returns:
        AccountSummary with all five fields rebuilt from the transactions
    """
    balance = initial_balance if initial_balance is not None else ZERO
    income = ZERO
    expenses = ZERO
    count = 0
    last_date: Optional[date] = None

    for txn in transactions:
        if txn.status != TransactionStatus.COMPLETED:
            continue
        if account_id not in (txn.source_account_id, txn.destination_account_id):
            continue

        count += 1
        if last_date is None or txn.date > last_date:
            last_date = txn.date

        effect = transaction_effect(txn, account_id)
        balance += effect
        if effect > 0:
            income += effect
        elif effect < 0:
            expenses -= effect

    return AccountSummary(
        current_balance=balance,
        total_income=income,
        total_expenses=expenses,
        transaction_count=count,
        last_transaction_date=last_date,
        source=SummarySource.REPLAY,
    )


class BalanceReconciler:
    """Computes account balances with an aggregate-first, replay-second strategy."""

    def __init__(self, db: Database):
        """Initialize balance reconciler.

        Args:
            db: Database instance
        """
        self.db = db

    def get_account_summary(self, account_id: int, is_demo: bool = False) -> AccountSummary:
        """Get the balance and activity summary for an account.

        Args:
            account_id: Account ID
            is_demo: Use the demo table set

        Returns:
            The aggregate summary verbatim, the replayed summary if the
            aggregate is unavailable, or a zero summary if both fail

        Raises:
            PermissionDeniedError: If the account belongs to another user
            NotFoundError: If the account does not exist
        """
        try:
            return self.db.get_account_summary(account_id, is_demo=is_demo)
        except FALLBACK_ERRORS as exc:
            logger.warning(
                "Aggregate summary failed for account %s, replaying transactions: %s",
                account_id,
                exc,
            )

        try:
            return self.reconcile_manually(account_id, is_demo=is_demo)
        except LedgerError:
            logger.exception("Manual reconciliation failed for account %s", account_id)
            return AccountSummary.empty()

    def reconcile_manually(
        self,
        account_id: int,
        as_of_date: Optional[date] = None,
        is_demo: bool = False,
    ) -> AccountSummary:
        """Rebuild an account summary by replaying completed transactions.

        Args:
            account_id: Account ID
            as_of_date: If given, only transactions dated on or before it count
            is_demo: Use the demo table set

        Raises:
            LedgerError: If the account or its transactions cannot be fetched
        """
        account = self.db.get_account(account_id, is_demo=is_demo)
        initial_balance = account.initial_balance if account is not None else ZERO

        transactions = self.db.list_transactions(
            account_id=account_id,
            status=TransactionStatus.COMPLETED.value,
            end_date=as_of_date,
            ascending=True,
            is_demo=is_demo,
        )
        summary = replay_transactions(account_id, initial_balance, transactions)
        logger.debug(
            "Replayed %d transactions for account %s: balance %s",
            summary.transaction_count,
            account_id,
            summary.current_balance,
        )
        return summary

    def calculate_account_balance_manual(self, account_id: int, is_demo: bool = False) -> Decimal:
        """Replay-only balance for an account; 0 if the replay fails."""
        try:
            return self.reconcile_manually(account_id, is_demo=is_demo).current_balance
        except LedgerError:
            logger.exception("Error calculating account balance manually for account %s", account_id)
            return ZERO

    def get_account_balance(
        self,
        account_id: int,
        as_of_date: Optional[date] = None,
        is_demo: bool = False,
    ) -> Decimal:
        """Get an account's balance, optionally as of a past date.

        Args:
            account_id: Account ID
            as_of_date: Point in time for the balance (defaults to today)
            is_demo: Use the demo table set

        Returns:
            Balance from the aggregate procedure, or from a replay bounded by
            as_of_date if the aggregate is unavailable, or 0 if both fail
        """
        try:
            return self.db.calculate_account_balance(
                account_id, as_of_date or date.today(), is_demo=is_demo
            )
        except FALLBACK_ERRORS as exc:
            logger.warning(
                "Aggregate balance failed for account %s, replaying transactions: %s",
                account_id,
                exc,
            )

        try:
            return self.reconcile_manually(
                account_id, as_of_date=as_of_date, is_demo=is_demo
            ).current_balance
        except LedgerError:
            logger.exception("Error getting account balance for account %s", account_id)
            return ZERO
