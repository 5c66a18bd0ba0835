"""In-memory client state for accounts and bills.

One LedgerState is created by the composition root (the CLI, or a test) and
passed to whatever needs it. Each successful refresh replaces a list
wholesale; the last refresh to finish wins.
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from pocketledger.domain.entities import AccountWithBalance, BillWithStatus, PortfolioTotals


def compute_totals(accounts: list[AccountWithBalance]) -> PortfolioTotals:
    """Sum balances and activity across accounts.

    Args:
        accounts: Enriched accounts

    Returns:
        PortfolioTotals for the given accounts
    """
    return PortfolioTotals(
        total_balance=sum((a.current_balance for a in accounts), Decimal("0")),
        total_income=sum((a.total_income for a in accounts), Decimal("0")),
        total_expenses=sum((a.total_expenses for a in accounts), Decimal("0")),
        active_accounts=sum(1 for a in accounts if a.is_active),
    )


class LedgerState:
    """Single owner of the cached account and bill lists."""

    def __init__(self) -> None:
        self._accounts: tuple[AccountWithBalance, ...] = ()
        self._bills: tuple[BillWithStatus, ...] = ()
        self.accounts_refreshed_at: Optional[datetime] = None
        self.bills_refreshed_at: Optional[datetime] = None

    @property
    def accounts(self) -> list[AccountWithBalance]:
        return list(self._accounts)

    @property
    def bills(self) -> list[BillWithStatus]:
        return list(self._bills)

    @property
    def totals(self) -> PortfolioTotals:
        return compute_totals(list(self._accounts))

    def replace_accounts(self, accounts: list[AccountWithBalance]) -> None:
        self._accounts = tuple(accounts)
        self.accounts_refreshed_at = datetime.now(UTC)

    def replace_bills(self, bills: list[BillWithStatus]) -> None:
        self._bills = tuple(bills)
        self.bills_refreshed_at = datetime.now(UTC)

    def upsert_account(self, account: AccountWithBalance) -> None:
        """Replace the cached entry for an account, or append it."""
        if self.get_account(account.id) is None:
            self._accounts = self._accounts + (account,)
        else:
            self._accounts = tuple(account if a.id == account.id else a for a in self._accounts)

    def remove_account(self, account_id: int) -> None:
        self._accounts = tuple(a for a in self._accounts if a.id != account_id)

    def get_account(self, account_id: int) -> Optional[AccountWithBalance]:
        for account in self._accounts:
            if account.id == account_id:
                return account
        return None

    def clear(self) -> None:
        self._accounts = ()
        self._bills = ()
        self.accounts_refreshed_at = None
        self.bills_refreshed_at = None
