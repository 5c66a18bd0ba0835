"""Account domain service."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Account as AccountEntity,
    AccountSummary,
    AccountType,
    AccountWithBalance,
    BalanceHistoryPoint,
    PortfolioTotals,
    SummarySource,
    TransactionStatus,
    TransactionType,
)
from pocketledger.domain.errors import (
    DomainError,
    LedgerError,
    NotFoundError,
    ValidationError,
    account_not_found,
)
from pocketledger.domain.notifications import Notifier, NullNotifier
from pocketledger.domain.reconciler import BalanceReconciler
from pocketledger.domain.state import LedgerState, compute_totals

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "type", "institution", "account_number", "is_active")
BALANCE_FIELDS = ("initial_balance", "current_balance", "balance")


class AccountService:
    """Service for managing accounts and their balances."""

    def __init__(
        self,
        db: Database,
        notifier: Optional[Notifier] = None,
        reconciler: Optional[BalanceReconciler] = None,
    ):
        """Initialize account service.

        Args:
            db: Database instance
            notifier: Sink for user-visible notifications
            reconciler: Balance reconciler (defaults to one over db)
        """
        self.db = db
        self.notifier = notifier or NullNotifier()
        self.reconciler = reconciler or BalanceReconciler(db)

    def get_account(self, account_id: int, is_demo: bool = False) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID
            is_demo: Use the demo table set

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id, is_demo=is_demo)

    def list_accounts(self, active_only: bool = True, is_demo: bool = False) -> list[AccountEntity]:
        """List the user's accounts without balances."""
        return self.db.list_accounts(active_only=active_only, is_demo=is_demo)

    def fetch_accounts_with_balances(self, is_demo: bool = False) -> list[AccountWithBalance]:
        """Fetch active accounts, each enriched with its reconciled summary.

        Each account is enriched on its own; an account whose summary cannot
        be produced keeps its initial balance with zeroed activity.

        Args:
            is_demo: Use the demo table set

        Returns:
            Enriched accounts, or an empty list if the accounts cannot be fetched

        Raises:
            AuthenticationError: If no user is authenticated
        """
        self.db.current_user_id()

        try:
            accounts = self.db.list_accounts(active_only=True, is_demo=is_demo)
        except LedgerError as exc:
            logger.exception("Error fetching accounts with balances")
            self.notifier.error("Failed to fetch accounts", str(exc))
            return []

        enriched = [self._enrich(account, is_demo) for account in accounts]
        logger.info(
            "Fetched %d accounts with balances from %s tables",
            len(enriched),
            "demo" if is_demo else "live",
        )
        return enriched

    def _enrich(self, account: AccountEntity, is_demo: bool) -> AccountWithBalance:
        try:
            summary = self.reconciler.get_account_summary(account.id, is_demo=is_demo)
        except (DomainError, LedgerError) as exc:
            logger.warning("Could not reconcile account %s: %s", account.id, exc)
            summary = AccountSummary.empty(account.initial_balance)
        else:
            if summary.source == SummarySource.NONE:
                summary = AccountSummary.empty(account.initial_balance)
        return AccountWithBalance.from_summary(account, summary)

    def compute_totals(self, accounts: list[AccountWithBalance]) -> PortfolioTotals:
        """Sum balances and activity across enriched accounts."""
        return compute_totals(accounts)

    def refresh(self, state: LedgerState, is_demo: bool = False) -> list[AccountWithBalance]:
        """Refetch accounts and replace the list held by state."""
        accounts = self.fetch_accounts_with_balances(is_demo=is_demo)
        state.replace_accounts(accounts)
        return accounts

    def get_account_summary(self, account_id: int, is_demo: bool = False) -> AccountSummary:
        """Get the reconciled summary for one account."""
        return self.reconciler.get_account_summary(account_id, is_demo=is_demo)

    def calculate_account_balance_manual(self, account_id: int, is_demo: bool = False) -> Decimal:
        """Rebuild an account's balance from its transactions; 0 on failure."""
        return self.reconciler.calculate_account_balance_manual(account_id, is_demo=is_demo)

    def get_account_balance(
        self,
        account_id: int,
        is_demo: bool = False,
        as_of_date: Optional[date] = None,
    ) -> Decimal:
        """Get an account's balance, optionally as of a past date; 0 on failure."""
        return self.reconciler.get_account_balance(account_id, as_of_date=as_of_date, is_demo=is_demo)

    def add_account_with_initial_balance(
        self,
        name: str,
        type: str = AccountType.CHECKING.value,
        institution: Optional[str] = None,
        initial_balance: Decimal = Decimal("0"),
        account_number: Optional[str] = None,
        is_demo: bool = False,
    ) -> AccountWithBalance:
        """Create an account, seeding an opening balance transaction.

        A positive initial balance is recorded as one completed
        opening_balance transaction with the new account as source. If that
        write fails the account is still created.

        Args:
            name: Account name
            type: Account type (checking, savings, credit, loan, other)
            institution: Optional institution name
            initial_balance: Opening balance
            account_number: Optional account number
            is_demo: Use the demo table set

        Returns:
            The new account with its reconciled summary

        Raises:
            ValidationError: If name or type is invalid
            AuthenticationError: If no user is authenticated
        """
        try:
            name = _clean_name(name)
            account_type = _parse_account_type(type)
            opening = Decimal(str(initial_balance or 0))

            account_id = self.db.create_account(
                name=name,
                type=account_type.value,
                institution=institution,
                account_number=account_number,
                initial_balance=opening,
                initial_balance_date=datetime.now(UTC),
                is_demo=is_demo,
            )

            if opening > 0:
                self._record_opening_balance(account_id, name, opening, is_demo)

            account = self.db.get_account(account_id, is_demo=is_demo)
            if account is None:
                raise NotFoundError(account_not_found(account_id))
        except (DomainError, LedgerError) as exc:
            logger.error("Error adding account: %s", exc)
            self.notifier.error("Failed to add account", str(exc))
            raise

        self.notifier.success(
            "Account Added Successfully", f"{name} has been added to your accounts"
        )
        summary = self.reconciler.get_account_summary(account_id, is_demo=is_demo)
        return AccountWithBalance.from_summary(account, summary)

    def _record_opening_balance(
        self, account_id: int, name: str, amount: Decimal, is_demo: bool
    ) -> None:
        try:
            self.db.create_transaction(
                name=f"Opening Balance - {name}",
                description="Initial balance when account was added",
                amount=amount,
                type=TransactionType.OPENING_BALANCE.value,
                date=date.today(),
                source_account_id=account_id,
                status=TransactionStatus.COMPLETED.value,
                is_demo=is_demo,
            )
        except LedgerError:
            logger.exception("Error creating opening balance transaction for account %s", account_id)

    def update_account(
        self, account_id: int, updates: dict[str, Any], is_demo: bool = False
    ) -> AccountWithBalance:
        """Update account details. Balances cannot be changed this way.

        Args:
            account_id: Account ID to update
            updates: Fields to change (name, type, institution, account_number, is_active)
            is_demo: Use the demo table set

        Returns:
            The updated account with its current balance and zeroed activity

        Raises:
            ValidationError: If a balance or unknown field is given
            NotFoundError: If the account does not exist
        """
        try:
            clean = _validate_updates(updates)
            account = self.db.update_account(account_id, clean, is_demo=is_demo)
        except (DomainError, LedgerError) as exc:
            logger.error("Error updating account %s: %s", account_id, exc)
            self.notifier.error("Failed to update account", str(exc))
            raise

        self.notifier.success(
            "Account Updated", "Account information has been updated successfully"
        )
        balance = self.get_account_balance(account_id, is_demo=is_demo)
        return AccountWithBalance.from_summary(account, AccountSummary.empty(balance))

    def delete_account(self, account_id: int, is_demo: bool = False) -> None:
        """Delete an account.

        Accounts referenced by any transaction are deactivated instead of
        removed.

        Args:
            account_id: Account ID to delete
            is_demo: Use the demo table set

        Raises:
            NotFoundError: If the account does not exist
        """
        try:
            account = self.db.get_account(account_id, is_demo=is_demo)
            if account is None:
                raise NotFoundError(account_not_found(account_id))

            if self.db.count_account_transactions(account_id, is_demo=is_demo) > 0:
                self.db.update_account(account_id, {"is_active": False}, is_demo=is_demo)
                logger.info("Deactivated account %s", account_id)
                self.notifier.success(
                    "Account Deactivated",
                    "Account has been deactivated due to existing transactions",
                )
            else:
                self.db.delete_account(account_id, is_demo=is_demo)
                logger.info("Deleted account %s", account_id)
                self.notifier.success("Account Deleted", "Account has been permanently deleted")
        except (DomainError, LedgerError) as exc:
            logger.error("Error deleting account %s: %s", account_id, exc)
            self.notifier.error("Failed to delete account", str(exc))
            raise

    def get_account_balance_history(
        self,
        account_id: int,
        months: int = 12,
        is_demo: bool = False,
        today: Optional[date] = None,
    ) -> list[BalanceHistoryPoint]:
        """Balance at the first day of each of the last `months` months, oldest first.

        Returns an empty list if any balance lookup raises.
        """
        first_of_month = (today or date.today()).replace(day=1)
        history: list[BalanceHistoryPoint] = []

        try:
            for offset in range(months - 1, -1, -1):
                target = first_of_month - relativedelta(months=offset)
                balance = self.get_account_balance(account_id, is_demo=is_demo, as_of_date=target)
                history.append(
                    BalanceHistoryPoint(month=target.strftime("%b"), balance=balance, date=target)
                )
        except (DomainError, LedgerError):
            logger.exception("Error getting account balance history for account %s", account_id)
            return []

        return history


def _clean_name(name: str) -> str:
    if name is None or not name.strip():
        raise ValidationError("Account name is required")
    return name.strip()


def _parse_account_type(value: str | AccountType) -> AccountType:
    try:
        return AccountType(value)
    except ValueError:
        valid = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{value}'. Valid types: {valid}")


def _validate_updates(updates: dict[str, Any]) -> dict[str, Any]:
    balance_fields = [f for f in BALANCE_FIELDS if f in updates]
    if balance_fields:
        raise ValidationError(
            "Account balance cannot be updated directly; record a transaction instead"
        )

    unknown = sorted(set(updates) - set(UPDATABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown account fields: {', '.join(unknown)}")

    clean = dict(updates)
    if "name" in clean:
        clean["name"] = _clean_name(clean["name"])
    if "type" in clean:
        clean["type"] = _parse_account_type(clean["type"]).value
    if "is_active" in clean:
        clean["is_active"] = bool(clean["is_active"])
    return clean
