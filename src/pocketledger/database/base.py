"""Abstract database interface.

Every operation is scoped to the authenticated user and accepts an
``is_demo`` flag selecting the demo or live table set.
"""

from abc import ABC, abstractmethod
from typing import ContextManager, Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly; the domain package imports its services lazily
from pocketledger.domain.entities import (
    Account,
    AccountSummary,
    Bill,
    BillPayment,
    Transaction,
)


class Database(ABC):
    """Abstract ledger store interface for pocketledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> ContextManager[None]:
        """Context manager grouping writes so they are committed together.

        If the block raises, none of the writes made inside it are kept.
        Blocks may be nested; only the outermost one commits.
        """
        pass

    @abstractmethod
    def current_user_id(self) -> str:
        """Return the authenticated user ID.

        Raises:
            AuthenticationError: If no user is authenticated
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        type: str,
        institution: Optional[str] = None,
        account_number: Optional[str] = None,
        initial_balance: Decimal = Decimal("0"),
        initial_balance_date: Optional[datetime] = None,
        is_demo: bool = False,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int, is_demo: bool = False) -> Optional[Account]:
        """Get account by ID, or None if it does not exist."""
        pass

    @abstractmethod
    def list_accounts(self, active_only: bool = True, is_demo: bool = False) -> list[Account]:
        """List the user's accounts, newest first."""
        pass

    @abstractmethod
    def update_account(self, account_id: int, updates: dict[str, Any], is_demo: bool = False) -> Account:
        """Update account fields. Returns the updated account."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int, is_demo: bool = False) -> None:
        """Remove an account row."""
        pass

    @abstractmethod
    def count_account_transactions(self, account_id: int, is_demo: bool = False) -> int:
        """Count transactions of any status referencing the account on either side."""
        pass

    # Aggregate procedures
    @abstractmethod
    def get_account_summary(self, account_id: int, is_demo: bool = False) -> AccountSummary:
        """Aggregate an account's balance and activity from completed transactions.

        Raises:
            AggregateUnavailableError: If the aggregate procedure is unavailable
        """
        pass

    @abstractmethod
    def calculate_account_balance(
        self, account_id: int, as_of_date: date, is_demo: bool = False
    ) -> Decimal:
        """Aggregate an account's balance from transactions dated on or before as_of_date.

        Raises:
            AggregateUnavailableError: If the aggregate procedure is unavailable
        """
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        name: str,
        amount: Decimal,
        type: str,
        date: date,
        source_account_id: Optional[int] = None,
        destination_account_id: Optional[int] = None,
        status: str = "completed",
        description: Optional[str] = None,
        is_demo: bool = False,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int, is_demo: bool = False) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        status: Optional[str] = None,
        end_date: Optional[date] = None,
        ascending: bool = False,
        is_demo: bool = False,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            account_id: Only transactions with this account as source or destination
            status: Only transactions with this status
            end_date: Only transactions dated on or before this date
            ascending: Order by date ascending instead of newest first
            is_demo: Use the demo table set
        """
        pass

    # Bill operations
    @abstractmethod
    def create_bill(
        self,
        name: str,
        amount: Decimal,
        due_date: date,
        status: str = "upcoming",
        account_id: Optional[int] = None,
        metadata: Optional[dict[str, Any]] = None,
        is_demo: bool = False,
    ) -> int:
        """Create a bill. Returns bill ID."""
        pass

    @abstractmethod
    def get_bill(self, bill_id: int, is_demo: bool = False) -> Optional[Bill]:
        """Get bill by ID."""
        pass

    @abstractmethod
    def list_bills(self, is_demo: bool = False) -> list[Bill]:
        """List the user's bills ordered by due date."""
        pass

    @abstractmethod
    def update_bill_status(
        self,
        bill_id: int,
        status: str,
        metadata: Optional[dict[str, Any]],
        is_demo: bool = False,
    ) -> Bill:
        """Replace a bill's persisted status and metadata. Returns the updated bill."""
        pass

    @abstractmethod
    def update_bill(self, bill_id: int, updates: dict[str, Any], is_demo: bool = False) -> Bill:
        """Update a bill's details (name, amount, due_date, account_id). Returns the updated bill."""
        pass

    @abstractmethod
    def delete_bill(self, bill_id: int, is_demo: bool = False) -> None:
        """Delete a bill and its payments."""
        pass

    # Bill payment operations
    @abstractmethod
    def create_bill_payment(
        self,
        bill_id: int,
        amount: Decimal,
        payment_date: date,
        account_id: Optional[int] = None,
        transaction_id: Optional[int] = None,
        status: str = "completed",
        is_demo: bool = False,
    ) -> int:
        """Record a bill payment. Returns payment ID."""
        pass

    @abstractmethod
    def get_bill_payment(self, payment_id: int, is_demo: bool = False) -> Optional[BillPayment]:
        """Get bill payment by ID."""
        pass

    @abstractmethod
    def list_bill_payments(
        self,
        bill_id: Optional[int] = None,
        status: Optional[str] = None,
        is_demo: bool = False,
    ) -> list[BillPayment]:
        """List bill payments, most recent first, optionally for one bill or status."""
        pass

    @abstractmethod
    def delete_bill_payment(self, payment_id: int, is_demo: bool = False) -> None:
        """Delete a bill payment. The transaction it recorded is kept."""
        pass
