"""Domain model entities for pocketledger.

These are pure data classes representing business concepts, independent of
database schema. Rows coming out of the ledger store are mapped into these
at the boundary, with defaults applied there rather than in business logic.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class AccountType(str, Enum):
    """Kinds of accounts a user can hold."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    LOAN = "loan"
    OTHER = "other"


class TransactionType(str, Enum):
    """Ledger transaction types."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    LOAN = "loan"
    LOAN_REPAYMENT = "loan_repayment"
    DEBT = "debt"
    DEBT_COLLECTION = "debt_collection"
    OPENING_BALANCE = "opening_balance"
    # Stored types this ledger does not model (split expenses, investments, ...)
    OTHER = "other"


# Types that debit an account when it is the source of a transaction
DEBIT_TYPES = frozenset(
    {
        TransactionType.EXPENSE,
        TransactionType.LOAN_REPAYMENT,
        TransactionType.DEBT,
        TransactionType.TRANSFER,
    }
)

# Types that credit an account when it is the destination of a transaction
CREDIT_TYPES = frozenset(
    {
        TransactionType.INCOME,
        TransactionType.LOAN,
        TransactionType.DEBT_COLLECTION,
        TransactionType.TRANSFER,
    }
)


class TransactionStatus(str, Enum):
    """Transaction settlement status. Only completed transactions count."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class BillStatus(str, Enum):
    """Bill status as persisted in the ledger store."""

    UPCOMING = "upcoming"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    PARTIAL = "partial"


class BillDisplayStatus(str, Enum):
    """Presentation status derived from a bill's persisted state."""

    DUE_TODAY = "due_today"
    DUE_TOMORROW = "due_tomorrow"
    OVERDUE = "overdue"
    DUE_WEEK = "due_week"
    PAUSED = "paused"
    PAID = "paid"
    ENDED = "ended"


class PaymentStatus(str, Enum):
    """Bill payment status."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class SummarySource(str, Enum):
    """Which reconciliation path produced a summary."""

    AGGREGATE = "aggregate"
    REPLAY = "replay"
    NONE = "none"


@dataclass(frozen=True)
class Account:
    """Account domain entity."""

    id: int
    user_id: str
    name: str
    type: AccountType
    institution: Optional[str]
    account_number: Optional[str]
    initial_balance: Decimal
    initial_balance_date: datetime
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    user_id: str
    name: str
    description: Optional[str]
    amount: Decimal
    type: TransactionType
    source_account_id: Optional[int]
    destination_account_id: Optional[int]
    status: TransactionStatus
    date: date
    created_at: datetime


@dataclass(frozen=True)
class AccountSummary:
    """Balance and activity summary for one account."""

    current_balance: Decimal
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    transaction_count: int = 0
    last_transaction_date: Optional[date] = None
    source: SummarySource = SummarySource.NONE

    @classmethod
    def empty(cls, balance: Decimal = Decimal("0")) -> "AccountSummary":
        """Summary carrying only a balance, with zeroed activity fields."""
        return cls(current_balance=balance)


@dataclass(frozen=True)
class AccountWithBalance:
    """Account enriched with its reconciled summary."""

    account: Account
    current_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    transaction_count: int
    last_transaction_date: Optional[date]

    @property
    def id(self) -> int:
        return self.account.id

    @property
    def name(self) -> str:
        return self.account.name

    @property
    def initial_balance(self) -> Decimal:
        return self.account.initial_balance

    @property
    def is_active(self) -> bool:
        return self.account.is_active

    @classmethod
    def from_summary(cls, account: Account, summary: AccountSummary) -> "AccountWithBalance":
        return cls(
            account=account,
            current_balance=summary.current_balance,
            total_income=summary.total_income,
            total_expenses=summary.total_expenses,
            transaction_count=summary.transaction_count,
            last_transaction_date=summary.last_transaction_date,
        )


@dataclass(frozen=True)
class PortfolioTotals:
    """Totals across a user's accounts."""

    total_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    active_accounts: int


@dataclass(frozen=True)
class BalanceHistoryPoint:
    """Account balance at the first day of a month."""

    month: str
    balance: Decimal
    date: date


@dataclass(frozen=True)
class Bill:
    """Bill domain entity."""

    id: int
    user_id: str
    name: str
    amount: Decimal
    due_date: date
    status: BillStatus
    account_id: Optional[int]
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def ui_status(self) -> Optional[str]:
        """Finer-grained status carried in metadata, if any."""
        return self.metadata.get("ui_status")


@dataclass(frozen=True)
class BillWithStatus:
    """Bill paired with its derived presentation status."""

    bill: Bill
    display_status: BillDisplayStatus


@dataclass(frozen=True)
class BillPayment:
    """Payment made against a bill."""

    id: int
    user_id: str
    bill_id: int
    account_id: Optional[int]
    transaction_id: Optional[int]
    amount: Decimal
    payment_date: date
    status: PaymentStatus
    created_at: datetime


@dataclass(frozen=True)
class PaymentStats:
    """Totals over a bill's completed payments."""

    total_paid: Decimal = Decimal("0")
    payment_count: int = 0
    last_payment_date: Optional[date] = None
    average_payment: Decimal = Decimal("0")
