"""Shared pytest fixtures for pocketledger tests."""

import tempfile
import os
from datetime import date, datetime, UTC
from decimal import Decimal
import pytest

from pocketledger.config import get_settings
from pocketledger.database.factories import create_sqlite_database
from pocketledger.domain.account import AccountService
from pocketledger.domain.bill import BillService
from pocketledger.domain.entities import Transaction, TransactionStatus, TransactionType
from pocketledger.domain.notifications import Notification, NotificationKind, Notifier
from pocketledger.domain.reconciler import BalanceReconciler
from pocketledger.domain.state import LedgerState
from pocketledger.domain.transaction import TransactionService


class RecordingNotifier(Notifier):
    """Keeps notifications in memory, oldest first."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def titles(self, kind: NotificationKind | None = None) -> list[str]:
        return [n.title for n in self.notifications if kind is None or n.kind == kind]


USER_ID = "user-1"
OTHER_USER_ID = "user-2"

# Fixed "today" for bill status tests
TODAY = date(2025, 8, 10)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; reset them around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_path():
    """Path to a temporary SQLite file, removed after the test."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    if os.path.exists(path):
        os.unlink(path)


@pytest.fixture
def temp_db(db_path):
    """Create a temporary database for testing, scoped to USER_ID."""
    db = create_sqlite_database(database_path=db_path, user_id=USER_ID)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()


@pytest.fixture
def other_user_db(db_path, temp_db):
    """Same database file as temp_db, authenticated as another user."""
    db = create_sqlite_database(database_path=db_path, user_id=OTHER_USER_ID)
    yield db
    db.disconnect()


@pytest.fixture
def no_aggregates_db(db_path, temp_db):
    """Same database file as temp_db with the aggregate procedures disabled."""
    db = create_sqlite_database(database_path=db_path, user_id=USER_ID, aggregates_enabled=False)
    yield db
    db.disconnect()


@pytest.fixture
def anonymous_db(db_path, temp_db):
    """Same database file as temp_db with no authenticated user."""
    db = create_sqlite_database(database_path=db_path)
    yield db
    db.disconnect()


@pytest.fixture
def notifier():
    """Notifier that records everything it is given."""
    return RecordingNotifier()


@pytest.fixture
def reconciler(temp_db):
    """Create a BalanceReconciler with a temporary database."""
    return BalanceReconciler(temp_db)


@pytest.fixture
def account_service(temp_db, notifier):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db, notifier=notifier)


@pytest.fixture
def transaction_service(temp_db, notifier):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db, notifier=notifier)


@pytest.fixture
def bill_service(temp_db, notifier):
    """Create a BillService whose clock is pinned to TODAY."""
    return BillService(temp_db, notifier=notifier, clock=lambda: TODAY)


@pytest.fixture
def state():
    """Empty client-side ledger state."""
    return LedgerState()


@pytest.fixture
def sample_account(temp_db):
    """Create a sample checking account with a 100.00 initial balance."""
    account_id = temp_db.create_account(
        name="Test Account",
        type="checking",
        institution="Test Bank",
        initial_balance=Decimal("100.00"),
    )
    return temp_db.get_account(account_id)


@pytest.fixture
def second_account(temp_db):
    """Create a second account with no initial balance."""
    account_id = temp_db.create_account(name="Savings", type="savings")
    return temp_db.get_account(account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def make_transaction():
    """Factory for Transaction entities that never touch the database."""
    return _make_transaction


@pytest.fixture
def today():
    """Pinned current date used by bill tests."""
    return TODAY


def _make_transaction(
    id: int = 1,
    amount: str = "10.00",
    type: TransactionType = TransactionType.EXPENSE,
    source_account_id: int | None = None,
    destination_account_id: int | None = None,
    status: TransactionStatus = TransactionStatus.COMPLETED,
    txn_date: date = date(2025, 1, 1),
) -> Transaction:
    """Build a Transaction entity without touching the database."""
    return Transaction(
        id=id,
        user_id=USER_ID,
        name=f"Transaction {id}",
        description=None,
        amount=Decimal(amount),
        type=type,
        source_account_id=source_account_id,
        destination_account_id=destination_account_id,
        status=status,
        date=txn_date,
        created_at=datetime.now(UTC),
    )


@pytest.fixture
def run_cli(cli_runner, db_path):
    """Invoke the CLI against the temporary database as USER_ID."""
    from pocketledger.cli.main import cli

    def run(*args, user=USER_ID, **kwargs):
        base = ["--db-path", db_path]
        if user is not None:
            base += ["--user", user]
        return cli_runner.invoke(cli, [*base, *args], **kwargs)

    return run
