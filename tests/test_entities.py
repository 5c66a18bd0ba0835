"""Tests for domain entities."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from pocketledger.domain.entities import (
    Account,
    AccountSummary,
    AccountType,
    AccountWithBalance,
    Bill,
    BillStatus,
    CREDIT_TYPES,
    DEBIT_TYPES,
    SummarySource,
    TransactionType,
)


def test_debit_and_credit_types():
    assert DEBIT_TYPES == {
        TransactionType.EXPENSE,
        TransactionType.LOAN_REPAYMENT,
        TransactionType.DEBT,
        TransactionType.TRANSFER,
    }
    assert CREDIT_TYPES == {
        TransactionType.INCOME,
        TransactionType.LOAN,
        TransactionType.DEBT_COLLECTION,
        TransactionType.TRANSFER,
    }
    assert TransactionType.OPENING_BALANCE not in DEBIT_TYPES | CREDIT_TYPES
    assert TransactionType.OTHER not in DEBIT_TYPES | CREDIT_TYPES


def test_enums_compare_to_strings():
    assert TransactionType("income") == "income"
    assert BillStatus.CANCELLED == "cancelled"


def test_empty_summary():
    summary = AccountSummary.empty(Decimal("12.50"))

    assert summary.current_balance == Decimal("12.50")
    assert summary.total_income == Decimal("0")
    assert summary.total_expenses == Decimal("0")
    assert summary.transaction_count == 0
    assert summary.last_transaction_date is None
    assert summary.source == SummarySource.NONE


def test_account_with_balance_from_summary():
    now = datetime.now(UTC)
    account = Account(
        id=3,
        user_id="user-1",
        name="Checking",
        type=AccountType.CHECKING,
        institution=None,
        account_number=None,
        initial_balance=Decimal("100"),
        initial_balance_date=now,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    summary = AccountSummary(
        current_balance=Decimal("120"),
        total_income=Decimal("50"),
        total_expenses=Decimal("30"),
        transaction_count=2,
        last_transaction_date=date(2025, 1, 5),
        source=SummarySource.REPLAY,
    )

    enriched = AccountWithBalance.from_summary(account, summary)

    assert enriched.id == 3
    assert enriched.name == "Checking"
    assert enriched.initial_balance == Decimal("100")
    assert enriched.current_balance == Decimal("120")
    assert enriched.transaction_count == 2
    assert enriched.last_transaction_date == date(2025, 1, 5)


def test_entities_are_frozen():
    summary = AccountSummary.empty()

    with pytest.raises(AttributeError):
        summary.current_balance = Decimal("1")


def test_bill_ui_status():
    now = datetime.now(UTC)
    bill = Bill(
        id=1,
        user_id="user-1",
        name="Rent",
        amount=Decimal("1200"),
        due_date=date(2025, 8, 1),
        status=BillStatus.CANCELLED,
        account_id=None,
        created_at=now,
        updated_at=now,
        metadata={"ui_status": "ended"},
    )

    assert bill.ui_status == "ended"
    assert Bill(**{**bill.__dict__, "metadata": {}}).ui_status is None
