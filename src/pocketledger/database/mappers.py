"""Mapper functions to convert between domain models and SQLAlchemy models.

Rows are loosely shaped (nullable columns, free-form metadata), so defaulting
rules live here: a missing initial balance is 0, missing metadata is an
empty dict, and transaction types the ledger does not model become OTHER.
An unrecognised transaction status is read as PENDING, so it never counts
towards a balance.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, TypeVar

from pocketledger.domain import entities as domain

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def _enum_or_default(enum_cls: type[E], value: Any, default: E) -> E:
    """Map a stored string onto an enum, falling back to default for unknown values."""
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug("Unknown %s %r, using %s", enum_cls.__name__, value, default.value)
        return default


def account_to_domain(orm_account: Any) -> domain.Account:
    """Convert SQLAlchemy account row to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        name=orm_account.name,
        type=_enum_or_default(domain.AccountType, orm_account.type, domain.AccountType.OTHER),
        institution=orm_account.institution,
        account_number=orm_account.account_number,
        initial_balance=_decimal(orm_account.initial_balance),
        initial_balance_date=orm_account.initial_balance_date or orm_account.created_at,
        is_active=bool(orm_account.is_active),
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at or orm_account.created_at,
    )


def transaction_to_domain(orm_transaction: Any) -> domain.Transaction:
    """Convert SQLAlchemy transaction row to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        name=orm_transaction.name,
        description=orm_transaction.description,
        amount=_decimal(orm_transaction.amount),
        type=_enum_or_default(domain.TransactionType, orm_transaction.type, domain.TransactionType.OTHER),
        source_account_id=orm_transaction.source_account_id,
        destination_account_id=orm_transaction.destination_account_id,
        status=_enum_or_default(
            domain.TransactionStatus, orm_transaction.status, domain.TransactionStatus.PENDING
        ),
        date=orm_transaction.date,
        created_at=orm_transaction.created_at,
    )


def bill_to_domain(orm_bill: Any) -> domain.Bill:
    """Convert SQLAlchemy bill row to domain Bill entity."""
    return domain.Bill(
        id=orm_bill.id,
        user_id=orm_bill.user_id,
        name=orm_bill.name,
        amount=_decimal(orm_bill.amount),
        due_date=orm_bill.due_date,
        status=domain.BillStatus(orm_bill.status),
        account_id=orm_bill.account_id,
        created_at=orm_bill.created_at,
        updated_at=orm_bill.updated_at or orm_bill.created_at,
        metadata=dict(orm_bill.bill_metadata or {}),
    )


def bill_payment_to_domain(orm_payment: Any) -> domain.BillPayment:
    """Convert SQLAlchemy bill payment row to domain BillPayment entity."""
    return domain.BillPayment(
        id=orm_payment.id,
        user_id=orm_payment.user_id,
        bill_id=orm_payment.bill_id,
        account_id=orm_payment.account_id,
        transaction_id=orm_payment.transaction_id,
        amount=_decimal(orm_payment.amount),
        payment_date=orm_payment.payment_date,
        status=domain.PaymentStatus(orm_payment.status),
        created_at=orm_payment.created_at,
    )


def summary_from_row(row: Any, initial_balance: Optional[Decimal]) -> domain.AccountSummary:
    """Build an aggregate AccountSummary from a summary query row."""
    income = _decimal(row.total_income)
    expenses = _decimal(row.total_expenses)
    return domain.AccountSummary(
        current_balance=_decimal(initial_balance) + income - expenses,
        total_income=income,
        total_expenses=expenses,
        transaction_count=int(row.transaction_count or 0),
        last_transaction_date=row.last_transaction_date,
        source=domain.SummarySource.AGGREGATE,
    )
