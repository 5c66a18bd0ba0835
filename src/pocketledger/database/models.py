"""SQLAlchemy models for pocketledger database.

Every table exists twice: once in the live table set and once in the demo
table set. Both sets share their column definitions through mixins.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from decimal import Decimal
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    JSON,
    create_engine,
)
from sqlalchemy.orm import declarative_base, declared_attr, sessionmaker, Session

from pocketledger.database.tables import TableMap, LIVE_TABLES, DEMO_TABLES

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AccountColumns:
    """Columns of an accounts table."""

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="checking")
    institution = Column(String, nullable=True)
    account_number = Column(String, nullable=True)
    initial_balance = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    initial_balance_date = Column(DateTime, default=_utcnow, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class TransactionColumns:
    """Columns of a transactions table."""

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(String, nullable=False)
    status = Column(String, nullable=False, default="completed")
    date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    @declared_attr
    def source_account_id(cls):
        return Column(Integer, ForeignKey(f"{cls.__accounts_table__}.id"), nullable=True, index=True)

    @declared_attr
    def destination_account_id(cls):
        return Column(Integer, ForeignKey(f"{cls.__accounts_table__}.id"), nullable=True, index=True)


class BillColumns:
    """Columns of a bills table."""

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="upcoming")
    # "metadata" is reserved on declarative classes
    bill_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    @declared_attr
    def account_id(cls):
        return Column(Integer, ForeignKey(f"{cls.__accounts_table__}.id"), nullable=True)


class BillPaymentColumns:
    """Columns of a bill payments table."""

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="completed")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    @declared_attr
    def bill_id(cls):
        return Column(Integer, ForeignKey(f"{cls.__bills_table__}.id"), nullable=False)

    @declared_attr
    def account_id(cls):
        return Column(Integer, ForeignKey(f"{cls.__accounts_table__}.id"), nullable=True)

    @declared_attr
    def transaction_id(cls):
        return Column(Integer, ForeignKey(f"{cls.__transactions_table__}.id"), nullable=True)


# Live table set
class Account(AccountColumns, Base):
    """Live account model."""

    __tablename__ = LIVE_TABLES.accounts


class Transaction(TransactionColumns, Base):
    """Live transaction model."""

    __tablename__ = LIVE_TABLES.transactions
    __accounts_table__ = LIVE_TABLES.accounts


class Bill(BillColumns, Base):
    """Live bill model."""

    __tablename__ = LIVE_TABLES.bills
    __accounts_table__ = LIVE_TABLES.accounts


class BillPayment(BillPaymentColumns, Base):
    """Live bill payment model."""

    __tablename__ = LIVE_TABLES.bill_payments
    __accounts_table__ = LIVE_TABLES.accounts
    __bills_table__ = LIVE_TABLES.bills
    __transactions_table__ = LIVE_TABLES.transactions


# Demo table set
class DemoAccount(AccountColumns, Base):
    """Demo account model."""

    __tablename__ = DEMO_TABLES.accounts


class DemoTransaction(TransactionColumns, Base):
    """Demo transaction model."""

    __tablename__ = DEMO_TABLES.transactions
    __accounts_table__ = DEMO_TABLES.accounts


class DemoBill(BillColumns, Base):
    """Demo bill model."""

    __tablename__ = DEMO_TABLES.bills
    __accounts_table__ = DEMO_TABLES.accounts


class DemoBillPayment(BillPaymentColumns, Base):
    """Demo bill payment model."""

    __tablename__ = DEMO_TABLES.bill_payments
    __accounts_table__ = DEMO_TABLES.accounts
    __bills_table__ = DEMO_TABLES.bills
    __transactions_table__ = DEMO_TABLES.transactions


@dataclass(frozen=True)
class ModelSet:
    """ORM classes backing one table set."""

    tables: TableMap
    account: type
    transaction: type
    bill: type
    bill_payment: type


LIVE_MODELS = ModelSet(
    tables=LIVE_TABLES,
    account=Account,
    transaction=Transaction,
    bill=Bill,
    bill_payment=BillPayment,
)

DEMO_MODELS = ModelSet(
    tables=DEMO_TABLES,
    account=DemoAccount,
    transaction=DemoTransaction,
    bill=DemoBill,
    bill_payment=DemoBillPayment,
)


def get_model_set(is_demo: bool = False) -> ModelSet:
    """Return the ORM classes for demo or live mode."""
    return DEMO_MODELS if is_demo else LIVE_MODELS


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
