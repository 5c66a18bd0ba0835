"""Transaction domain service."""

import logging
from typing import Optional
from datetime import date
from decimal import Decimal

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Transaction as TransactionEntity,
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

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for recording and listing ledger transactions."""

    def __init__(self, db: Database, notifier: Optional[Notifier] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            notifier: Sink for user-visible notifications
        """
        self.db = db
        self.notifier = notifier or NullNotifier()

    def create_transaction(
        self,
        name: str,
        amount: Decimal,
        type: str,
        date: date,
        source_account_id: Optional[int] = None,
        destination_account_id: Optional[int] = None,
        status: str = TransactionStatus.COMPLETED.value,
        description: Optional[str] = None,
        is_demo: bool = False,
    ) -> TransactionEntity:
        """Record a transaction.

        The stored amount keeps the sign it was given; balances only ever use
        its absolute value.

        Args:
            name: Short label
            amount: Transaction amount (must not be zero)
            type: Transaction type (income, expense, transfer, ...)
            date: Transaction date
            source_account_id: Account the money leaves
            destination_account_id: Account the money enters
            status: Transaction status (defaults to completed)
            description: Optional description
            is_demo: Use the demo table set

        Returns:
            The created Transaction

        Raises:
            ValidationError: If type, status, amount or accounts are invalid
            NotFoundError: If a referenced account does not exist
        """
        try:
            txn_type = _parse_enum(TransactionType, type, "transaction type")
            txn_status = _parse_enum(TransactionStatus, status, "transaction status")
            if amount == 0:
                raise ValidationError("Transaction amount must not be zero")
            if source_account_id is None and destination_account_id is None:
                raise ValidationError("A transaction needs a source or destination account")
            if txn_type == TransactionType.TRANSFER:
                if source_account_id is None or destination_account_id is None:
                    raise ValidationError("A transfer needs both a source and destination account")
                if source_account_id == destination_account_id:
                    raise ValidationError("Cannot transfer to the same account")

            for account_id in (source_account_id, destination_account_id):
                if account_id is not None and self.db.get_account(account_id, is_demo=is_demo) is None:
                    raise NotFoundError(account_not_found(account_id))

            transaction_id = self.db.create_transaction(
                name=(name or txn_type.value.replace("_", " ").title()).strip(),
                amount=amount,
                type=txn_type.value,
                date=date,
                source_account_id=source_account_id,
                destination_account_id=destination_account_id,
                status=txn_status.value,
                description=description,
                is_demo=is_demo,
            )
            transaction = self.db.get_transaction(transaction_id, is_demo=is_demo)
            if transaction is None:
                raise NotFoundError(f"Transaction {transaction_id} not found")
        except (DomainError, LedgerError) as exc:
            logger.error("Error creating transaction: %s", exc)
            self.notifier.error("Failed to add transaction", str(exc))
            raise

        logger.info("Created %s transaction %s", txn_type.value, transaction_id)
        self.notifier.success("Transaction Added", f"{transaction.name} has been recorded")
        return transaction

    def get_transaction(self, transaction_id: int, is_demo: bool = False) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID
            is_demo: Use the demo table set

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id, is_demo=is_demo)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        status: Optional[str] = None,
        end_date: Optional[date] = None,
        is_demo: bool = False,
    ) -> list[TransactionEntity]:
        """List transactions, most recent first.

        Args:
            account_id: Only transactions referencing this account
            status: Only transactions with this status
            end_date: Only transactions dated on or before this date
            is_demo: Use the demo table set

        Returns:
            List of transaction entities
        """
        if status is not None:
            status = _parse_enum(TransactionStatus, status, "transaction status").value
        return self.db.list_transactions(
            account_id=account_id,
            status=status,
            end_date=end_date,
            is_demo=is_demo,
        )


def _parse_enum(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label} '{value}'. Valid values: {valid}")
