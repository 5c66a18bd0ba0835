"""Bill domain service."""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Optional

from pocketledger.database.base import Database
from pocketledger.domain.bill_status import (
    DUE_DATE_STATUSES,
    UI_STATUS_KEY,
    derive_for_bill,
    natural_status,
    persisted_status_for,
    sort_bills_by_urgency,
)
from pocketledger.domain.entities import (
    BillDisplayStatus,
    BillPayment,
    BillStatus,
    BillWithStatus,
    PaymentStats,
    PaymentStatus,
    TransactionStatus,
    TransactionType,
)
from pocketledger.domain.errors import (
    DomainError,
    LedgerError,
    NotFoundError,
    ValidationError,
    account_not_found,
    bill_not_found,
    invalid_bill_transition,
    payment_not_found,
)
from pocketledger.domain.notifications import Notifier, NullNotifier
from pocketledger.domain.state import LedgerState

logger = logging.getLogger(__name__)

UPDATABLE_BILL_FIELDS = frozenset({"name", "amount", "due_date", "account_id"})

CENTS = Decimal("0.01")


class BillService:
    """Service for managing bills, their status transitions and payments."""

    def __init__(
        self,
        db: Database,
        notifier: Optional[Notifier] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        """Initialize bill service.

        Args:
            db: Database instance
            notifier: Sink for user-visible notifications
            clock: Returns the current date (defaults to date.today)
        """
        self.db = db
        self.notifier = notifier or NullNotifier()
        self.clock = clock or date.today

    def create_bill(
        self,
        name: str,
        amount: Decimal,
        due_date: date,
        account_id: Optional[int] = None,
        is_demo: bool = False,
    ) -> BillWithStatus:
        """Create an upcoming bill.

        Raises:
            ValidationError: If name is empty or amount is not positive
        """
        if not name or not name.strip():
            raise ValidationError("Bill name is required")
        if amount <= 0:
            raise ValidationError("Bill amount must be greater than zero")

        bill_id = self.db.create_bill(
            name=name.strip(),
            amount=amount,
            due_date=due_date,
            status=BillStatus.UPCOMING.value,
            account_id=account_id,
            is_demo=is_demo,
        )
        return self._require_bill(bill_id, is_demo)

    def get_bill(self, bill_id: int, is_demo: bool = False) -> Optional[BillWithStatus]:
        """Get a bill with its derived status, or None if not found."""
        bill = self.db.get_bill(bill_id, is_demo=is_demo)
        if bill is None:
            return None
        return derive_for_bill(bill, self.clock())

    def _require_bill(self, bill_id: int, is_demo: bool) -> BillWithStatus:
        bill = self.get_bill(bill_id, is_demo=is_demo)
        if bill is None:
            raise NotFoundError(bill_not_found(bill_id))
        return bill

    def list_bills(self, is_demo: bool = False) -> list[BillWithStatus]:
        """List bills with derived statuses, most urgent first."""
        today = self.clock()
        bills = [derive_for_bill(bill, today) for bill in self.db.list_bills(is_demo=is_demo)]
        return sort_bills_by_urgency(bills)

    def refresh(self, state: LedgerState, is_demo: bool = False) -> list[BillWithStatus]:
        """Refetch bills and replace the list held by state."""
        bills = self.list_bills(is_demo=is_demo)
        state.replace_bills(bills)
        return bills

    def delete_bill(self, bill_id: int, is_demo: bool = False) -> None:
        """Delete a bill and its payments."""
        self.db.delete_bill(bill_id, is_demo=is_demo)

    def update_bill(self, bill_id: int, updates: dict[str, Any], is_demo: bool = False) -> BillWithStatus:
        """Update a bill's name, amount, due date or account.

        An active bill whose due date changes has its stored upcoming/overdue
        status recomputed from the new date. Paid, paused and ended bills keep
        their status.

        Args:
            bill_id: Bill ID
            updates: Fields to change (name, amount, due_date, account_id)
            is_demo: Use the demo table set

        Returns:
            The updated bill with its derived status

        Raises:
            ValidationError: If a field is unknown or invalid
            NotFoundError: If the bill or the new account does not exist
        """
        try:
            unknown = set(updates) - UPDATABLE_BILL_FIELDS
            if unknown:
                raise ValidationError(f"Unknown bill fields: {', '.join(sorted(unknown))}")

            changes = dict(updates)
            if "name" in changes:
                if not changes["name"] or not changes["name"].strip():
                    raise ValidationError("Bill name is required")
                changes["name"] = changes["name"].strip()
            if "amount" in changes and changes["amount"] <= 0:
                raise ValidationError("Bill amount must be greater than zero")
            account_id = changes.get("account_id")
            if account_id is not None and self.db.get_account(account_id, is_demo=is_demo) is None:
                raise NotFoundError(account_not_found(account_id))

            current = self._require_bill(bill_id, is_demo)
            with self.db.unit_of_work():
                bill = self.db.update_bill(bill_id, changes, is_demo=is_demo)
                if "due_date" in changes and bill.status in (BillStatus.UPCOMING, BillStatus.OVERDUE):
                    status = persisted_status_for(natural_status(bill.due_date, self.clock()))
                    if status != bill.status:
                        bill = self.db.update_bill_status(bill_id, status.value, bill.metadata, is_demo=is_demo)
        except (DomainError, LedgerError) as exc:
            logger.error("Failed to update bill %s: %s", bill_id, exc)
            self.notifier.error("Failed to update bill", str(exc))
            raise

        updated = derive_for_bill(bill, self.clock())
        logger.info("Updated bill %s: %s", bill_id, ", ".join(sorted(changes)))
        self.notifier.success("Bill Updated", f"{current.bill.name} has been updated")
        return updated

    def _persist(
        self,
        current: BillWithStatus,
        status: BillStatus,
        ui_status: Optional[str],
        is_demo: bool,
    ) -> BillWithStatus:
        metadata: dict[str, Any] = {
            key: value for key, value in current.bill.metadata.items() if key != UI_STATUS_KEY
        }
        if ui_status is not None:
            metadata[UI_STATUS_KEY] = ui_status
        bill = self.db.update_bill_status(current.bill.id, status.value, metadata, is_demo=is_demo)
        return derive_for_bill(bill, self.clock())

    def _transition(
        self,
        action: str,
        bill_id: int,
        is_demo: bool,
        apply: Callable[[BillWithStatus], BillWithStatus],
    ) -> BillWithStatus:
        try:
            current = self._require_bill(bill_id, is_demo)
            updated = apply(current)
        except (DomainError, LedgerError) as exc:
            logger.error("Failed to %s bill %s: %s", action, bill_id, exc)
            self.notifier.error(f"Failed to {action} bill", str(exc))
            raise
        logger.info(
            "Bill %s %s: %s -> %s",
            bill_id,
            action,
            current.display_status.value,
            updated.display_status.value,
        )
        return updated

    def pause(self, bill_id: int, is_demo: bool = False) -> BillWithStatus:
        """Pause a bill. Not allowed for paid or ended bills."""

        def apply(current: BillWithStatus) -> BillWithStatus:
            if current.display_status in (BillDisplayStatus.PAID, BillDisplayStatus.ENDED):
                raise ValidationError(invalid_bill_transition("pause", current.display_status.value))
            updated = self._persist(
                current, BillStatus.CANCELLED, BillDisplayStatus.PAUSED.value, is_demo
            )
            self.notifier.success("Bill Paused", f"{current.bill.name} has been paused")
            return updated

        return self._transition("pause", bill_id, is_demo, apply)

    def end(self, bill_id: int, is_demo: bool = False) -> BillWithStatus:
        """End a bill. Not allowed for paid or already ended bills."""

        def apply(current: BillWithStatus) -> BillWithStatus:
            if current.display_status in (BillDisplayStatus.PAID, BillDisplayStatus.ENDED):
                raise ValidationError(invalid_bill_transition("end", current.display_status.value))
            updated = self._persist(
                current, BillStatus.CANCELLED, BillDisplayStatus.ENDED.value, is_demo
            )
            self.notifier.success("Bill Ended", f"{current.bill.name} has been ended")
            return updated

        return self._transition("end", bill_id, is_demo, apply)

    def resume(self, bill_id: int, is_demo: bool = False) -> BillWithStatus:
        """Resume a paused or ended bill into its due-date-driven status.

        Resuming a bill that is neither paused nor ended changes nothing.
        """

        def apply(current: BillWithStatus) -> BillWithStatus:
            if current.display_status not in (BillDisplayStatus.PAUSED, BillDisplayStatus.ENDED):
                return current
            status = natural_status(current.bill.due_date, self.clock())
            updated = self._persist(current, persisted_status_for(status), None, is_demo)
            self.notifier.success("Bill Resumed", f"{current.bill.name} is active again")
            return updated

        return self._transition("resume", bill_id, is_demo, apply)

    reactivate = resume

    def mark_paid(self, bill_id: int, is_demo: bool = False) -> BillWithStatus:
        """Mark a bill as paid. A bill that is already paid is left as is.

        Ended bills must be resumed first; a paused bill can be marked paid.
        """

        def apply(current: BillWithStatus) -> BillWithStatus:
            if current.display_status == BillDisplayStatus.PAID:
                return current
            if current.display_status == BillDisplayStatus.ENDED:
                raise ValidationError(invalid_bill_transition("mark as paid", current.display_status.value))
            updated = self._persist(current, BillStatus.PAID, None, is_demo)
            self.notifier.success("Bill Paid", f"{current.bill.name} marked as paid")
            return updated

        return self._transition("mark paid", bill_id, is_demo, apply)

    def unmark_paid(self, bill_id: int, is_demo: bool = False) -> BillWithStatus:
        """Return a paid bill to its due-date-driven status.

        Bills that are not paid are left as is.
        """

        def apply(current: BillWithStatus) -> BillWithStatus:
            if current.display_status != BillDisplayStatus.PAID:
                return current
            status = natural_status(current.bill.due_date, self.clock())
            updated = self._persist(current, persisted_status_for(status), None, is_demo)
            self.notifier.success("Bill Unpaid", f"{current.bill.name} marked as unpaid")
            return updated

        return self._transition("unmark paid", bill_id, is_demo, apply)

    def pay_bill(
        self,
        bill_id: int,
        account_id: int,
        amount: Optional[Decimal] = None,
        payment_date: Optional[date] = None,
        is_demo: bool = False,
    ) -> BillPayment:
        """Pay a bill from an account.

        Records a completed expense transaction with the account as source,
        a bill payment linked to it, and marks the bill paid.

        Args:
            bill_id: Bill to pay
            account_id: Account the money leaves
            amount: Amount paid (defaults to the bill amount)
            payment_date: Date of payment (defaults to today)
            is_demo: Use the demo table set

        Returns:
            The recorded BillPayment

        Raises:
            ValidationError: If the bill is paid, paused or ended, or amount is not positive
            NotFoundError: If the bill or account does not exist
        """
        try:
            current = self._require_bill(bill_id, is_demo)
            if current.display_status not in DUE_DATE_STATUSES:
                raise ValidationError(invalid_bill_transition("pay", current.display_status.value))

            account = self.db.get_account(account_id, is_demo=is_demo)
            if account is None:
                raise NotFoundError(account_not_found(account_id))

            paid_amount = amount if amount is not None else current.bill.amount
            if paid_amount <= 0:
                raise ValidationError("Payment amount must be greater than zero")
            paid_on = payment_date or self.clock()

            # The expense, the payment and the paid status are kept or dropped together
            with self.db.unit_of_work():
                transaction_id = self.db.create_transaction(
                    name=f"Bill Payment - {current.bill.name}",
                    description=f"Payment for bill {current.bill.id}",
                    amount=paid_amount,
                    type=TransactionType.EXPENSE.value,
                    date=paid_on,
                    source_account_id=account_id,
                    status=TransactionStatus.COMPLETED.value,
                    is_demo=is_demo,
                )
                payment_id = self.db.create_bill_payment(
                    bill_id=bill_id,
                    amount=paid_amount,
                    payment_date=paid_on,
                    account_id=account_id,
                    transaction_id=transaction_id,
                    status=PaymentStatus.COMPLETED.value,
                    is_demo=is_demo,
                )
                self._persist(current, BillStatus.PAID, None, is_demo)
        except (DomainError, LedgerError) as exc:
            logger.error("Failed to pay bill %s: %s", bill_id, exc)
            self.notifier.error("Failed to pay bill", str(exc))
            raise

        self.notifier.success("Bill Paid", f"Paid {current.bill.name} from {account.name}")
        payment = self.db.get_bill_payment(payment_id, is_demo=is_demo)
        if payment is None:
            raise NotFoundError(payment_not_found(payment_id))
        return payment

    def list_payments(self, bill_id: Optional[int] = None, is_demo: bool = False) -> list[BillPayment]:
        """List bill payments, most recent first."""
        return self.db.list_bill_payments(bill_id=bill_id, is_demo=is_demo)

    def delete_payment(self, payment_id: int, is_demo: bool = False) -> None:
        """Delete a bill payment.

        The expense transaction recorded with the payment stays on the account,
        and the bill keeps its status.

        Raises:
            NotFoundError: If the payment does not exist
        """
        try:
            self.db.delete_bill_payment(payment_id, is_demo=is_demo)
        except (DomainError, LedgerError) as exc:
            logger.error("Failed to delete bill payment %s: %s", payment_id, exc)
            self.notifier.error("Failed to delete payment", str(exc))
            raise
        self.notifier.success("Payment Deleted", f"Payment {payment_id} has been deleted")

    def get_payment_stats(self, bill_id: int, is_demo: bool = False) -> PaymentStats:
        """Summarize a bill's completed payments.

        Args:
            bill_id: Bill ID
            is_demo: Use the demo table set

        Returns:
            PaymentStats with the total, count, latest date and average amount
            (rounded to cents) of completed payments; zeros if there are none

        Raises:
            NotFoundError: If the bill does not exist
        """
        self._require_bill(bill_id, is_demo)
        payments = self.db.list_bill_payments(
            bill_id=bill_id, status=PaymentStatus.COMPLETED.value, is_demo=is_demo
        )
        if not payments:
            return PaymentStats()

        total = sum((p.amount for p in payments), Decimal("0"))
        return PaymentStats(
            total_paid=total,
            payment_count=len(payments),
            last_payment_date=max(p.payment_date for p in payments),
            average_payment=(total / len(payments)).quantize(CENTS, rounding=ROUND_HALF_UP),
        )
