"""Tests for BillService."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from pocketledger.domain.entities import (
    BillDisplayStatus,
    BillStatus,
    PaymentStats,
    PaymentStatus,
    TransactionStatus,
    TransactionType,
)
from pocketledger.domain.errors import (
    LedgerUnavailableError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from pocketledger.domain.notifications import NotificationKind
from pocketledger.domain.bill import BillService
from pocketledger.domain.reconciler import BalanceReconciler


@pytest.fixture
def upcoming_bill(bill_service, today):
    """A bill due three days after today."""
    return bill_service.create_bill(name="Electricity", amount=Decimal("89.99"), due_date=today + timedelta(days=3))


@pytest.fixture
def past_due_bill(bill_service, today):
    """A bill whose due date has passed."""
    return bill_service.create_bill(name="Water", amount=Decimal("40.00"), due_date=today - timedelta(days=2))


class TestCreateAndList:
    def test_create_bill(self, upcoming_bill):
        assert upcoming_bill.bill.name == "Electricity"
        assert upcoming_bill.bill.status == BillStatus.UPCOMING
        assert upcoming_bill.bill.metadata == {}
        assert upcoming_bill.display_status == BillDisplayStatus.DUE_WEEK

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_amount_must_be_positive(self, bill_service, today, amount):
        with pytest.raises(ValidationError, match="greater than zero"):
            bill_service.create_bill(name="Gym", amount=amount, due_date=today)

    def test_name_is_required(self, bill_service, today):
        with pytest.raises(ValidationError, match="Bill name is required"):
            bill_service.create_bill(name=" ", amount=Decimal("1"), due_date=today)

    def test_list_bills_most_urgent_first(self, bill_service, today, upcoming_bill, past_due_bill):
        due_today = bill_service.create_bill(name="Phone", amount=Decimal("20"), due_date=today)

        bills = bill_service.list_bills()

        assert [b.bill.id for b in bills] == [due_today.bill.id, past_due_bill.bill.id, upcoming_bill.bill.id]
        assert [b.display_status for b in bills] == [
            BillDisplayStatus.DUE_TODAY,
            BillDisplayStatus.OVERDUE,
            BillDisplayStatus.DUE_WEEK,
        ]

    def test_refresh_replaces_state(self, bill_service, state, upcoming_bill):
        bill_service.refresh(state)

        assert [b.bill.id for b in state.bills] == [upcoming_bill.bill.id]

    def test_get_missing_bill(self, bill_service):
        assert bill_service.get_bill(9999) is None

    def test_other_users_bill(self, temp_db, other_user_db, upcoming_bill):
        with pytest.raises(PermissionDeniedError):
            BillService(other_user_db).get_bill(upcoming_bill.bill.id)

    def test_demo_bills_are_isolated(self, bill_service, today, upcoming_bill):
        bill_service.create_bill(name="Demo", amount=Decimal("1"), due_date=today, is_demo=True)

        assert [b.bill.name for b in bill_service.list_bills(is_demo=True)] == ["Demo"]
        assert [b.bill.name for b in bill_service.list_bills()] == ["Electricity"]


class TestTransitions:
    def test_pause_and_resume(self, bill_service, upcoming_bill, notifier):
        paused = bill_service.pause(upcoming_bill.bill.id)

        assert paused.display_status == BillDisplayStatus.PAUSED
        assert paused.bill.status == BillStatus.CANCELLED
        assert paused.bill.metadata == {"ui_status": "paused"}

        resumed = bill_service.resume(upcoming_bill.bill.id)

        assert resumed.display_status == BillDisplayStatus.DUE_WEEK
        assert resumed.bill.status == BillStatus.UPCOMING
        assert "ui_status" not in resumed.bill.metadata
        assert notifier.titles(NotificationKind.SUCCESS) == ["Bill Paused", "Bill Resumed"]

    def test_end_and_reactivate_past_due_bill(self, bill_service, past_due_bill):
        ended = bill_service.end(past_due_bill.bill.id)

        assert ended.display_status == BillDisplayStatus.ENDED
        assert ended.bill.metadata == {"ui_status": "ended"}

        reactivated = bill_service.reactivate(past_due_bill.bill.id)

        assert reactivated.display_status == BillDisplayStatus.OVERDUE
        assert reactivated.bill.status == BillStatus.OVERDUE

    def test_end_a_paused_bill(self, bill_service, upcoming_bill):
        bill_service.pause(upcoming_bill.bill.id)

        assert bill_service.end(upcoming_bill.bill.id).display_status == BillDisplayStatus.ENDED

    def test_resume_is_idempotent(self, bill_service, upcoming_bill, notifier):
        """Resuming an active bill changes nothing; resuming twice equals once."""
        untouched = bill_service.resume(upcoming_bill.bill.id)
        assert untouched == upcoming_bill

        bill_service.pause(upcoming_bill.bill.id)
        once = bill_service.resume(upcoming_bill.bill.id)
        twice = bill_service.resume(upcoming_bill.bill.id)

        assert twice == once
        assert notifier.titles(NotificationKind.SUCCESS) == ["Bill Paused", "Bill Resumed"]

    @pytest.mark.parametrize("action", ["pause", "end"])
    def test_paid_bill_cannot_be_paused_or_ended(self, bill_service, upcoming_bill, notifier, action):
        bill_service.mark_paid(upcoming_bill.bill.id)

        with pytest.raises(ValidationError, match=f"Cannot {action} a bill that is paid"):
            getattr(bill_service, action)(upcoming_bill.bill.id)

        assert notifier.titles(NotificationKind.ERROR) == [f"Failed to {action} bill"]

    @pytest.mark.parametrize("action", ["pause", "end"])
    def test_ended_bill_cannot_be_paused_or_ended(self, bill_service, upcoming_bill, action):
        bill_service.end(upcoming_bill.bill.id)

        with pytest.raises(ValidationError, match=f"Cannot {action} a bill that is ended"):
            getattr(bill_service, action)(upcoming_bill.bill.id)

    def test_mark_and_unmark_paid(self, bill_service, past_due_bill):
        paid = bill_service.mark_paid(past_due_bill.bill.id)
        assert paid.display_status == BillDisplayStatus.PAID
        assert paid.bill.status == BillStatus.PAID

        unpaid = bill_service.unmark_paid(past_due_bill.bill.id)
        assert unpaid.display_status == BillDisplayStatus.OVERDUE
        assert unpaid.bill.status == BillStatus.OVERDUE

    def test_ended_bill_cannot_be_marked_paid(self, bill_service, upcoming_bill, notifier):
        bill_service.end(upcoming_bill.bill.id)

        with pytest.raises(ValidationError, match="Cannot mark as paid a bill that is ended"):
            bill_service.mark_paid(upcoming_bill.bill.id)

        assert bill_service.get_bill(upcoming_bill.bill.id).display_status == BillDisplayStatus.ENDED
        assert notifier.titles(NotificationKind.ERROR) == ["Failed to mark paid bill"]

    def test_mark_paid_clears_ui_status(self, bill_service, upcoming_bill):
        bill_service.pause(upcoming_bill.bill.id)

        paid = bill_service.mark_paid(upcoming_bill.bill.id)

        assert paid.display_status == BillDisplayStatus.PAID
        assert paid.bill.metadata == {}

    def test_unmark_paid_on_unpaid_bill_is_a_no_op(self, bill_service, upcoming_bill):
        bill_service.pause(upcoming_bill.bill.id)

        assert bill_service.unmark_paid(upcoming_bill.bill.id).display_status == BillDisplayStatus.PAUSED

    def test_transition_on_missing_bill(self, bill_service, notifier):
        with pytest.raises(NotFoundError, match="Bill 9999 not found"):
            bill_service.pause(9999)

        assert notifier.titles(NotificationKind.ERROR) == ["Failed to pause bill"]

    def test_transitions_keep_other_metadata(self, bill_service, temp_db, today):
        bill_id = temp_db.create_bill(
            name="Insurance", amount=Decimal("300"), due_date=today, metadata={"category": "insurance"}
        )

        paused = bill_service.pause(bill_id)
        resumed = bill_service.resume(bill_id)

        assert paused.bill.metadata == {"category": "insurance", "ui_status": "paused"}
        assert resumed.bill.metadata == {"category": "insurance"}
        assert resumed.display_status == BillDisplayStatus.DUE_TODAY


class TestPayBill:
    def test_pay_bill_records_transaction_and_payment(self, bill_service, temp_db, sample_account, upcoming_bill, today):
        payment = bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        assert payment.amount == Decimal("89.99")
        assert payment.payment_date == today
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.account_id == sample_account.id

        txn = temp_db.get_transaction(payment.transaction_id)
        assert txn.type == TransactionType.EXPENSE
        assert txn.status == TransactionStatus.COMPLETED
        assert txn.source_account_id == sample_account.id
        assert txn.destination_account_id is None
        assert txn.name == "Bill Payment - Electricity"

        assert bill_service.get_bill(upcoming_bill.bill.id).display_status == BillDisplayStatus.PAID
        assert BalanceReconciler(temp_db).calculate_account_balance_manual(sample_account.id) == Decimal("10.01")
        assert bill_service.list_payments(upcoming_bill.bill.id) == [payment]

    def test_partial_amount_and_date(self, bill_service, sample_account, upcoming_bill):
        payment = bill_service.pay_bill(
            upcoming_bill.bill.id, sample_account.id, amount=Decimal("50"), payment_date=date(2025, 8, 1)
        )

        assert payment.amount == Decimal("50")
        assert payment.payment_date == date(2025, 8, 1)

    def test_paid_bill_cannot_be_paid_again(self, bill_service, sample_account, upcoming_bill, notifier):
        bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        with pytest.raises(ValidationError, match="Cannot pay a bill that is paid"):
            bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        assert notifier.titles(NotificationKind.ERROR) == ["Failed to pay bill"]

    def test_paused_bill_cannot_be_paid(self, bill_service, sample_account, upcoming_bill):
        bill_service.pause(upcoming_bill.bill.id)

        with pytest.raises(ValidationError, match="Cannot pay a bill that is paused"):
            bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

    def test_unknown_account(self, bill_service, temp_db, upcoming_bill):
        with pytest.raises(NotFoundError, match="Account 9999 not found"):
            bill_service.pay_bill(upcoming_bill.bill.id, 9999)

        assert temp_db.list_transactions() == []

    def test_delete_bill_removes_payments(self, bill_service, sample_account, upcoming_bill):
        bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        bill_service.delete_bill(upcoming_bill.bill.id)

        assert bill_service.get_bill(upcoming_bill.bill.id) is None
        assert bill_service.list_payments() == []

    def test_failed_payment_record_keeps_account_untouched(
        self, bill_service, temp_db, sample_account, upcoming_bill, monkeypatch, notifier
    ):
        """If the payment cannot be recorded, the expense is not kept either."""

        def fail(*args, **kwargs):
            raise LedgerUnavailableError("write failed")

        monkeypatch.setattr(temp_db, "create_bill_payment", fail)

        with pytest.raises(LedgerUnavailableError):
            bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        assert temp_db.list_transactions() == []
        assert BalanceReconciler(temp_db).get_account_summary(sample_account.id).current_balance == Decimal("100.00")
        assert bill_service.get_bill(upcoming_bill.bill.id).display_status == BillDisplayStatus.DUE_WEEK
        assert notifier.titles(NotificationKind.ERROR) == ["Failed to pay bill"]

    def test_failed_status_update_drops_expense_and_payment(
        self, bill_service, temp_db, sample_account, upcoming_bill, monkeypatch
    ):
        def fail(*args, **kwargs):
            raise LedgerUnavailableError("write failed")

        monkeypatch.setattr(temp_db, "update_bill_status", fail)

        with pytest.raises(LedgerUnavailableError):
            bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        assert temp_db.list_transactions() == []
        assert bill_service.list_payments() == []

    def test_retry_after_failure_debits_once(self, bill_service, temp_db, sample_account, upcoming_bill, monkeypatch):
        def fail(*args, **kwargs):
            raise LedgerUnavailableError("write failed")

        monkeypatch.setattr(temp_db, "create_bill_payment", fail)
        with pytest.raises(LedgerUnavailableError):
            bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)
        monkeypatch.undo()

        bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        assert len(temp_db.list_transactions()) == 1
        assert BalanceReconciler(temp_db).calculate_account_balance_manual(sample_account.id) == Decimal("10.01")


class TestUpdateBill:
    def test_update_details(self, bill_service, sample_account, upcoming_bill, notifier):
        updated = bill_service.update_bill(
            upcoming_bill.bill.id,
            {"name": "  Power  ", "amount": Decimal("95.50"), "account_id": sample_account.id},
        )

        assert updated.bill.name == "Power"
        assert updated.bill.amount == Decimal("95.50")
        assert updated.bill.account_id == sample_account.id
        assert updated.bill.due_date == upcoming_bill.bill.due_date
        assert updated.display_status == BillDisplayStatus.DUE_WEEK
        assert notifier.titles(NotificationKind.SUCCESS) == ["Bill Updated"]

    def test_moving_due_date_into_the_past_makes_bill_overdue(self, bill_service, upcoming_bill, today):
        updated = bill_service.update_bill(upcoming_bill.bill.id, {"due_date": today - timedelta(days=1)})

        assert updated.bill.status == BillStatus.OVERDUE
        assert updated.display_status == BillDisplayStatus.OVERDUE

    def test_moving_overdue_bill_forward_makes_it_upcoming(self, bill_service, temp_db, today):
        bill_id = temp_db.create_bill(
            name="Water", amount=Decimal("40"), due_date=today - timedelta(days=5), status="overdue"
        )

        updated = bill_service.update_bill(bill_id, {"due_date": today + timedelta(days=1)})

        assert updated.bill.status == BillStatus.UPCOMING
        assert updated.display_status == BillDisplayStatus.DUE_TOMORROW

    def test_paused_bill_stays_paused(self, bill_service, upcoming_bill, today):
        bill_service.pause(upcoming_bill.bill.id)

        updated = bill_service.update_bill(upcoming_bill.bill.id, {"due_date": today - timedelta(days=3)})

        assert updated.display_status == BillDisplayStatus.PAUSED
        assert updated.bill.status == BillStatus.CANCELLED
        assert updated.bill.metadata == {"ui_status": "paused"}

    @pytest.mark.parametrize(
        "updates, message",
        [
            ({"status": "paid"}, "Unknown bill fields: status"),
            ({"amount": Decimal("0")}, "greater than zero"),
            ({"name": "   "}, "Bill name is required"),
        ],
    )
    def test_invalid_updates(self, bill_service, upcoming_bill, notifier, updates, message):
        with pytest.raises(ValidationError, match=message):
            bill_service.update_bill(upcoming_bill.bill.id, updates)

        assert notifier.titles(NotificationKind.ERROR) == ["Failed to update bill"]
        assert bill_service.get_bill(upcoming_bill.bill.id) == upcoming_bill

    def test_unknown_account(self, bill_service, upcoming_bill):
        with pytest.raises(NotFoundError, match="Account 9999 not found"):
            bill_service.update_bill(upcoming_bill.bill.id, {"account_id": 9999})

    def test_missing_bill(self, bill_service):
        with pytest.raises(NotFoundError, match="Bill 9999 not found"):
            bill_service.update_bill(9999, {"name": "Ghost"})


class TestPayments:
    def test_delete_payment_keeps_transaction_and_status(
        self, bill_service, temp_db, sample_account, upcoming_bill, notifier
    ):
        payment = bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        bill_service.delete_payment(payment.id)

        assert bill_service.list_payments() == []
        assert temp_db.get_transaction(payment.transaction_id) is not None
        assert bill_service.get_bill(upcoming_bill.bill.id).display_status == BillDisplayStatus.PAID
        assert notifier.titles(NotificationKind.SUCCESS) == ["Bill Paid", "Payment Deleted"]

    def test_delete_missing_payment(self, bill_service, notifier):
        with pytest.raises(NotFoundError, match="Bill payment 9999 not found"):
            bill_service.delete_payment(9999)

        assert notifier.titles(NotificationKind.ERROR) == ["Failed to delete payment"]

    def test_other_users_payment(self, bill_service, other_user_db, sample_account, upcoming_bill):
        payment = bill_service.pay_bill(upcoming_bill.bill.id, sample_account.id)

        with pytest.raises(PermissionDeniedError):
            BillService(other_user_db).delete_payment(payment.id)

    def test_payment_stats_count_completed_payments(self, bill_service, temp_db, upcoming_bill):
        bill_id = upcoming_bill.bill.id
        temp_db.create_bill_payment(bill_id, Decimal("30.00"), date(2025, 8, 1))
        temp_db.create_bill_payment(bill_id, Decimal("45.00"), date(2025, 8, 5))
        temp_db.create_bill_payment(bill_id, Decimal("100.00"), date(2025, 8, 7), status="failed")

        stats = bill_service.get_payment_stats(bill_id)

        assert stats == PaymentStats(
            total_paid=Decimal("75.00"),
            payment_count=2,
            last_payment_date=date(2025, 8, 5),
            average_payment=Decimal("37.50"),
        )

    def test_payment_stats_average_is_rounded_to_cents(self, bill_service, temp_db, upcoming_bill):
        bill_id = upcoming_bill.bill.id
        for amount in ("10.00", "10.00", "5.00"):
            temp_db.create_bill_payment(bill_id, Decimal(amount), date(2025, 8, 1))

        assert bill_service.get_payment_stats(bill_id).average_payment == Decimal("8.33")

    def test_payment_stats_without_payments(self, bill_service, upcoming_bill):
        assert bill_service.get_payment_stats(upcoming_bill.bill.id) == PaymentStats()

    def test_payment_stats_missing_bill(self, bill_service):
        with pytest.raises(NotFoundError):
            bill_service.get_payment_stats(9999)
