"""Bill presentation status derivation.

The presentation status is recomputed on every read from the persisted
status, the due date, the current date and the optional ``ui_status``
carried in the bill's metadata. Paused and ended bills are both persisted
as ``cancelled`` and told apart by ``ui_status``.
"""

from datetime import date, timedelta
from typing import Iterable, Optional

from pocketledger.domain.entities import (
    Bill,
    BillDisplayStatus,
    BillStatus,
    BillWithStatus,
)

UI_STATUS_KEY = "ui_status"

# Most urgent first
URGENCY_ORDER = (
    BillDisplayStatus.DUE_TODAY,
    BillDisplayStatus.DUE_TOMORROW,
    BillDisplayStatus.OVERDUE,
    BillDisplayStatus.DUE_WEEK,
    BillDisplayStatus.PAUSED,
    BillDisplayStatus.PAID,
    BillDisplayStatus.ENDED,
)

_URGENCY_RANK = {status: rank for rank, status in enumerate(URGENCY_ORDER)}

DUE_DATE_STATUSES = frozenset(
    {
        BillDisplayStatus.DUE_TODAY,
        BillDisplayStatus.DUE_TOMORROW,
        BillDisplayStatus.OVERDUE,
        BillDisplayStatus.DUE_WEEK,
    }
)


def natural_status(due_date: date, today: date) -> BillDisplayStatus:
    """Status implied by the due date alone."""
    if due_date < today:
        return BillDisplayStatus.OVERDUE
    if due_date == today:
        return BillDisplayStatus.DUE_TODAY
    if due_date == today + timedelta(days=1):
        return BillDisplayStatus.DUE_TOMORROW
    return BillDisplayStatus.DUE_WEEK


def derive_bill_status(
    persisted_status: str | BillStatus,
    due_date: date,
    today: date,
    ui_status: Optional[str] = None,
) -> BillDisplayStatus:
    """Map a persisted bill state to exactly one presentation status.

    Args:
        persisted_status: Status stored on the bill
        due_date: Bill due date
        today: Current date
        ui_status: Optional metadata status ("paused" or "ended")

    Returns:
        The derived BillDisplayStatus
    """
    status = BillStatus(persisted_status)

    if status == BillStatus.PAID:
        return BillDisplayStatus.PAID
    if status == BillStatus.CANCELLED:
        if ui_status == BillDisplayStatus.ENDED.value:
            return BillDisplayStatus.ENDED
        # Cancelled bills without a ui_status predate the paused/ended split
        return BillDisplayStatus.PAUSED
    if status == BillStatus.OVERDUE:
        return BillDisplayStatus.OVERDUE
    if status == BillStatus.UPCOMING and due_date < today:
        return BillDisplayStatus.OVERDUE
    if due_date == today:
        return BillDisplayStatus.DUE_TODAY
    if due_date == today + timedelta(days=1):
        return BillDisplayStatus.DUE_TOMORROW
    return BillDisplayStatus.DUE_WEEK


def derive_for_bill(bill: Bill, today: date) -> BillWithStatus:
    """Pair a bill with its derived presentation status."""
    return BillWithStatus(
        bill=bill,
        display_status=derive_bill_status(bill.status, bill.due_date, today, bill.ui_status),
    )


def urgency_rank(status: BillDisplayStatus) -> int:
    """Position of a status in the urgency order (lower is more urgent)."""
    return _URGENCY_RANK[status]


def sort_bills_by_urgency(bills: Iterable[BillWithStatus]) -> list[BillWithStatus]:
    """Sort bills most urgent first, then by due date, then by ID."""
    return sorted(
        bills,
        key=lambda b: (urgency_rank(b.display_status), b.bill.due_date, b.bill.id),
    )


def persisted_status_for(status: BillDisplayStatus) -> BillStatus:
    """Persisted status to store for a due-date-driven presentation status."""
    if status == BillDisplayStatus.OVERDUE:
        return BillStatus.OVERDUE
    if status in DUE_DATE_STATUSES:
        return BillStatus.UPCOMING
    raise ValueError(f"{status.value} is not a due-date-driven status")
