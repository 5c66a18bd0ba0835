"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AuthenticationError(DomainError):
    """No authenticated user is available for a user-scoped operation."""


class PermissionDeniedError(DomainError):
    """The authenticated user does not own the requested entity."""


class LedgerError(Exception):
    """Base class for failures raised by the ledger store itself."""


class AggregateUnavailableError(LedgerError):
    """A server-side aggregate procedure is missing or disabled."""


class LedgerUnavailableError(LedgerError):
    """The ledger store could not be reached or failed transiently."""


def not_authenticated() -> str:
    """Return message for a missing authenticated user."""
    return "User not authenticated"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_access_denied(account_id: int) -> str:
    """Return message for an account owned by another user."""
    return f"Permission denied for account {account_id}"


def bill_not_found(bill_id: int) -> str:
    """Return message for missing bill."""
    return f"Bill {bill_id} not found"


def bill_access_denied(bill_id: int) -> str:
    """Return message for a bill owned by another user."""
    return f"Permission denied for bill {bill_id}"


def invalid_bill_transition(action: str, status: str) -> str:
    """Return message for a bill transition that is not allowed."""
    return f"Cannot {action} a bill that is {status}"


def payment_not_found(payment_id: int) -> str:
    """Return message for missing bill payment."""
    return f"Bill payment {payment_id} not found"


def payment_access_denied(payment_id: int) -> str:
    """Return message for a bill payment owned by another user."""
    return f"Permission denied for bill payment {payment_id}"
