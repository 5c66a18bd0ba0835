"""Utility for resolving account names to IDs."""

from pocketledger.domain.account import AccountService
from pocketledger.domain.errors import NotFoundError, ValidationError


def resolve_account(account_service: AccountService, account: str | int, is_demo: bool = False) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)
        is_demo: Look the account up in the demo table set

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
        ValidationError: If more than one account has the name
    """
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        if account_service.get_account(account_id, is_demo=is_demo) is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    matches = [
        acc.id
        for acc in account_service.list_accounts(active_only=False, is_demo=is_demo)
        if acc.name == account
    ]
    if not matches:
        raise NotFoundError(f"Account '{account}' not found")
    if len(matches) > 1:
        raise ValidationError(f"Account name '{account}' is ambiguous; use the account ID")
    return matches[0]
