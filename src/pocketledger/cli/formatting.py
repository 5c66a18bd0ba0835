"""Shared output formatting for CLI commands."""

from decimal import Decimal


def format_money(amount: Decimal) -> str:
    """Format an amount with thousands separators and two decimals."""
    return f"{amount:,.2f}"
