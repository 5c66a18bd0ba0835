"""Table name mapping for the live and demo table sets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TableMap:
    """Physical table names for one table set."""

    accounts: str
    transactions: str
    bills: str
    bill_payments: str

    def names(self) -> tuple[str, ...]:
        return (self.accounts, self.transactions, self.bills, self.bill_payments)


LIVE_TABLES = TableMap(
    accounts="accounts_real",
    transactions="transactions_real",
    bills="upcoming_bills_real",
    bill_payments="bill_payments_real",
)

DEMO_TABLES = TableMap(
    accounts="accounts",
    transactions="transactions",
    bills="upcoming_bills",
    bill_payments="bill_payments",
)


def get_table_map(is_demo: bool = False) -> TableMap:
    """Return the table names for demo or live mode."""
    return DEMO_TABLES if is_demo else LIVE_TABLES


def validate_table_consistency(table_map: TableMap) -> None:
    """Check that a table map does not mix live and demo tables.

    Raises:
        ValueError: If some tables are live and others are demo
    """
    live = [name.endswith("_real") for name in table_map.names()]
    if any(live) and not all(live):
        raise ValueError(f"Table map mixes live and demo tables: {table_map.names()}")
