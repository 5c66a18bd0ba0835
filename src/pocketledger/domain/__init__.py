"""Domain layer for pocketledger application."""

__all__ = [
    "BalanceReconciler",
    "AccountService",
    "TransactionService",
    "BillService",
    "LedgerState",
]

_SERVICES = {
    "BalanceReconciler": "pocketledger.domain.reconciler",
    "AccountService": "pocketledger.domain.account",
    "TransactionService": "pocketledger.domain.transaction",
    "BillService": "pocketledger.domain.bill",
    "LedgerState": "pocketledger.domain.state",
}


# Import services lazily; the database layer imports domain.entities, and the
# services import the database layer
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
