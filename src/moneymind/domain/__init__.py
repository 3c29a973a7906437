"""Domain layer for moneymind application.

Services are exposed lazily so that ``moneymind.database`` can import the
entities module without pulling in the services that depend on it.
"""

_SERVICES = {
    "AccountService": "moneymind.domain.account",
    "TransactionService": "moneymind.domain.transaction",
    "DuplicateDetectionService": "moneymind.domain.duplicates",
    "SyncService": "moneymind.domain.sync",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
