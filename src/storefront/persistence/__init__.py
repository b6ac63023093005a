"""Persistence factory.

Provides get_store() / set_store() so that services share one `DataStore` unless a
test swaps it out. Stores hold no locks of their own; concurrent commits are
settled by the storage transaction.
"""

from storefront.persistence.unit_of_work import DataStore

_current_store: DataStore | None = None


def get_store() -> DataStore:
    """Return the shared data store, creating it on first use."""
    global _current_store
    if _current_store is None:
        _current_store = DataStore()
    return _current_store


def set_store(store: DataStore) -> None:
    """Override the shared data store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    """Forget the shared data store."""
    global _current_store
    _current_store = None
