"""User store implementations."""

from salsaflow.stores.base import UserStore
from salsaflow.stores.bounded import BoundedUserStore
from salsaflow.stores.memory import MemoryUserStore
from salsaflow.stores.sql import SQLUserStore

__all__ = ["UserStore", "BoundedUserStore", "MemoryUserStore", "SQLUserStore", "open_store"]


def open_store(url: str, *, timeout: float | None = None, echo: bool = False) -> UserStore:
    """Pick a store for ``url``: ``memory://`` or any async SQLAlchemy URL.

    With ``timeout`` set, every call on the returned store is bounded by it.
    """
    store: UserStore
    if url == "memory://":
        store = MemoryUserStore()
    else:
        store = SQLUserStore(url, echo=echo)
    if timeout is not None:
        store = BoundedUserStore(store, timeout)
    return store
