from campus_events.stores.errors import (
    CapacityExceededError,
    DuplicateKeyError,
    MissingRowError,
    StoreError,
)
from campus_events.stores.interfaces import EventStore, NotificationStore

__all__ = [
    "EventStore",
    "NotificationStore",
    "StoreError",
    "DuplicateKeyError",
    "CapacityExceededError",
    "MissingRowError",
]
