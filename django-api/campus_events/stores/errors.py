"""Errors raised by store implementations.

These describe what the storage boundary observed. Services and the
registration ledger translate them into domain errors.
"""


class StoreError(Exception):
    """The store could not complete the operation."""


class DuplicateKeyError(StoreError):
    """A registration for the (event, user) pair already exists."""


class CapacityExceededError(StoreError):
    """The event has no free slots left at the time of insert."""


class MissingRowError(StoreError):
    """The row to update or delete does not exist."""
