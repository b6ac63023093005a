"""Exceptions raised by the persistence layer.

Expected failures never surface here; they are returned as failed results.
These exceptions signal either a broken storage backend or a programming
error in how the persistence contract is used.
"""


class StorageFault(Exception):
    """The underlying store failed while reading or flushing."""


class UnitOfWorkError(Exception):
    """Base class for misuse of a unit of work."""


class UnitOfWorkClosed(UnitOfWorkError):
    """The unit of work was already committed or rolled back."""


class NestedUnitOfWork(UnitOfWorkError):
    """A unit of work was begun while another one is still open."""
