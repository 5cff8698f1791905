class StoreError(Exception):
    """Base class for errors raised by the status store."""


class MalformedInput(StoreError):
    """A report or one of its observations failed validation."""


class NotFound(StoreError):
    """History was requested for a node that never reported."""
