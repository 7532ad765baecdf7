"""
Error types and helpers for consistent error handling.

Store failures and torn-down recipients are expected at runtime
and are dropped where they occur.  Everything else propagates.
"""


class MonitorError(Exception):
    """Base class for privacy monitor errors."""


class StoreError(MonitorError):
    """A persisted-state read or write could not complete."""


class StoreReadError(StoreError):
    """Reading a key from the state store failed."""


class StoreWriteError(StoreError):
    """Writing a key to the state store failed."""


class RecipientGoneError(MonitorError):
    """The receiving page or tab context no longer exists.

    Raised by event sinks when a message is sent during page or
    tab teardown.  Callers treat it as expected, not as a bug.
    """


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"
