"""Application-level exceptions.

These are business-logic errors, not HTTP errors. The presentation layer
(e.g. FastAPI routes) translates them into appropriate HTTP responses.
"""


class DuplicateEmailError(ValueError):
    """Raised when signing up with an email that already has an account."""


class EmptyMessageError(ValueError):
    """Raised when the caller sends a blank chat message."""


class ReplyPendingError(RuntimeError):
    """Raised when a message is sent while the previous reply is still in flight."""


class InvalidStatusTransitionError(ValueError):
    """Raised when an item is not in the status an operation requires."""


class PermissionDeniedError(PermissionError):
    """Raised when a user's role or ownership does not allow an operation."""
