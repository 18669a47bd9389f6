"""Domain errors raised by the messenger core.

Expected absence (unknown ids, missing tokens) is returned as None/False/0
and never raised. The exceptions below are mapped by the API layer:
ConflictError and InvariantViolationError -> 400, anything else -> 500.
"""


class MessengerError(Exception):
    """Base class for messenger errors."""

    code = "messenger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(MessengerError):
    """A write would collide with existing data."""

    code = "conflict"


class DuplicateEmailError(ConflictError):
    """Registration with an email that is already taken."""

    code = "duplicate_email"

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message)


class InvariantViolationError(MessengerError):
    """An operation would break a conversation or membership rule."""

    code = "invariant_violation"


class StorageError(MessengerError):
    """The snapshot file cannot be read or decoded."""

    code = "storage_error"
