"""Domain-specific exceptions."""


class DomainError(Exception):
    """Base exception for domain errors."""

    pass


class ValidationError(DomainError):
    """Raised when a record cannot be built from its input."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Validation error: {message}")


class StoreNotConnectedError(DomainError):
    """Raised when a record operation runs before connect() was ever called."""

    def __init__(self):
        super().__init__("Ledger store has no connection. Call connect() first.")


class StoreConnectionError(DomainError):
    """Connection failure delivered through the store's error event.

    Also used to wrap non-exception values that reach the error path, so the
    message text is kept exactly as given.
    """

    pass
