"""User storage exceptions for error handling."""


class UserStorageError(Exception):
    """Base exception for all user storage operations."""
    pass


class ReadOnlyException(UserStorageError):
    """Mutation attempted while the provider is read-only.

    Raised before any state change, so the record is untouched.
    """
    pass


class LiveAdapterUnavailableError(UserStorageError):
    """A user handle could not be unwrapped to a live, mutable adapter."""
    pass


class InvalidRepresentationError(UserStorageError, ValueError):
    """User representation payload failed validation.

    Attributes:
        field: Offending field name (may be None)
        message: Human-readable reason
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}" if field else message)
