"""Errors raised by storage adapters, selected by class rather than message text."""


class StorageError(Exception):
    """Base class for failures a storage adapter reports by kind."""

    default_message = "storage error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(StorageError):
    """No row matched the requested id (or zero rows were affected)."""

    default_message = "not found"


class AlreadyExistsError(StorageError):
    """A row with the same id already exists."""

    default_message = "already exists"


class InvalidArgumentError(StorageError):
    """The remote side rejected the request as malformed."""

    default_message = "invalid argument"


class RequestCanceledError(StorageError):
    """The call was cancelled before it completed."""

    default_message = "context canceled"


class DeadlineExceededError(StorageError):
    """The caller's deadline passed before the call completed."""

    default_message = "deadline exceeded"


class InternalError(StorageError):
    """Any other failure on the remote side."""

    default_message = "internal"
