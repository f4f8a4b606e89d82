"""Errors raised by UsersService; transports map these to status codes."""


class ServiceError(Exception):
    """Base class for users service failures, selected by class."""

    default_message = "service error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ServiceError):
    default_message = "user not found"


class AlreadyExistsError(ServiceError):
    default_message = "user already exists"


class InvalidArgumentError(ServiceError):
    default_message = "invalid argument"


class RequestCanceledError(ServiceError):
    default_message = "context canceled"


class DeadlineExceededError(ServiceError):
    default_message = "deadline exceeded"


class InternalError(ServiceError):
    default_message = "internal error"
