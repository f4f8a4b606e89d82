"""Lookup tables between error classes and gRPC status codes, one per direction."""

import grpc

from app.services import errors as service_errors
from app.storage import errors as storage_errors

# Server side: service error -> status code. Anything else is INTERNAL.
STATUS_BY_SERVICE_ERROR: dict[type[service_errors.ServiceError], grpc.StatusCode] = {
    service_errors.InvalidArgumentError: grpc.StatusCode.INVALID_ARGUMENT,
    service_errors.NotFoundError: grpc.StatusCode.NOT_FOUND,
    service_errors.AlreadyExistsError: grpc.StatusCode.ALREADY_EXISTS,
    service_errors.RequestCanceledError: grpc.StatusCode.CANCELLED,
    service_errors.DeadlineExceededError: grpc.StatusCode.DEADLINE_EXCEEDED,
}

# Client side: status code -> storage error. Anything else is InternalError.
STORAGE_ERROR_BY_STATUS: dict[grpc.StatusCode, type[storage_errors.StorageError]] = {
    grpc.StatusCode.CANCELLED: storage_errors.RequestCanceledError,
    grpc.StatusCode.DEADLINE_EXCEEDED: storage_errors.DeadlineExceededError,
    grpc.StatusCode.INVALID_ARGUMENT: storage_errors.InvalidArgumentError,
    grpc.StatusCode.ALREADY_EXISTS: storage_errors.AlreadyExistsError,
    grpc.StatusCode.NOT_FOUND: storage_errors.NotFoundError,
}


def status_for_service_error(exc: Exception) -> grpc.StatusCode:
    for error_cls, code in STATUS_BY_SERVICE_ERROR.items():
        if isinstance(exc, error_cls):
            return code
    return grpc.StatusCode.INTERNAL


def rpc_error_code(exc: Exception) -> grpc.StatusCode | None:
    """Status code carried by an RpcError, or None when it carries none."""
    code = getattr(exc, "code", None)
    if not callable(code):
        return None
    result = code()
    return result if isinstance(result, grpc.StatusCode) else None


def storage_error_for_rpc_error(exc: Exception) -> storage_errors.StorageError:
    """Translate a failed client call into a storage error (not raised here)."""
    code = rpc_error_code(exc)
    error_cls = STORAGE_ERROR_BY_STATUS.get(code, storage_errors.InternalError)
    details = getattr(exc, "details", None)
    message = details() if callable(details) else None
    return error_cls(message or None)
