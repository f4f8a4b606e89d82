"""Users domain service: forwards to a storage and re-maps its errors."""

import logging
from typing import Protocol
from uuid import UUID

from app.core.context import RequestContext, ensure_active
from app.schemas.user import UserPayload
from app.services.errors import (
    AlreadyExistsError,
    DeadlineExceededError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    RequestCanceledError,
    ServiceError,
)
from app.storage import errors as storage_errors

logger = logging.getLogger(__name__)

# Storage error kind -> service error kind. Anything not listed becomes InternalError.
SERVICE_ERROR_BY_STORAGE_ERROR: dict[type[storage_errors.StorageError], type[ServiceError]] = {
    storage_errors.NotFoundError: NotFoundError,
    storage_errors.AlreadyExistsError: AlreadyExistsError,
    storage_errors.InvalidArgumentError: InvalidArgumentError,
    storage_errors.RequestCanceledError: RequestCanceledError,
    storage_errors.DeadlineExceededError: DeadlineExceededError,
}


class UsersStorage(Protocol):
    """Operations both the PostgreSQL and the gRPC storage adapters provide."""

    def get_users(self, ctx: RequestContext) -> list[UserPayload]: ...

    def get_user_by_id(self, ctx: RequestContext, uid: UUID) -> UserPayload: ...

    def insert(self, ctx: RequestContext, user: UserPayload) -> UserPayload: ...

    def update(self, ctx: RequestContext, uid: UUID, user: UserPayload) -> UserPayload: ...

    def delete(self, ctx: RequestContext, uid: UUID) -> UserPayload: ...


def translate_storage_error(exc: Exception) -> ServiceError:
    """Return the service error for a storage failure (not raised here)."""
    for storage_cls, service_cls in SERVICE_ERROR_BY_STORAGE_ERROR.items():
        if isinstance(exc, storage_cls):
            return service_cls(exc.message)
    return InternalError()


class UsersService:
    """
    Users operations over any UsersStorage.

    The users manager runs one instance over PostgreSQL; the gateway runs another
    over the gRPC client. Each operation checks the request context before
    touching storage, so a cancelled request never reaches the database.
    """

    def __init__(self, storage: UsersStorage) -> None:
        self._storage = storage

    def _ensure_active(self, ctx: RequestContext, op: str) -> None:
        try:
            ensure_active(
                ctx,
                canceled=RequestCanceledError,
                deadline_exceeded=DeadlineExceededError,
            )
        except ServiceError as e:
            logger.info("%s: request no longer active (%s)", op, e.message)
            raise

    def _fail(self, op: str, exc: Exception, user_id: UUID | None = None) -> ServiceError:
        err = translate_storage_error(exc)
        if isinstance(err, InternalError):
            logger.error("%s failed: user_id=%s", op, user_id, exc_info=exc)
        else:
            logger.warning("%s: %s (user_id=%s)", op, err.message, user_id)
        return err

    def get_users(self, ctx: RequestContext) -> list[UserPayload]:
        op = "service.users.get_users"
        self._ensure_active(ctx, op)
        try:
            users = self._storage.get_users(ctx)
        except Exception as e:
            raise self._fail(op, e) from e
        logger.info("Users fetched successfully: count=%d", len(users))
        return users

    def get_user_by_id(self, ctx: RequestContext, uid: UUID) -> UserPayload:
        op = "service.users.get_user_by_id"
        self._ensure_active(ctx, op)
        try:
            user = self._storage.get_user_by_id(ctx, uid)
        except Exception as e:
            raise self._fail(op, e, uid) from e
        logger.info("User fetched successfully: user_id=%s", user.id)
        return user

    def insert(self, ctx: RequestContext, user: UserPayload) -> UserPayload:
        op = "service.users.insert"
        self._ensure_active(ctx, op)
        try:
            inserted = self._storage.insert(ctx, user)
        except Exception as e:
            raise self._fail(op, e, user.id) from e
        logger.info("User inserted successfully: user_id=%s", inserted.id)
        return inserted

    def update(self, ctx: RequestContext, uid: UUID, user: UserPayload) -> UserPayload:
        op = "service.users.update"
        self._ensure_active(ctx, op)
        try:
            updated = self._storage.update(ctx, uid, user)
        except Exception as e:
            raise self._fail(op, e, uid) from e
        logger.info("User updated successfully: user_id=%s", updated.id)
        return updated

    def delete(self, ctx: RequestContext, uid: UUID) -> UserPayload:
        op = "service.users.delete"
        self._ensure_active(ctx, op)
        try:
            deleted = self._storage.delete(ctx, uid)
        except Exception as e:
            raise self._fail(op, e, uid) from e
        logger.info("User deleted successfully: user_id=%s", deleted.id)
        return deleted
