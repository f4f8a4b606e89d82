"""Users CRUD endpoints: forward to the users manager and map service errors to HTTP status."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import Annotated, NoReturn
from uuid import UUID

import grpc
from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.core.config import Settings, get_settings
from app.core.context import CallContext
from app.core.rpc_client import get_users_channel
from app.schemas.user import UserPayload
from app.services.errors import (
    AlreadyExistsError,
    DeadlineExceededError,
    InvalidArgumentError,
    NotFoundError,
    RequestCanceledError,
    ServiceError,
)
from app.services.users import UsersService
from app.storage.users_grpc import UsersGrpcStorage

logger = logging.getLogger(__name__)
router = APIRouter()

# Service error -> (HTTP status, detail). Anything else is a 500 with an operation-specific detail.
HTTP_ERROR_BY_SERVICE_ERROR: dict[type[ServiceError], tuple[int, str]] = {
    InvalidArgumentError: (status.HTTP_400_BAD_REQUEST, "Invalid argument"),
    NotFoundError: (status.HTTP_404_NOT_FOUND, "User not found"),
    RequestCanceledError: (status.HTTP_408_REQUEST_TIMEOUT, "Request timeout"),
    DeadlineExceededError: (status.HTTP_408_REQUEST_TIMEOUT, "Request timeout"),
    AlreadyExistsError: (status.HTTP_409_CONFLICT, "User already exists"),
}


# How often the gateway checks whether the HTTP client is still connected.
DISCONNECT_POLL_INTERVAL_SEC = 0.1


async def _cancel_on_disconnect(request: Request, ctx: CallContext) -> None:
    while ctx.is_active():
        if await request.is_disconnected():
            logger.info("Client disconnected: %s %s", request.method, request.url.path)
            ctx.cancel()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL_SEC)


async def get_call_context(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncIterator[CallContext]:
    """
    Dependency: a fresh context for one request.

    Its deadline bounds the whole request, and it is cancelled as soon as the
    client disconnects, which also cancels any in-flight call to the users manager.
    """
    ctx = CallContext(timeout=settings.GATEWAY_REQUEST_TIMEOUT_SEC)
    if await request.is_disconnected():
        ctx.cancel()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, ctx))
    try:
        yield ctx
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher


def get_users_service(
    channel: Annotated[grpc.Channel, Depends(get_users_channel)],
) -> UsersService:
    """Dependency: the gateway's UsersService over the shared gRPC channel."""
    return UsersService(UsersGrpcStorage(channel))


def _ensure_active(ctx: CallContext, op: str) -> None:
    if not ctx.is_active():
        logger.info("%s: request cancelled before processing", op)
        raise HTTPException(
            status_code=status.HTTP_408_REQUEST_TIMEOUT,
            detail="Request timeout",
        )


def _parse_user_id(raw: str, op: str) -> UUID:
    try:
        return UUID(raw)
    except ValueError:
        logger.warning("%s: invalid user id %r", op, raw)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid id",
        ) from None


def _raise_http_error(op: str, exc: ServiceError, internal_detail: str) -> NoReturn:
    for error_cls, (code, detail) in HTTP_ERROR_BY_SERVICE_ERROR.items():
        if isinstance(exc, error_cls):
            logger.warning("%s: %s", op, exc.message)
            raise HTTPException(status_code=code, detail=detail) from exc
    logger.error("%s: %s", op, exc.message)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=internal_detail,
    ) from exc


@router.get("", response_model=list[UserPayload])
def list_users(
    ctx: Annotated[CallContext, Depends(get_call_context)],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> list[UserPayload]:
    """Return every user."""
    op = "handlers.users.list_users"
    _ensure_active(ctx, op)
    try:
        return service.get_users(ctx)
    except ServiceError as e:
        _raise_http_error(op, e, "Failed to fetch users")


@router.get("/{user_id}", response_model=UserPayload)
def get_user(
    user_id: str,
    ctx: Annotated[CallContext, Depends(get_call_context)],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> UserPayload:
    """Return one user by id; 400 for a malformed id, 404 when it does not exist."""
    op = "handlers.users.get_user"
    _ensure_active(ctx, op)
    uid = _parse_user_id(user_id, op)
    try:
        return service.get_user_by_id(ctx, uid)
    except ServiceError as e:
        _raise_http_error(op, e, "Failed to fetch user by id")


@router.post("", response_model=UserPayload, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserPayload,
    ctx: Annotated[CallContext, Depends(get_call_context)],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> UserPayload:
    """
    Insert a user with a caller-chosen id.

    409 when a user with the same id already exists.
    """
    op = "handlers.users.create_user"
    _ensure_active(ctx, op)
    try:
        return service.insert(ctx, body)
    except ServiceError as e:
        _raise_http_error(op, e, "Failed to insert user")


@router.put("/{user_id}", response_model=UserPayload)
def update_user(
    user_id: str,
    body: UserPayload,
    ctx: Annotated[CallContext, Depends(get_call_context)],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> UserPayload:
    """Replace login, password and role of an existing user; the id in the path wins."""
    op = "handlers.users.update_user"
    _ensure_active(ctx, op)
    uid = _parse_user_id(user_id, op)
    try:
        return service.update(ctx, uid, body)
    except ServiceError as e:
        _raise_http_error(op, e, "Failed to update user")


@router.delete("/{user_id}", response_model=UserPayload)
def delete_user(
    user_id: str,
    ctx: Annotated[CallContext, Depends(get_call_context)],
    service: Annotated[UsersService, Depends(get_users_service)],
) -> UserPayload:
    """Delete a user and return it as it was."""
    op = "handlers.users.delete_user"
    _ensure_active(ctx, op)
    uid = _parse_user_id(user_id, op)
    try:
        return service.delete(ctx, uid)
    except ServiceError as e:
        _raise_http_error(op, e, "Failed to delete user")
