"""gRPC servicer: parses wire ids and users, calls UsersService, maps errors to status codes."""

import logging
from typing import NoReturn
from uuid import UUID

import grpc

from app.rpc.messages import (
    DeleteRequest,
    DeleteResponse,
    GetUserByIdRequest,
    GetUserByIdResponse,
    GetUsersRequest,
    GetUsersResponse,
    InsertRequest,
    InsertResponse,
    UpdateRequest,
    UpdateResponse,
    message_to_user,
    user_to_message,
)
from app.rpc.status import status_for_service_error
from app.rpc.users_manager import UsersManagerServicer, add_UsersManagerServicer_to_server
from app.schemas.user import UserPayload
from app.services.errors import ServiceError
from app.services.users import UsersService

logger = logging.getLogger(__name__)


class UsersServicer(UsersManagerServicer):
    """UsersManager backed by a UsersService; the servicer context is the request context."""

    def __init__(self, service: UsersService) -> None:
        self._service = service

    def _ensure_active(self, context: grpc.ServicerContext, op: str) -> None:
        if not context.is_active():
            logger.info("%s: context cancelled", op)
            context.abort(grpc.StatusCode.CANCELLED, "context is over")

    def _parse_id(self, raw: str, context: grpc.ServicerContext, op: str, details: str) -> UUID:
        try:
            return UUID(raw)
        except ValueError:
            logger.warning("%s: invalid user id format: %r", op, raw)
            context.abort(grpc.StatusCode.INVALID_ARGUMENT, details)

    def _parse_user(self, request, context: grpc.ServicerContext, op: str, details: str) -> UserPayload:
        try:
            return message_to_user(request.user)
        except ValueError as e:
            logger.warning("%s: invalid user data: %s", op, e)
            context.abort(grpc.StatusCode.INVALID_ARGUMENT, details)

    def _abort(
        self,
        context: grpc.ServicerContext,
        op: str,
        exc: ServiceError,
        internal_details: str,
    ) -> NoReturn:
        code = status_for_service_error(exc)
        if code == grpc.StatusCode.INTERNAL:
            logger.error("%s: %s", op, exc.message)
            context.abort(code, internal_details)
        logger.warning("%s: %s", op, exc.message)
        context.abort(code, exc.message)

    def GetUsers(self, request: GetUsersRequest, context: grpc.ServicerContext) -> GetUsersResponse:
        op = "grpc.users.get_users"
        self._ensure_active(context, op)
        try:
            users = self._service.get_users(context)
        except ServiceError as e:
            self._abort(context, op, e, "failed to fetch users")
        return GetUsersResponse(users=[user_to_message(u) for u in users])

    def GetUserById(
        self, request: GetUserByIdRequest, context: grpc.ServicerContext
    ) -> GetUserByIdResponse:
        op = "grpc.users.get_user_by_id"
        self._ensure_active(context, op)
        uid = self._parse_id(request.id, context, op, "invalid id format")
        try:
            user = self._service.get_user_by_id(context, uid)
        except ServiceError as e:
            self._abort(context, op, e, "failed to fetch user by id")
        return GetUserByIdResponse(user=user_to_message(user))

    def Insert(self, request: InsertRequest, context: grpc.ServicerContext) -> InsertResponse:
        op = "grpc.users.insert"
        self._ensure_active(context, op)
        user = self._parse_user(request, context, op, "invalid user data")
        try:
            inserted = self._service.insert(context, user)
        except ServiceError as e:
            self._abort(context, op, e, "failed to insert user")
        return InsertResponse(user=user_to_message(inserted))

    def Update(self, request: UpdateRequest, context: grpc.ServicerContext) -> UpdateResponse:
        op = "grpc.users.update"
        self._ensure_active(context, op)
        uid = self._parse_id(request.id, context, op, "invalid id format for update")
        user = self._parse_user(request, context, op, "invalid user data for update")
        try:
            updated = self._service.update(context, uid, user)
        except ServiceError as e:
            self._abort(context, op, e, "failed to update user")
        return UpdateResponse(user=user_to_message(updated))

    def Delete(self, request: DeleteRequest, context: grpc.ServicerContext) -> DeleteResponse:
        op = "grpc.users.delete"
        self._ensure_active(context, op)
        uid = self._parse_id(request.id, context, op, "invalid id format for deletion")
        try:
            deleted = self._service.delete(context, uid)
        except ServiceError as e:
            self._abort(context, op, e, "failed to delete user")
        return DeleteResponse(user=user_to_message(deleted))


def register(server: grpc.Server, service: UsersService) -> UsersServicer:
    servicer = UsersServicer(service)
    add_UsersManagerServicer_to_server(servicer, server)
    return servicer
