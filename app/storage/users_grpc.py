"""Users storage backed by the users manager over gRPC (used by the HTTP gateway)."""

import logging
from uuid import UUID

import grpc
from pydantic import BaseModel

from app.core.context import RequestContext, ensure_active
from app.rpc.messages import (
    DeleteRequest,
    GetUserByIdRequest,
    GetUsersRequest,
    InsertRequest,
    UpdateRequest,
    UserMessage,
    message_to_user,
    user_to_message,
)
from app.rpc.status import rpc_error_code, storage_error_for_rpc_error
from app.rpc.users_manager import UsersManagerStub
from app.schemas.user import UserPayload
from app.storage.errors import (
    DeadlineExceededError,
    InternalError,
    RequestCanceledError,
)

logger = logging.getLogger(__name__)


class UsersGrpcStorage:
    """
    Client adapter: every call carries the caller's remaining time as its timeout
    and is cancelled together with the caller's context.

    Failed calls are re-raised as storage errors chosen by status code.
    """

    def __init__(self, channel: grpc.Channel) -> None:
        self._stub = UsersManagerStub(channel)

    def _call(
        self,
        op: str,
        method: grpc.UnaryUnaryMultiCallable,
        request: BaseModel,
        ctx: RequestContext,
    ):
        ensure_active(
            ctx,
            canceled=RequestCanceledError,
            deadline_exceeded=DeadlineExceededError,
        )
        call = method.future(request, timeout=ctx.time_remaining())
        # cancelling the request cancels the in-flight call
        if not ctx.add_callback(call.cancel):
            call.cancel()
        try:
            return call.result()
        except grpc.FutureCancelledError as e:
            logger.info("%s: request cancelled, rpc aborted", op)
            raise RequestCanceledError("request cancelled during rpc") from e
        except grpc.RpcError as e:
            err = storage_error_for_rpc_error(e)
            if isinstance(err, InternalError):
                logger.error("%s: rpc failed with %s: %s", op, rpc_error_code(e), err.message)
            else:
                logger.warning("%s: rpc failed with %s: %s", op, rpc_error_code(e), err.message)
            raise err from e

    def _user_from_response(self, op: str, message: UserMessage | None) -> UserPayload:
        try:
            return message_to_user(message)
        except ValueError as e:
            logger.error("%s: wrong user format in response: %s", op, e)
            raise InternalError("wrong user format in response") from e

    def get_users(self, ctx: RequestContext) -> list[UserPayload]:
        op = "storage.users.grpc.get_users"
        response = self._call(op, self._stub.GetUsers, GetUsersRequest(), ctx)
        users = []
        for message in response.users:
            try:
                users.append(message_to_user(message))
            except ValueError as e:
                logger.warning("%s: skipping user with wrong format: %s", op, e)
        return users

    def get_user_by_id(self, ctx: RequestContext, uid: UUID) -> UserPayload:
        op = "storage.users.grpc.get_user_by_id"
        response = self._call(op, self._stub.GetUserById, GetUserByIdRequest(id=str(uid)), ctx)
        return self._user_from_response(op, response.user)

    def insert(self, ctx: RequestContext, user: UserPayload) -> UserPayload:
        op = "storage.users.grpc.insert"
        request = InsertRequest(user=user_to_message(user))
        response = self._call(op, self._stub.Insert, request, ctx)
        return self._user_from_response(op, response.user)

    def update(self, ctx: RequestContext, uid: UUID, user: UserPayload) -> UserPayload:
        op = "storage.users.grpc.update"
        request = UpdateRequest(id=str(uid), user=user_to_message(user))
        response = self._call(op, self._stub.Update, request, ctx)
        return self._user_from_response(op, response.user)

    def delete(self, ctx: RequestContext, uid: UUID) -> UserPayload:
        op = "storage.users.grpc.delete"
        response = self._call(op, self._stub.Delete, DeleteRequest(id=str(uid)), ctx)
        return self._user_from_response(op, response.user)
