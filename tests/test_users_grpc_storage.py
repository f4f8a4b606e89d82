"""Unit tests for app.storage.users_grpc and app.rpc.status: status code -> storage error."""

import unittest
import uuid
from unittest.mock import MagicMock, patch

import grpc

from app.core.context import CallContext
from app.rpc.messages import GetUserByIdResponse, GetUsersResponse, UserMessage
from app.rpc.status import storage_error_for_rpc_error
from app.schemas.user import UserPayload
from app.storage import errors as storage_errors
from app.storage.users_grpc import UsersGrpcStorage


class _FakeRpcError(grpc.RpcError):
    """RpcError carrying a status code, as a failed unary call raises."""

    def __init__(self, code: grpc.StatusCode, details: str = "") -> None:
        self._code = code
        self._details = details
        super().__init__(details)

    def code(self) -> grpc.StatusCode:
        return self._code

    def details(self) -> str:
        return self._details


def _respond(method: MagicMock, response: object) -> MagicMock:
    """Make ``method.future(...)`` return a call resolving to ``response``; returns the call."""
    call = method.future.return_value
    call.result.return_value = response
    return call


def _fail(method: MagicMock, error: Exception) -> MagicMock:
    """Make ``method.future(...)`` return a call whose result raises ``error``."""
    call = method.future.return_value
    call.result.side_effect = error
    return call


def _storage() -> tuple[UsersGrpcStorage, MagicMock]:
    """Storage whose stub is a MagicMock, returned alongside it."""
    with patch("app.storage.users_grpc.UsersManagerStub") as stub_cls:
        storage = UsersGrpcStorage(MagicMock())
    return storage, stub_cls.return_value


class TestStorageErrorForRpcError(unittest.TestCase):
    """Each status code maps to one storage error; unknown codes are internal."""

    def test_table(self) -> None:
        cases = [
            (grpc.StatusCode.CANCELLED, storage_errors.RequestCanceledError),
            (grpc.StatusCode.DEADLINE_EXCEEDED, storage_errors.DeadlineExceededError),
            (grpc.StatusCode.INVALID_ARGUMENT, storage_errors.InvalidArgumentError),
            (grpc.StatusCode.ALREADY_EXISTS, storage_errors.AlreadyExistsError),
            (grpc.StatusCode.NOT_FOUND, storage_errors.NotFoundError),
            (grpc.StatusCode.INTERNAL, storage_errors.InternalError),
            (grpc.StatusCode.UNAVAILABLE, storage_errors.InternalError),
        ]
        for code, expected in cases:
            with self.subTest(code=code):
                self.assertIsInstance(storage_error_for_rpc_error(_FakeRpcError(code)), expected)

    def test_error_without_status_is_internal(self) -> None:
        self.assertIsInstance(
            storage_error_for_rpc_error(grpc.RpcError()), storage_errors.InternalError
        )

    def test_keeps_details_as_message(self) -> None:
        err = storage_error_for_rpc_error(
            _FakeRpcError(grpc.StatusCode.NOT_FOUND, "user not found")
        )
        self.assertEqual(err.message, "user not found")


class TestUsersGrpcStorage(unittest.TestCase):
    """Calls carry the remaining time and re-raise failures as storage errors."""

    def test_passes_remaining_time_as_timeout(self) -> None:
        storage, stub = _storage()
        uid = uuid.uuid4()
        _respond(
            stub.GetUserById,
            GetUserByIdResponse(user=UserMessage(id=str(uid), login="a", password="b", role="c")),
        )
        user = storage.get_user_by_id(CallContext(timeout=5), uid)
        self.assertEqual(user.id, uid)
        timeout = stub.GetUserById.future.call_args.kwargs["timeout"]
        self.assertGreater(timeout, 0)
        self.assertLessEqual(timeout, 5)

    def test_not_found_status_raises_not_found(self) -> None:
        storage, stub = _storage()
        _fail(stub.Delete, _FakeRpcError(grpc.StatusCode.NOT_FOUND))
        with self.assertRaises(storage_errors.NotFoundError):
            storage.delete(CallContext(), uuid.uuid4())

    def test_already_exists_status_raises_already_exists(self) -> None:
        storage, stub = _storage()
        _fail(stub.Insert, _FakeRpcError(grpc.StatusCode.ALREADY_EXISTS))
        user = UserPayload(id=uuid.uuid4(), login="a", password="b", role="c")
        with self.assertRaises(storage_errors.AlreadyExistsError):
            storage.insert(CallContext(), user)

    def test_cancelled_context_skips_call(self) -> None:
        storage, stub = _storage()
        ctx = CallContext()
        ctx.cancel()
        with self.assertRaises(storage_errors.RequestCanceledError):
            storage.get_users(ctx)
        stub.GetUsers.future.assert_not_called()

    def test_cancel_during_call_cancels_rpc(self) -> None:
        storage, stub = _storage()
        ctx = CallContext(timeout=5)
        call = stub.GetUsers.future.return_value

        def _cancel_then_raise() -> None:
            ctx.cancel()
            raise grpc.FutureCancelledError()

        call.result.side_effect = _cancel_then_raise
        with self.assertRaises(storage_errors.RequestCanceledError):
            storage.get_users(ctx)
        call.cancel.assert_called_once_with()

    def test_finished_call_is_not_cancelled(self) -> None:
        storage, stub = _storage()
        call = _respond(stub.GetUsers, GetUsersResponse(users=[]))
        self.assertEqual(storage.get_users(CallContext(timeout=5)), [])
        call.cancel.assert_not_called()

    def test_list_skips_malformed_users(self) -> None:
        storage, stub = _storage()
        good = UserMessage(id=str(uuid.uuid4()), login="a", password="b", role="c")
        _respond(
            stub.GetUsers,
            GetUsersResponse(users=[good, UserMessage(id="bad", login="x", password="y", role="z")]),
        )
        users = storage.get_users(CallContext())
        self.assertEqual([str(u.id) for u in users], [good.id])

    def test_malformed_single_user_is_internal(self) -> None:
        storage, stub = _storage()
        _respond(stub.GetUserById, GetUserByIdResponse(user=None))
        with self.assertRaises(storage_errors.InternalError):
            storage.get_user_by_id(CallContext(), uuid.uuid4())


if __name__ == "__main__":
    unittest.main()
