"""Tests for app.scripts.create_user argument handling and exit codes."""

import unittest
import uuid
from unittest.mock import MagicMock, patch

from app.scripts import create_user
from app.services.errors import AlreadyExistsError, InternalError


class TestCreateUserScript(unittest.TestCase):
    """main() inserts through UsersService and returns a shell exit code."""

    @patch("app.scripts.create_user.UsersService")
    def test_creates_user_with_given_id(self, mock_service_cls: MagicMock) -> None:
        uid = uuid.uuid4()
        service = mock_service_cls.return_value
        service.insert.side_effect = lambda ctx, user: user
        code = create_user.main(["admin", "pw", "admin", "--id", str(uid)])
        self.assertEqual(code, 0)
        user = service.insert.call_args.args[1]
        self.assertEqual(user.id, uid)
        self.assertEqual(user.login, "admin")
        self.assertEqual(user.role, "admin")

    @patch("app.scripts.create_user.UsersService")
    def test_default_role(self, mock_service_cls: MagicMock) -> None:
        service = mock_service_cls.return_value
        service.insert.side_effect = lambda ctx, user: user
        self.assertEqual(create_user.main(["bob", "pw"]), 0)
        self.assertEqual(service.insert.call_args.args[1].role, "user")

    @patch("app.scripts.create_user.UsersService")
    def test_invalid_id_does_not_insert(self, mock_service_cls: MagicMock) -> None:
        self.assertEqual(create_user.main(["bob", "pw", "--id", "nope"]), 1)
        mock_service_cls.return_value.insert.assert_not_called()

    @patch("app.scripts.create_user.UsersService")
    def test_blank_login_rejected(self, mock_service_cls: MagicMock) -> None:
        self.assertEqual(create_user.main(["  ", "pw"]), 1)
        mock_service_cls.return_value.insert.assert_not_called()

    @patch("app.scripts.create_user.UsersService")
    def test_service_errors_exit_1(self, mock_service_cls: MagicMock) -> None:
        service = mock_service_cls.return_value
        for error in (AlreadyExistsError(), InternalError()):
            with self.subTest(error=type(error).__name__):
                service.insert.side_effect = error
                self.assertEqual(create_user.main(["bob", "pw"]), 1)


if __name__ == "__main__":
    unittest.main()
