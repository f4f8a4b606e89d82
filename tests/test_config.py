"""Unit tests for app.core.config validators, app.core.logger levels and app.core.context."""

import logging
import unittest
from unittest.mock import MagicMock

from pydantic import ValidationError

from app.core.config import Settings
from app.core.context import CallContext, ensure_active
from app.core.logger import build_formatter, resolve_level


def _settings(**kwargs: object) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestSettings(unittest.TestCase):
    """Settings reject values the services cannot run with."""

    def test_defaults(self) -> None:
        s = _settings()
        self.assertEqual(s.API_V1_PREFIX, "/api/v1")
        self.assertEqual(s.users_grpc_target, f"{s.USERS_GRPC_HOST}:{s.USERS_GRPC_PORT}")

    def test_non_postgres_database_url(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://root@localhost/users")

    def test_database_url_pinned_to_psycopg2(self) -> None:
        for url in (
            "postgresql://u:p@db:5432/users",
            "postgres://u:p@db:5432/users",
            " postgresql+psycopg2://u:p@db:5432/users ",
        ):
            with self.subTest(url=url):
                self.assertEqual(
                    _settings(DATABASE_URL=url).DATABASE_URL,
                    "postgresql+psycopg2://u:p@db:5432/users",
                )

    def test_default_database_url_uses_psycopg2(self) -> None:
        self.assertTrue(_settings().DATABASE_URL.startswith("postgresql+psycopg2://"))

    def test_port_out_of_range(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(USERS_MANAGER_PORT=70000)

    def test_gateway_timeout_must_be_positive(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(GATEWAY_REQUEST_TIMEOUT_SEC=0)

    def test_log_level_normalised(self) -> None:
        self.assertEqual(_settings(LOG_LEVEL=" warning ").LOG_LEVEL, "WARNING")
        self.assertIsNone(_settings(LOG_LEVEL="").LOG_LEVEL)
        with self.assertRaises(ValidationError):
            _settings(LOG_LEVEL="LOUD")


class TestResolveLevel(unittest.TestCase):
    def test_env_levels(self) -> None:
        self.assertEqual(resolve_level("local"), logging.DEBUG)
        self.assertEqual(resolve_level("dev"), logging.DEBUG)
        self.assertEqual(resolve_level("prod"), logging.INFO)

    def test_override_wins(self) -> None:
        self.assertEqual(resolve_level("local", "ERROR"), logging.ERROR)

    def test_timestamps_are_utc(self) -> None:
        record = logging.LogRecord("app", logging.INFO, __file__, 1, "hello", None, None)
        record.created = 0.0
        self.assertEqual(build_formatter().format(record), "1970-01-01T00:00:00Z INFO app hello")


class TestCallContext(unittest.TestCase):
    """CallContext: cancellation flag and deadline, checked without blocking."""

    def test_active_without_deadline(self) -> None:
        ctx = CallContext()
        self.assertTrue(ctx.is_active())
        self.assertIsNone(ctx.time_remaining())

    def test_cancel(self) -> None:
        ctx = CallContext(timeout=30)
        ctx.cancel()
        self.assertTrue(ctx.cancelled())
        self.assertFalse(ctx.is_active())
        with self.assertRaises(KeyError):
            ensure_active(ctx, canceled=KeyError, deadline_exceeded=TimeoutError)

    def test_expired_deadline(self) -> None:
        ctx = CallContext(timeout=0)
        self.assertEqual(ctx.time_remaining(), 0.0)
        self.assertFalse(ctx.is_active())
        with self.assertRaises(TimeoutError):
            ensure_active(ctx, canceled=KeyError, deadline_exceeded=TimeoutError)

    def test_cancel_runs_callbacks_once(self) -> None:
        ctx = CallContext()
        callback = MagicMock()
        self.assertTrue(ctx.add_callback(callback))
        ctx.cancel()
        ctx.cancel()
        callback.assert_called_once_with()

    def test_add_callback_after_cancel_is_rejected(self) -> None:
        ctx = CallContext()
        ctx.cancel()
        callback = MagicMock()
        self.assertFalse(ctx.add_callback(callback))
        callback.assert_not_called()

    def test_active_passes(self) -> None:
        ensure_active(CallContext(timeout=30), canceled=KeyError, deadline_exceeded=TimeoutError)


if __name__ == "__main__":
    unittest.main()
