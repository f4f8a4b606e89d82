"""PostgreSQL storage for users (SQLAlchemy ORM over the users table)."""

import logging
from collections.abc import Callable
from uuid import UUID

from psycopg2 import errorcodes
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.context import RequestContext, ensure_active
from app.models.user import User
from app.schemas.user import UserPayload
from app.storage.errors import (
    AlreadyExistsError,
    DeadlineExceededError,
    NotFoundError,
    RequestCanceledError,
)

logger = logging.getLogger(__name__)


def _is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg2 exposes the SQLSTATE as pgcode, psycopg 3 as sqlstate
    sqlstate = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    return sqlstate == errorcodes.UNIQUE_VIOLATION


class UsersPsqlStorage:
    """
    One session per operation; only "no row" and unique violations are translated.

    Every other driver error propagates unchanged.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _ensure_active(ctx: RequestContext) -> None:
        ensure_active(
            ctx,
            canceled=RequestCanceledError,
            deadline_exceeded=DeadlineExceededError,
        )

    def get_users(self, ctx: RequestContext) -> list[UserPayload]:
        self._ensure_active(ctx)
        with self._session_factory() as db:
            rows = db.query(User).order_by(User.login).all()
            return [UserPayload.model_validate(row) for row in rows]

    def get_user_by_id(self, ctx: RequestContext, uid: UUID) -> UserPayload:
        self._ensure_active(ctx)
        with self._session_factory() as db:
            row = db.query(User).filter(User.id == uid).first()
            if row is None:
                logger.warning("User does not exist: user_id=%s", uid)
                raise NotFoundError(f"user {uid} not found")
            return UserPayload.model_validate(row)

    def insert(self, ctx: RequestContext, user: UserPayload) -> UserPayload:
        self._ensure_active(ctx)
        with self._session_factory() as db:
            db.add(
                User(
                    id=user.id,
                    login=user.login,
                    password=user.password,
                    role=user.role,
                )
            )
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                if _is_unique_violation(e):
                    logger.warning("User already exists: user_id=%s", user.id)
                    raise AlreadyExistsError(f"user {user.id} already exists") from e
                logger.error("Error inserting user: user_id=%s", user.id)
                raise
        return user

    def update(self, ctx: RequestContext, uid: UUID, user: UserPayload) -> UserPayload:
        """Overwrite login, password and role of ``uid``; the body's id is ignored."""
        self._ensure_active(ctx)
        with self._session_factory() as db:
            affected = (
                db.query(User)
                .filter(User.id == uid)
                .update(
                    {
                        User.login: user.login,
                        User.password: user.password,
                        User.role: user.role,
                    },
                    synchronize_session=False,
                )
            )
            if affected == 0:
                db.rollback()
                logger.warning("Zero users affected by update: user_id=%s", uid)
                raise NotFoundError(f"user {uid} not found")
            db.commit()
        return user.model_copy(update={"id": uid})

    def delete(self, ctx: RequestContext, uid: UUID) -> UserPayload:
        """Delete ``uid`` and return the row as it was before deletion."""
        self._ensure_active(ctx)
        with self._session_factory() as db:
            row = db.query(User).filter(User.id == uid).first()
            if row is None:
                logger.warning("User does not exist, nothing to delete: user_id=%s", uid)
                raise NotFoundError(f"user {uid} not found")
            deleted = UserPayload.model_validate(row)
            db.delete(row)
            db.commit()
        return deleted
