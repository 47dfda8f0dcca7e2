# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from authkeeper.domain.users.entities import NewUser, normalize_email
from authkeeper.domain.users.entities import User as DomainUser
from authkeeper.domain.users.exceptions import DuplicateEmailError, DuplicateUsernameError
from authkeeper.domain.users.repositories import UserRepository
from authkeeper.infrastructure.db import SessionFactory, init_db, session_scope
from authkeeper.infrastructure.db.models import EMAIL_INDEX, USERNAME_INDEX, UserRow
from authkeeper.shared.errors import StorageError
from authkeeper.shared.logging import logger

# Markers that the supported engines put into unique-violation messages
_EMAIL_MARKERS = (EMAIL_INDEX, "users.email", "(email)")
_USERNAME_MARKERS = (USERNAME_INDEX, "users.username", "(username)")


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_domain(row: UserRow) -> DomainUser:
    return DomainUser(
        id=row.id,
        email=row.email,
        username=row.username,
        password_hash=row.password_hash,
        created_at=_as_utc(row.created_at),
    )


def _duplicate_error(exc: IntegrityError) -> DuplicateEmailError | DuplicateUsernameError | None:
    message = str(exc.orig)
    if any(marker in message for marker in _EMAIL_MARKERS):
        return DuplicateEmailError()
    if any(marker in message for marker in _USERNAME_MARKERS):
        return DuplicateUsernameError()
    return None


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session_factory: SessionFactory, engine: Engine) -> None:
        self._session_factory = session_factory
        self._engine = engine

    def ensure_indexes(self) -> None:
        try:
            init_db(self._engine)
        except SQLAlchemyError as exc:
            raise StorageError("ensure_indexes") from exc

    def find_by_email(self, email: str) -> DomainUser | None:
        return self._find_one(UserRow.email == normalize_email(email), "find_by_email")

    def find_by_username(self, username: str) -> DomainUser | None:
        return self._find_one(UserRow.username == username.strip(), "find_by_username")

    def find_by_id(self, user_id: str) -> DomainUser | None:
        return self._find_one(UserRow.id == user_id, "find_by_id")

    def insert(self, candidate: NewUser) -> DomainUser:
        row = UserRow(
            id=uuid.uuid4().hex,
            email=normalize_email(candidate.email),
            username=candidate.username,
            password_hash=candidate.password_hash,
            created_at=_as_utc(candidate.created_at),
        )
        try:
            with session_scope(self._session_factory) as session:
                session.add(row)
                session.flush()
                user = _to_domain(row)
        except IntegrityError as exc:
            duplicate = _duplicate_error(exc)
            if duplicate is None:
                logger.error("users.insert: unexpected integrity error")
                raise StorageError("insert") from exc
            logger.info(f"users.insert: rejected {duplicate.code}")
            raise duplicate from exc
        except SQLAlchemyError as exc:
            logger.error(f"users.insert: storage failure {type(exc).__name__}")
            raise StorageError("insert") from exc

        logger.debug(f"users.insert: ok user_id={user.id}")
        return user

    def update_password_hash(self, user_id: str, password_hash: str) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.execute(
                    update(UserRow)
                    .where(UserRow.id == user_id)
                    .values(password_hash=password_hash)
                )
        except SQLAlchemyError as exc:
            logger.error(f"users.update_password_hash: storage failure {type(exc).__name__}")
            raise StorageError("update_password_hash") from exc

    def _find_one(self, criterion, operation: str) -> DomainUser | None:
        try:
            with session_scope(self._session_factory) as session:
                row = session.execute(select(UserRow).where(criterion)).scalar_one_or_none()
                return _to_domain(row) if row is not None else None
        except SQLAlchemyError as exc:
            logger.error(f"users.{operation}: storage failure {type(exc).__name__}")
            raise StorageError(operation) from exc
