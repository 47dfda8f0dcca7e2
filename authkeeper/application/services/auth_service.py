# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from functools import cached_property

from pydantic import ValidationError as PydanticValidationError

from authkeeper.application.dto import SigninCommand, SignupCommand
from authkeeper.domain.users.entities import AuthResult, NewUser, User
from authkeeper.domain.users.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    TokenError,
    UnauthorizedError,
)
from authkeeper.domain.users.repositories import PasswordHasher, TokenCodec, UserRepository
from authkeeper.shared.errors import HashingError, StorageError, raise_validation_error
from authkeeper.shared.logging import logger


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuthService:
    """Signup, signin and bearer-token authentication.

    Holds no state of its own. Uniqueness is left to the repository, and
    credential/token failures are collapsed into a single error per
    operation before they leave this class.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        tokens: TokenCodec,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._tokens = tokens
        self._clock = clock

    @cached_property
    def _dummy_hash(self) -> str:
        return self._password_hasher.hash(secrets.token_urlsafe(24))

    def signup(self, email: str, username: str, password: str) -> AuthResult:
        try:
            command = SignupCommand(email=email, username=username, password=password)
        except PydanticValidationError as exc:
            logger.info(f"auth.signup: rejected invalid fields count={exc.error_count()}")
            raise_validation_error(exc)

        now = self._clock()
        hashed = self._password_hasher.hash(command.password)
        try:
            user = self._users.insert(
                NewUser(
                    email=command.email,
                    username=command.username,
                    password_hash=hashed,
                    created_at=now,
                )
            )
        except (DuplicateEmailError, DuplicateUsernameError) as exc:
            logger.info(f"auth.signup: conflict {exc.code}")
            raise

        result = self._issue(user, now)
        logger.info(f"auth.signup: ok user_id={user.id}")
        return result

    def signin(self, email: str, password: str) -> AuthResult:
        try:
            command = SigninCommand(email=email, password=password)
        except PydanticValidationError:
            logger.info("auth.signin: failed reason=malformed_input")
            raise InvalidCredentialsError() from None

        user = self._users.find_by_email(command.email)
        if user is None:
            self._burn_verification(command.password)
            logger.info("auth.signin: failed reason=unknown_email")
            raise InvalidCredentialsError()

        try:
            password_valid = self._password_hasher.verify(command.password, user.password_hash)
        except HashingError:
            logger.error(f"auth.signin: stored password hash unreadable user_id={user.id}")
            raise InvalidCredentialsError() from None

        if not password_valid:
            logger.info(f"auth.signin: failed reason=password_mismatch user_id={user.id}")
            raise InvalidCredentialsError()

        user = self._upgrade_hash(user, command.password)
        result = self._issue(user, self._clock())
        logger.info(f"auth.signin: ok user_id={user.id}")
        return result

    def authenticate(self, token: str) -> User:
        try:
            claims = self._tokens.verify(token, self._clock())
        except TokenError as exc:
            logger.info(f"auth.authenticate: rejected reason={exc.reason}")
            raise UnauthorizedError() from None

        user = self._users.find_by_id(claims.subject_id)
        if user is None:
            logger.warning(f"auth.authenticate: unknown subject user_id={claims.subject_id}")
            raise UnauthorizedError()
        return user

    def _issue(self, user: User, now: datetime) -> AuthResult:
        claims = self._tokens.claims_for(user.id, user.email, now)
        token = self._tokens.issue(claims)
        return AuthResult(token=token, user=user, expires_at=claims.expires_at)

    def _burn_verification(self, password: str) -> None:
        # Unknown emails cost one bcrypt check, same as a wrong password
        try:
            self._password_hasher.verify(password, self._dummy_hash)
        except HashingError:
            logger.error("auth.signin: dummy hash verification failed")

    def _upgrade_hash(self, user: User, password: str) -> User:
        if not self._password_hasher.needs_rehash(user.password_hash):
            return user
        try:
            upgraded = self._password_hasher.hash(password)
            self._users.update_password_hash(user.id, upgraded)
        except (HashingError, StorageError) as exc:
            # The old hash still verifies, so signin goes ahead
            logger.warning(f"auth.signin: hash upgrade failed {exc.code} user_id={user.id}")
            return user
        logger.info(f"auth.signin: password hash upgraded user_id={user.id}")
        return replace(user, password_hash=upgraded)
