# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from authkeeper.application.services.auth_service import AuthService
from authkeeper.application.services.password_hashing import BcryptPasswordHasher
from authkeeper.application.services.token_codec import JoseTokenCodec
from authkeeper.infrastructure.db import create_db_engine, create_session_factory
from authkeeper.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
)
from authkeeper.interfaces.http.controllers.auth_controller import AuthController
from authkeeper.interfaces.http.controllers.misc_controller import MiscController
from authkeeper.interfaces.http.controllers.users_controller import UsersController
from authkeeper.shared.config import AppConfig


class Container:
    def __init__(self, config: AppConfig) -> None:
        self.config = config

    @cached_property
    def engine(self) -> Engine:
        return create_db_engine(self.config.database)

    @cached_property
    def session_factory(self) -> sessionmaker[Session]:
        return create_session_factory(self.engine)

    @cached_property
    def password_hasher(self) -> BcryptPasswordHasher:
        return BcryptPasswordHasher(rounds=self.config.security.bcrypt_rounds)

    @cached_property
    def token_codec(self) -> JoseTokenCodec:
        return JoseTokenCodec(
            self.config.signing_secret(),
            ttl_seconds=self.config.security.token_ttl_seconds,
        )

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self.session_factory, self.engine)

    @cached_property
    def auth_service(self) -> AuthService:
        return AuthService(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            tokens=self.token_codec,
        )

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            auth_service=self.auth_service,
            token_ttl_seconds=self.config.security.token_ttl_seconds,
        )

    @cached_property
    def users_controller(self) -> UsersController:
        return UsersController(auth_service=self.auth_service)

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(engine=self.engine)
