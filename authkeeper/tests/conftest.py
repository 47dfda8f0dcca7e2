from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from authkeeper.application.services.password_hashing import BcryptPasswordHasher
from authkeeper.application.services.token_codec import JoseTokenCodec
from authkeeper.infrastructure.db import create_db_engine, create_session_factory
from authkeeper.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
)
from authkeeper.shared.config import AppConfig, DatabaseConfig, SecurityConfig

TEST_SECRET = b"unit-test-signing-secret-0123456789abcdef"


@pytest.fixture()
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture()
def codec() -> JoseTokenCodec:
    return JoseTokenCodec(TEST_SECRET, ttl_seconds=3600)


@pytest.fixture()
def database_config(tmp_path: Path) -> DatabaseConfig:
    return DatabaseConfig(url=f"sqlite:///{tmp_path / 'authkeeper.db'}")


@pytest.fixture()
def repository(database_config: DatabaseConfig) -> Iterator[SqlAlchemyUserRepository]:
    engine = create_db_engine(database_config)
    repo = SqlAlchemyUserRepository(create_session_factory(engine), engine)
    repo.ensure_indexes()
    yield repo
    engine.dispose()


@pytest.fixture()
def app_config(database_config: DatabaseConfig) -> AppConfig:
    return AppConfig(
        app_env="test",
        log_level="WARNING",
        database=database_config,
        security=SecurityConfig(
            jwt_secret=TEST_SECRET.decode(),
            bcrypt_rounds=4,
            token_ttl_seconds=3600,
        ),
    )
