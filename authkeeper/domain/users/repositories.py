# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import NewUser, TokenClaims, User


class UserRepository(Protocol):
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_username(self, username: str) -> User | None: ...
    def find_by_id(self, user_id: str) -> User | None: ...
    def insert(self, candidate: NewUser) -> User: ...
    def update_password_hash(self, user_id: str, password_hash: str) -> None: ...
    def ensure_indexes(self) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
    def needs_rehash(self, hashed: str) -> bool: ...


class TokenCodec(Protocol):
    @property
    def ttl_seconds(self) -> int: ...

    def claims_for(self, subject_id: str, email: str, now: datetime) -> TokenClaims: ...

    def issue(self, claims: TokenClaims, secret: bytes | None = None) -> str: ...

    def verify(
        self, token: str, now: datetime, secret: bytes | None = None
    ) -> TokenClaims: ...
