# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:

    id: str
    email: str
    username: str
    password_hash: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class NewUser:

    email: str
    username: str
    password_hash: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class TokenClaims:
    """Identity assertion carried inside a signed token."""

    subject_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


@dataclass(slots=True, frozen=True)
class AuthResult:

    token: str
    user: User
    expires_at: datetime


def normalize_email(email: str) -> str:
    return email.strip().lower()
