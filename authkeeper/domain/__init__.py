# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users.entities import AuthResult, NewUser, TokenClaims, User, normalize_email
from .users.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
    TokenSignatureError,
    UnauthorizedError,
)

__all__ = [
    "AuthResult",
    "DuplicateEmailError",
    "DuplicateUsernameError",
    "InvalidCredentialsError",
    "MalformedTokenError",
    "NewUser",
    "TokenClaims",
    "TokenError",
    "TokenExpiredError",
    "TokenSignatureError",
    "UnauthorizedError",
    "User",
    "normalize_email",
]
