# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from authkeeper.shared.errors.base import DomainError


class DuplicateEmailError(DomainError):
    code = "duplicate_email"
    status = HTTPStatus.CONFLICT

    def __init__(self) -> None:
        super().__init__(context={"field": "email"})


class DuplicateUsernameError(DomainError):
    code = "duplicate_username"
    status = HTTPStatus.CONFLICT

    def __init__(self) -> None:
        super().__init__(context={"field": "username"})


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class UnauthorizedError(DomainError):
    code = "unauthorized"
    status = HTTPStatus.UNAUTHORIZED


class TokenError(DomainError):
    """Detailed verification failure. Never returned to callers as-is."""

    code = "token_invalid"
    status = HTTPStatus.UNAUTHORIZED
    reason = "invalid"


class MalformedTokenError(TokenError):
    reason = "malformed"


class TokenSignatureError(TokenError):
    reason = "signature_invalid"


class TokenExpiredError(TokenError):
    reason = "expired"
