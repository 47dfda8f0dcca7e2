# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Compact HS256 identity tokens (JWT layout)."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from authkeeper.domain.users.entities import TokenClaims
from authkeeper.domain.users.exceptions import (
    MalformedTokenError,
    TokenExpiredError,
    TokenSignatureError,
)
from authkeeper.domain.users.repositories import TokenCodec

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 24 * 60 * 60

# Expiry is checked against the caller-supplied instant, not the wall clock
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
    "verify_at_hash": False,
}


def _epoch(moment: datetime, *, round_up: bool = False) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    timestamp = moment.timestamp()
    return math.ceil(timestamp) if round_up else math.floor(timestamp)


def _from_epoch(value: int | float) -> datetime:
    try:
        if not math.isfinite(value):
            raise MalformedTokenError()
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, ValueError, OSError) as exc:
        raise MalformedTokenError() from exc


def _claims_from_payload(payload: Mapping[str, Any]) -> TokenClaims:
    sub = payload.get("sub")
    email = payload.get("email")
    iat = payload.get("iat")
    exp = payload.get("exp")
    if not isinstance(sub, str) or not sub:
        raise MalformedTokenError()
    if not isinstance(email, str):
        raise MalformedTokenError()
    for value in (iat, exp):
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise MalformedTokenError()
    return TokenClaims(
        subject_id=sub,
        email=email,
        issued_at=_from_epoch(iat),
        expires_at=_from_epoch(exp),
    )


class JoseTokenCodec(TokenCodec):
    def __init__(self, secret: bytes, *, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if not secret:
            raise ValueError("token signing secret must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("token ttl must be positive")
        self._secret = bytes(secret)
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def claims_for(self, subject_id: str, email: str, now: datetime) -> TokenClaims:
        issued_at = _from_epoch(_epoch(now))
        return TokenClaims(
            subject_id=subject_id,
            email=email,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self._ttl_seconds),
        )

    def issue(self, claims: TokenClaims, secret: bytes | None = None) -> str:
        payload = {
            "sub": claims.subject_id,
            "email": claims.email,
            "iat": _epoch(claims.issued_at),
            # Never let whole-second rounding shorten the lifetime
            "exp": _epoch(claims.expires_at, round_up=True),
        }
        key = self._secret if secret is None else secret
        return jwt.encode(payload, key, algorithm=ALGORITHM)

    def verify(self, token: str, now: datetime, secret: bytes | None = None) -> TokenClaims:
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedTokenError()
        if not all(token.split(".")):
            raise MalformedTokenError()
        try:
            jwt.get_unverified_header(token)
            unverified = jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedTokenError() from exc
        claims = _claims_from_payload(unverified)

        try:
            jwt.decode(
                token,
                self._secret if secret is None else secret,
                algorithms=[ALGORITHM],
                options=_DECODE_OPTIONS,
            )
        except JWTError as exc:
            raise TokenSignatureError() from exc

        instant = now if now.tzinfo is not None else now.replace(tzinfo=UTC)
        if instant > claims.expires_at:
            raise TokenExpiredError()
        return claims
