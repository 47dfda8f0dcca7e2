# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import g, request

from authkeeper.application.services.auth_service import AuthService
from authkeeper.domain.users.entities import User
from authkeeper.domain.users.exceptions import UnauthorizedError
from authkeeper.shared.logging import logger


def extract_bearer_token(header_value: str | None) -> str | None:
    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def current_user() -> User:
    user = getattr(g, "user", None)
    if user is None:
        raise UnauthorizedError()
    return user


def auth_required(auth_service: AuthService) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(view: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view)
        def inner(*args: Any, **kwargs: Any) -> Any:
            token = extract_bearer_token(request.headers.get("Authorization"))
            if token is None:
                logger.warning(
                    f"No bearer token on {request.method} {request.path}"
                )
                raise UnauthorizedError()

            user = auth_service.authenticate(token)
            g.user = user
            g.user_id = user.id
            logger.debug(f"Auth OK: user={user.id} {request.method} {request.path}")
            return view(*args, **kwargs)

        return inner

    return decorator
