# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from authkeeper.application.services.auth_service import AuthService
from authkeeper.domain.users.exceptions import InvalidCredentialsError
from authkeeper.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    SigninRequestDTO,
    SignupRequestDTO,
)
from authkeeper.shared.errors import raise_validation_error
from authkeeper.shared.logging import logger


class AuthController:
    def __init__(self, *, auth_service: AuthService, token_ttl_seconds: int) -> None:
        self._auth_service = auth_service
        self._token_ttl_seconds = token_ttl_seconds

    def signup(self) -> tuple[Response, int]:
        try:
            dto = SignupRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        result = self._auth_service.signup(dto.email, dto.username, dto.password)

        payload = AuthSuccessDTO.from_result(result, expires_in=self._token_ttl_seconds)
        logger.info(f"auth.signup: responded user_id={result.user.id}")
        return jsonify(payload.model_dump(mode="json")), 201

    def signin(self) -> tuple[Response, int]:
        try:
            dto = SigninRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError:
            logger.info("auth.signin: rejected malformed body")
            raise InvalidCredentialsError() from None

        result = self._auth_service.signin(dto.email, dto.password)

        payload = AuthSuccessDTO.from_result(result, expires_in=self._token_ttl_seconds)
        logger.info(f"auth.signin: responded user_id={result.user.id}")
        return jsonify(payload.model_dump(mode="json")), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/signup", view_func=self.signup, methods=["POST"])
        bp.add_url_rule("/signin", view_func=self.signin, methods=["POST"])
        return bp
