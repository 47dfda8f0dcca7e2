# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from authkeeper.application.services.auth_service import AuthService
from authkeeper.interfaces.http.dto.auth import UserDTO
from authkeeper.interfaces.http.security import auth_required, current_user


class UsersController:
    def __init__(self, *, auth_service: AuthService) -> None:
        self._auth_service = auth_service

    def me(self) -> tuple[Response, int]:
        user = current_user()
        return jsonify(UserDTO.from_domain(user).model_dump(mode="json")), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("users", __name__, url_prefix="/api/users")
        guard = auth_required(self._auth_service)
        bp.add_url_rule("/me", view_func=guard(self.me), methods=["GET"])
        return bp
