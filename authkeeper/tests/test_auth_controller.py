from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta
from typing import cast
from unittest.mock import MagicMock

import pytest
from flask import Flask

from authkeeper.application.services.auth_service import AuthService
from authkeeper.application.services.token_codec import JoseTokenCodec
from authkeeper.domain.users.entities import AuthResult, User
from authkeeper.domain.users.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    UnauthorizedError,
)
from authkeeper.interfaces.http.controllers.auth_controller import AuthController
from authkeeper.interfaces.http.controllers.users_controller import UsersController
from authkeeper.interfaces.http.security import extract_bearer_token
from authkeeper.shared.middleware.error_handler import configure_error_handling

CREATED = datetime(2026, 2, 1, 10, 0, tzinfo=UTC)


def _user() -> User:
    return User(
        id="0123456789abcdef0123456789abcdef",
        email="a@b.com",
        username="alice",
        password_hash="hash",
        created_at=CREATED,
    )


def _result() -> AuthResult:
    return AuthResult(token="token123", user=_user(), expires_at=CREATED + timedelta(days=1))


@pytest.fixture()
def flask_app() -> Flask:
    app = Flask(__name__)
    configure_error_handling(app)
    return app


def _register(flask_app: Flask, service: object) -> None:
    auth_service = cast(AuthService, service)
    flask_app.register_blueprint(
        AuthController(auth_service=auth_service, token_ttl_seconds=86400).as_blueprint()
    )
    flask_app.register_blueprint(UsersController(auth_service=auth_service).as_blueprint())


def test_signup_endpoint_returns_created_with_token(flask_app: Flask) -> None:
    calls: dict[str, tuple[str, str, str]] = {}

    class StubService:
        def signup(self, email: str, username: str, password: str) -> AuthResult:
            calls["args"] = (email, username, password)
            return _result()

    _register(flask_app, StubService())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/signup",
            json={"email": "a@b.com", "username": "alice", "password": "password123"},
        )

    assert response.status_code == 201
    assert calls["args"] == ("a@b.com", "alice", "password123")
    payload = response.get_json()
    assert payload["token"] == "token123"
    assert payload["token_type"] == "Bearer"
    assert payload["expires_in"] == 86400
    assert payload["user"]["id"] == "0123456789abcdef0123456789abcdef"
    assert "password_hash" not in payload["user"]


def test_signup_missing_fields_returns_422(flask_app: Flask) -> None:
    service = MagicMock()
    _register(flask_app, service)

    with flask_app.test_client() as client:
        response = client.post("/api/auth/signup", json={"email": "a@b.com"})

    assert response.status_code == 422
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert payload["context"]["fields"] == ["password", "username"]
    service.signup.assert_not_called()


def test_signup_conflict_returns_409(flask_app: Flask) -> None:
    service = MagicMock()
    service.signup.side_effect = DuplicateEmailError()
    _register(flask_app, service)

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/signup",
            json={"email": "a@b.com", "username": "alice", "password": "password123"},
        )

    assert response.status_code == 409
    assert response.get_json() == {"error": "duplicate_email", "context": {"field": "email"}}


def test_signin_invalid_credentials_returns_401(flask_app: Flask) -> None:
    service = MagicMock()
    service.signin.side_effect = InvalidCredentialsError()
    _register(flask_app, service)

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/signin", json={"email": "a@b.com", "password": "wrong"}
        )

    assert response.status_code == 401
    assert response.get_json() == {"error": "invalid_credentials"}
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_signin_success_returns_200(flask_app: Flask) -> None:
    service = MagicMock()
    service.signin.return_value = _result()
    _register(flask_app, service)

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/signin", json={"email": "a@b.com", "password": "password123"}
        )

    assert response.status_code == 200
    assert response.get_json()["token"] == "token123"
    service.signin.assert_called_once_with("a@b.com", "password123")


def test_me_requires_bearer_token(flask_app: Flask) -> None:
    service = MagicMock()
    _register(flask_app, service)

    with flask_app.test_client() as client:
        missing = client.get("/api/users/me")
        wrong_scheme = client.get("/api/users/me", headers={"Authorization": "Basic abc"})

    assert missing.status_code == 401
    assert wrong_scheme.status_code == 401
    assert missing.get_json() == {"error": "unauthorized"}
    service.authenticate.assert_not_called()


def test_me_rejects_bad_token(flask_app: Flask) -> None:
    service = MagicMock()
    service.authenticate.side_effect = UnauthorizedError()
    _register(flask_app, service)

    with flask_app.test_client() as client:
        response = client.get("/api/users/me", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    service.authenticate.assert_called_once_with("nope")


def test_me_returns_authenticated_user(flask_app: Flask) -> None:
    service = MagicMock()
    service.authenticate.return_value = _user()
    _register(flask_app, service)

    with flask_app.test_client() as client:
        response = client.get("/api/users/me", headers={"Authorization": "bearer token123"})

    assert response.status_code == 200
    assert response.get_json()["username"] == "alice"
    service.authenticate.assert_called_once_with("token123")


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (None, None),
        ("", None),
        ("Bearer", None),
        ("Bearer   ", None),
        ("Token abc", None),
        ("Bearer abc", "abc"),
        ("  BEARER abc  ", "abc"),
    ],
)
def test_extract_bearer_token(header: str | None, expected: str | None) -> None:
    assert extract_bearer_token(header) == expected


@pytest.mark.parametrize("body", [{"email": "a@b.com"}, {}, {"email": 7, "password": []}])
def test_signin_malformed_body_is_invalid_credentials(flask_app: Flask, body: dict) -> None:
    service = MagicMock()
    _register(flask_app, service)

    with flask_app.test_client() as client:
        response = client.post("/api/auth/signin", json=body)

    assert response.status_code == 401
    assert response.get_json() == {"error": "invalid_credentials"}
    service.signin.assert_not_called()


def test_me_with_out_of_range_expiry_is_unauthorized(flask_app: Flask) -> None:
    codec = JoseTokenCodec(b"controller-test-secret")
    service = AuthService(
        users=MagicMock(),
        password_hasher=MagicMock(),
        tokens=codec,
    )
    _register(flask_app, service)
    header = base64.urlsafe_b64encode(b'{"alg":"HS256","typ":"JWT"}').rstrip(b"=").decode()
    payload = (
        base64.urlsafe_b64encode(b'{"sub":"abc","email":"a@b.com","iat":0,"exp":1e20}')
        .rstrip(b"=")
        .decode()
    )

    with flask_app.test_client() as client:
        response = client.get(
            "/api/users/me", headers={"Authorization": f"Bearer {header}.{payload}.c2ln"}
        )

    assert response.status_code == 401
    assert response.get_json() == {"error": "unauthorized"}
