from __future__ import annotations

import base64
import json
from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from authkeeper.application.services.token_codec import JoseTokenCodec
from authkeeper.domain.users.entities import TokenClaims
from authkeeper.domain.users.exceptions import (
    MalformedTokenError,
    TokenExpiredError,
    TokenSignatureError,
)

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


def _claims(ttl: timedelta = timedelta(hours=24)) -> TokenClaims:
    return TokenClaims(
        subject_id="4f1c0b9e2d3a4c5b8e7f6a1b2c3d4e5f",
        email="a@b.com",
        issued_at=NOW,
        expires_at=NOW + ttl,
    )


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def test_issue_produces_compact_three_segment_token(codec: JoseTokenCodec) -> None:
    token = codec.issue(_claims())

    header, payload, signature = token.split(".")
    assert header and payload and signature
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_issued_token_verifies_with_standard_decoder(codec: JoseTokenCodec) -> None:
    secret = b"interop-secret"
    token = codec.issue(_claims(), secret=secret)

    payload = jwt.decode(
        token, secret, algorithms=["HS256"], options={"verify_exp": False}
    )
    assert payload["sub"] == "4f1c0b9e2d3a4c5b8e7f6a1b2c3d4e5f"
    assert payload["email"] == "a@b.com"
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60


def test_verify_round_trips_claims(codec: JoseTokenCodec) -> None:
    token = codec.issue(_claims())

    claims = codec.verify(token, NOW + timedelta(minutes=5))

    assert claims == _claims()


def test_expiry_boundary(codec: JoseTokenCodec) -> None:
    token = codec.issue(_claims(ttl=timedelta(seconds=1)))

    assert codec.verify(token, NOW + timedelta(milliseconds=500)).subject_id
    assert codec.verify(token, NOW + timedelta(seconds=1)).subject_id
    with pytest.raises(TokenExpiredError):
        codec.verify(token, NOW + timedelta(seconds=2))


def test_different_secret_fails_signature(codec: JoseTokenCodec) -> None:
    token = codec.issue(_claims(), secret=b"secret-one")

    with pytest.raises(TokenSignatureError):
        codec.verify(token, NOW, secret=b"secret-two")


def test_signature_is_checked_before_expiry(codec: JoseTokenCodec) -> None:
    token = codec.issue(_claims(ttl=timedelta(seconds=1)), secret=b"secret-one")

    with pytest.raises(TokenSignatureError):
        codec.verify(token, NOW + timedelta(days=3), secret=b"secret-two")


def test_tampered_payload_fails_signature(codec: JoseTokenCodec) -> None:
    token = codec.issue(_claims(ttl=timedelta(seconds=1)))
    header, _, signature = token.split(".")
    forged = _b64(
        {
            "sub": "4f1c0b9e2d3a4c5b8e7f6a1b2c3d4e5f",
            "email": "a@b.com",
            "iat": int(NOW.timestamp()),
            "exp": int((NOW + timedelta(days=365)).timestamp()),
        }
    )

    with pytest.raises(TokenSignatureError):
        codec.verify(f"{header}.{forged}.{signature}", NOW)


def test_unsigned_algorithm_is_rejected(codec: JoseTokenCodec) -> None:
    header = _b64({"alg": "none", "typ": "JWT"})
    payload = _b64(
        {"sub": "abc", "email": "a@b.com", "iat": 0, "exp": int(NOW.timestamp()) + 60}
    )

    with pytest.raises(TokenSignatureError):
        codec.verify(f"{header}.{payload}.c2ln", NOW)


@pytest.mark.parametrize(
    "token",
    [
        "",
        "not-a-token",
        "only.two",
        "a.b.c.d",
        "..",
        "###.###.###",
    ],
)
def test_structural_garbage_is_malformed(codec: JoseTokenCodec, token: str) -> None:
    with pytest.raises(MalformedTokenError):
        codec.verify(token, NOW)


def test_missing_claims_are_malformed(codec: JoseTokenCodec) -> None:
    token = jwt.encode({"sub": "abc"}, b"unit-test-signing-secret-0123456789abcdef", algorithm="HS256")

    with pytest.raises(MalformedTokenError):
        codec.verify(token, NOW)


def test_naive_now_is_treated_as_utc(codec: JoseTokenCodec) -> None:
    token = codec.issue(_claims(ttl=timedelta(seconds=10)))

    naive = (NOW + timedelta(seconds=5)).replace(tzinfo=None)
    assert codec.verify(token, naive).email == "a@b.com"


def test_claims_for_applies_ttl(codec: JoseTokenCodec) -> None:
    claims = codec.claims_for("abc", "a@b.com", NOW.replace(microsecond=250_000))

    assert claims.issued_at == NOW
    assert claims.expires_at == NOW + timedelta(seconds=3600)


def test_empty_secret_rejected() -> None:
    with pytest.raises(ValueError):
        JoseTokenCodec(b"")


def test_expiry_boundary_with_fractional_now(codec: JoseTokenCodec) -> None:
    now = NOW.replace(microsecond=700_000)
    token = codec.issue(
        TokenClaims(
            subject_id="abc",
            email="a@b.com",
            issued_at=now,
            expires_at=now + timedelta(seconds=1),
        )
    )

    assert codec.verify(token, now + timedelta(milliseconds=500)).subject_id == "abc"
    assert codec.verify(token, now + timedelta(seconds=1)).subject_id == "abc"
    with pytest.raises(TokenExpiredError):
        codec.verify(token, now + timedelta(seconds=2))


@pytest.mark.parametrize("exp", ["1e20", "-1e20", "NaN", "Infinity", "1" + "0" * 400])
def test_out_of_range_timestamps_are_malformed(codec: JoseTokenCodec, exp: str) -> None:
    header = _b64({"alg": "HS256", "typ": "JWT"})
    raw = '{"sub":"abc","email":"a@b.com","iat":0,"exp":' + exp + "}"
    payload = base64.urlsafe_b64encode(raw.encode()).rstrip(b"=").decode()

    with pytest.raises(MalformedTokenError):
        codec.verify(f"{header}.{payload}.c2ln", NOW)


@pytest.mark.parametrize("iat", ['"yesterday"', "null", "true", "[1]"])
def test_non_numeric_timestamps_are_malformed(codec: JoseTokenCodec, iat: str) -> None:
    header = _b64({"alg": "HS256", "typ": "JWT"})
    raw = '{"sub":"abc","email":"a@b.com","iat":' + iat + ',"exp":0}'
    payload = base64.urlsafe_b64encode(raw.encode()).rstrip(b"=").decode()

    with pytest.raises(MalformedTokenError):
        codec.verify(f"{header}.{payload}.c2ln", NOW)


def test_empty_secret_override_is_not_the_server_secret(codec: JoseTokenCodec) -> None:
    token = codec.issue(_claims())

    with pytest.raises(TokenSignatureError):
        codec.verify(token, NOW, secret=b"")
