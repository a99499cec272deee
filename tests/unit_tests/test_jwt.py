"""Unit tests for token issuance and verification."""

import base64
import json
from datetime import timedelta

import pytest
from jose import jwt
from pydantic import ValidationError

import config
from auth.jwt import issue_token, verify_token
from auth.schemas import IdentityClaims
from errors import ErrorKind, UnauthenticatedError


@pytest.fixture
def claims():
    return IdentityClaims(user_id=42, role_id=3, tenant_id=7, is_super_admin=False)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def test_verify_returns_issued_claims(claims):
    token = issue_token(claims)

    assert verify_token(token) == claims


def test_super_admin_flag_round_trips():
    claims = IdentityClaims(user_id=1, role_id=1, tenant_id=2, is_super_admin=True)

    assert verify_token(issue_token(claims)).is_super_admin is True


def test_default_lifetime_is_one_day(claims):
    token = issue_token(claims)
    payload = jwt.get_unverified_claims(token)

    assert payload["exp"] - payload["iat"] == 24 * 3600
    assert payload["sub"] == "42"


def test_expired_token_rejected(claims):
    token = issue_token(claims, timedelta(seconds=-10))

    with pytest.raises(UnauthenticatedError) as exc_info:
        verify_token(token)

    assert exc_info.value.message == "Token has expired"
    assert exc_info.value.kind == ErrorKind.UNAUTHENTICATED


def test_token_signed_with_other_secret_rejected(claims):
    token = issue_token(claims, secret="someone-else")

    with pytest.raises(UnauthenticatedError) as exc_info:
        verify_token(token)

    assert exc_info.value.message == "Invalid or expired token"


def test_tampered_payload_rejected(claims):
    """Test: Swapping the payload for an escalated one breaks the signature."""
    token = issue_token(claims)
    header, payload, signature = token.split(".")

    forged = jwt.get_unverified_claims(token)
    forged["is_super_admin"] = True
    forged["tenant_id"] = 999
    tampered = ".".join([header, _b64(forged), signature])

    with pytest.raises(UnauthenticatedError):
        verify_token(tampered)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer abc"])
def test_garbage_token_rejected(token):
    with pytest.raises(UnauthenticatedError):
        verify_token(token)


def test_token_missing_claims_rejected():
    """Test: A correctly signed token without identity claims is still refused."""
    token = jwt.encode(
        {"sub": "1", "exp": 4102444800},
        config.settings.JWT_SECRET,
        algorithm=config.settings.JWT_ALGORITHM,
    )

    with pytest.raises(UnauthenticatedError) as exc_info:
        verify_token(token)

    assert exc_info.value.message == "Malformed token claims"


def test_non_numeric_subject_rejected():
    token = jwt.encode(
        {"sub": "abc", "role_id": 1, "tenant_id": 1, "is_super_admin": False, "exp": 4102444800},
        config.settings.JWT_SECRET,
        algorithm=config.settings.JWT_ALGORITHM,
    )

    with pytest.raises(UnauthenticatedError):
        verify_token(token)


def test_claims_are_immutable(claims):
    with pytest.raises(ValidationError):
        claims.tenant_id = 8
