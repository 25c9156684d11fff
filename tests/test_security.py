"""
Tests for password rules, approval tokens, session tokens and TOTP.
"""
import pyotp
import pytest
from fastapi import HTTPException

from app.core import security


@pytest.mark.parametrize(
    "password,ok",
    [
        ("short1A", False),
        ("alllowercase1", False),
        ("ALLUPPERCASE1", False),
        ("NoDigitsHere", False),
        ("Passw0rdOK", True),
        ("A1" + "a" * 127, False),
    ],
)
def test_validate_password(password, ok):
    assert (security.validate_password(password) is None) == ok


def test_hash_and_verify_password():
    hashed = security.hash_password("Passw0rdOK")
    assert hashed.startswith("$argon2")
    assert security.verify_password("Passw0rdOK", hashed)
    assert not security.verify_password("wrong", hashed)
    assert not security.verify_password("Passw0rdOK", "not-a-hash")


def test_check_length():
    security.check_length("x" * 200, "card_title", "Title")
    security.check_length(None, "card_title", "Title")
    with pytest.raises(HTTPException) as exc:
        security.check_length("x" * 201, "card_title", "Title")
    assert exc.value.status_code == 400


def test_approval_token_binds_user_and_action():
    token = security.generate_approval_token("u1", "approve")
    assert security.verify_approval_token("u1", "approve", token)
    assert not security.verify_approval_token("u1", "reject", token)
    assert not security.verify_approval_token("u2", "approve", token)
    assert not security.verify_approval_token("u1", "approve", "0" * 64)


def test_session_and_mfa_tokens_are_not_interchangeable():
    session = security.create_session_token("u1", "a@example.com", "A")
    pending = security.create_mfa_pending_token("u1")
    assert security.decode_session_token(session)["sub"] == "u1"
    assert security.decode_mfa_pending_token(pending)["sub"] == "u1"
    assert security.decode_session_token(pending) is None
    assert security.decode_mfa_pending_token(session) is None
    assert security.decode_session_token("garbage") is None


def test_verify_totp():
    generated = security.generate_mfa_secret("a@example.com")
    assert generated["otpauth_url"].startswith("otpauth://totp/")
    code = pyotp.TOTP(generated["secret"]).now()
    assert security.verify_totp(generated["secret"], code)
    assert not security.verify_totp(generated["secret"], "abcdef")
    assert not security.verify_totp("not base32!", "123456")
