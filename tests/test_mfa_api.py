"""
Tests for TOTP setup and the two-step login.
"""
import pyotp

from conftest import login


def _enable(client):
    setup = client.get("/api/auth/mfa/setup").json()
    assert setup["qrCodeDataUrl"].startswith("data:image/png;base64,")
    secret = setup["secret"]
    r = client.post("/api/auth/mfa/enable", json={"secret": secret, "code": pyotp.TOTP(secret).now()})
    assert r.status_code == 200
    return secret


def test_status_and_enable(auth_client):
    assert auth_client.get("/api/auth/mfa/status").json() == {"mfaEnabled": False}
    _enable(auth_client)
    assert auth_client.get("/api/auth/mfa/status").json() == {"mfaEnabled": True}


def test_enable_rejects_bad_code(auth_client):
    secret = auth_client.get("/api/auth/mfa/setup").json()["secret"]
    r = auth_client.post("/api/auth/mfa/enable", json={"secret": secret, "code": "000000x"})
    assert r.status_code == 400


def test_login_requires_second_step(auth_client):
    secret = _enable(auth_client)
    auth_client.post("/api/auth/logout")

    r = login(auth_client)
    assert r.status_code == 200
    body = r.json()
    assert body["mfaRequired"] is True
    assert body["user"] is None
    assert auth_client.get("/api/auth/me").json() == {"user": None}

    bad = auth_client.post("/api/auth/mfa/verify", json={"mfaToken": body["mfaToken"], "code": "123456x"})
    assert bad.status_code == 401

    r = auth_client.post(
        "/api/auth/mfa/verify",
        json={"mfaToken": body["mfaToken"], "code": pyotp.TOTP(secret).now()},
    )
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "alice@example.com"
    assert auth_client.get("/api/auth/me").json()["user"] is not None


def test_verify_rejects_session_token_as_mfa_token(auth_client):
    secret = _enable(auth_client)
    session = auth_client.cookies.get("kanban_session")
    r = auth_client.post("/api/auth/mfa/verify", json={"mfaToken": session, "code": pyotp.TOTP(secret).now()})
    assert r.status_code == 401


def test_disable_twice(auth_client):
    secret = _enable(auth_client)
    code = pyotp.TOTP(secret).now()
    assert auth_client.post("/api/auth/mfa/disable", json={"code": code}).status_code == 200
    r = auth_client.post("/api/auth/mfa/disable", json={"code": code})
    assert r.status_code == 400
    assert r.json()["error"] == "Two-factor authentication is not enabled"


def test_mfa_endpoints_require_session(client):
    assert client.get("/api/auth/mfa/setup").status_code == 401
    assert client.get("/api/auth/mfa/status").status_code == 401
