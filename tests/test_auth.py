"""Tests for Firebase token verification, sessions and user administration."""

import asyncio
import base64
import json
import time
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID
from fastapi import HTTPException

from conftest import create_user
from taskflow import auth

PROJECT_ID = "taskflow-test"
KEY_ID = "test-key"

_private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _certificate_pem() -> str:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.test")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(_private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(_private_key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode()


CERT_PEM = _certificate_pem()


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def make_token(uid="firebase-uid-1", email="jane@example.com", kid=KEY_ID, alg="RS256", **overrides):
    now = int(time.time())
    claims = {
        "iss": f"https://securetoken.google.com/{PROJECT_ID}",
        "aud": PROJECT_ID,
        "sub": uid,
        "email": email,
        "name": "Jane",
        "iat": now - 10,
        "exp": now + 3600,
        "auth_time": now - 10,
        **overrides,
    }
    header = _b64(json.dumps({"alg": alg, "kid": kid, "typ": "JWT"}).encode())
    payload = _b64(json.dumps(claims).encode())
    signature = _private_key.sign(f"{header}.{payload}".encode(), padding.PKCS1v15(), hashes.SHA256())
    return f"{header}.{payload}.{_b64(signature)}"


@pytest.fixture(autouse=True)
def google_keys(monkeypatch):
    """Serve the test certificate as Google's public keys"""
    fetches = []

    async def fake_keys():
        fetches.append(1)
        return {KEY_ID: CERT_PEM}

    monkeypatch.setattr(auth, "get_google_public_keys", fake_keys)
    monkeypatch.setattr(auth, "FIREBASE_PROJECT_ID", PROJECT_ID)
    return fetches


def verify(token):
    return asyncio.run(auth.verify_firebase_token(token))


class TestVerifyFirebaseToken:

    def test_valid_token(self):
        claims = verify(make_token())
        assert claims["sub"] == "firebase-uid-1"
        assert claims["email"] == "jane@example.com"

    def test_expired(self):
        with pytest.raises(HTTPException) as exc:
            verify(make_token(exp=int(time.time()) - 120))
        assert exc.value.status_code == 401
        assert exc.value.headers == {"X-Token-Expired": "true"}

    def test_wrong_audience(self):
        with pytest.raises(HTTPException) as exc:
            verify(make_token(aud="someone-else"))
        assert exc.value.detail == "Invalid token audience"

    def test_wrong_issuer(self):
        with pytest.raises(HTTPException) as exc:
            verify(make_token(iss="https://evil.example.com"))
        assert exc.value.detail == "Invalid token issuer"

    def test_issued_in_future(self):
        with pytest.raises(HTTPException):
            verify(make_token(iat=int(time.time()) + 600))

    def test_tampered_payload(self):
        header, _, signature = make_token().split(".")
        forged = _b64(json.dumps({"sub": "admin", "aud": PROJECT_ID}).encode())
        with pytest.raises(HTTPException) as exc:
            verify(f"{header}.{forged}.{signature}")
        assert exc.value.detail == "Invalid token signature"

    def test_wrong_algorithm(self):
        with pytest.raises(HTTPException) as exc:
            verify(make_token(alg="HS256"))
        assert exc.value.detail == "Invalid token algorithm"

    def test_malformed(self):
        with pytest.raises(HTTPException) as exc:
            verify("not-a-token")
        assert exc.value.status_code == 401

    def test_unknown_key_refetched_once(self, google_keys):
        with pytest.raises(HTTPException) as exc:
            verify(make_token(kid="rotated-key"))
        assert exc.value.detail == "Unable to verify token signature"
        assert len(google_keys) == 2


class TestSession:

    def test_sign_in_creates_user_and_cookie(self, client):
        resp = client.post("/auth/session", json={"idToken": make_token()})
        assert resp.status_code == 200
        user = resp.json()
        assert user["email"] == "jane@example.com"
        assert user["firebase_uid"] == "firebase-uid-1"
        assert user["role"] == "user"
        last_login = datetime.fromisoformat(user["last_login"])
        assert last_login.tzinfo is None
        assert abs(datetime.now(timezone.utc).replace(tzinfo=None) - last_login) < timedelta(minutes=1)

        cookie = next(c for c in resp.headers.get_list("set-cookie") if c.startswith("auth-token="))
        assert "HttpOnly" in cookie
        assert "samesite=lax" in cookie.lower()

    def test_sign_in_is_idempotent(self, client):
        first = client.post("/auth/session", json={"idToken": make_token()}).json()
        second = client.post("/auth/session", json={"idToken": make_token()}).json()
        assert first["id"] == second["id"]

    def test_admin_email(self, client, monkeypatch):
        monkeypatch.setattr(auth, "ADMIN_EMAILS", {"boss@example.com"})
        resp = client.post("/auth/session", json={"idToken": make_token(uid="boss", email="Boss@Example.com")})
        assert resp.json()["role"] == "admin"
        assert resp.json()["email"] == "boss@example.com"

    def test_existing_email_keeps_account(self, client):
        user_id = create_user("jane@example.com", uid="old-password-uid")
        resp = client.post("/auth/session", json={"idToken": make_token(uid="google-uid")})
        assert resp.json()["id"] == user_id
        assert resp.json()["firebase_uid"] == "google-uid"

    def test_invalid_token(self, client):
        resp = client.post("/auth/session", json={"idToken": make_token(aud="other")})
        assert resp.status_code == 401

    def test_bearer_and_cookie_auth(self, client):
        token = make_token()
        resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["email"] == "jane@example.com"

        client.cookies.set("auth-token", token)
        assert client.get("/auth/me").json()["email"] == "jane@example.com"

    def test_no_credentials(self, client):
        assert client.get("/auth/me").status_code == 401

    def test_sign_out(self, client, firebase_admin_calls):
        token = make_token()
        resp = client.delete("/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Signed out"}
        assert firebase_admin_calls == [("revoke", "firebase-uid-1")]
        cleared = next(c for c in resp.headers.get_list("set-cookie") if c.startswith("auth-token="))
        assert "Max-Age=0" in cleared


class TestUsers:

    def test_update_profile(self, api):
        resp = api.patch("/users/me", json={"name": "  Jane Doe "})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Jane Doe"
        assert api.get("/users/me").json()["name"] == "Jane Doe"

    def test_admin_only(self, api):
        assert api.get("/users").status_code == 403
        assert api.patch("/users/1/role", json={"role": "admin"}).status_code == 403

    def test_list_users(self, api, acting):
        acting.user_id = create_user("admin@example.com", role="admin")
        emails = [u["email"] for u in api.get("/users").json()]
        assert sorted(emails) == ["admin@example.com", "owner@example.com"]

    def test_change_role(self, api, acting, user_id, firebase_admin_calls):
        acting.user_id = create_user("admin@example.com", role="admin")
        resp = api.patch(f"/users/{user_id}/role", json={"role": "admin"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "admin"
        assert firebase_admin_calls == [("role", "uid-owner@example.com", "admin")]

    def test_role_validation(self, api, acting, user_id):
        acting.user_id = create_user("admin@example.com", role="admin")
        assert api.patch(f"/users/{user_id}/role", json={"role": "owner"}).status_code == 422
        assert api.patch("/users/999/role", json={"role": "user"}).status_code == 404

    def test_cannot_demote_self(self, api, acting):
        admin_id = create_user("admin@example.com", role="admin")
        acting.user_id = admin_id
        assert api.patch(f"/users/{admin_id}/role", json={"role": "user"}).status_code == 409
