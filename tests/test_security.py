from datetime import datetime, timedelta, UTC

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from jose import jwt

from app.config import settings
from app.main import app
from app.utils.security import get_viewer_id_from_token


def _keypair():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture(scope="module")
def keys():
    return _keypair()


@pytest.fixture
def clerk_key(keys, monkeypatch):
    private_pem, public_pem = keys
    monkeypatch.setattr(settings, "CLERK_JWT_KEY", public_pem)
    monkeypatch.setattr(settings, "CLERK_ISSUER", "https://clerk.example.dev")
    return private_pem


def _token(private_pem, sub="user_123", iss="https://clerk.example.dev", expires_in=300):
    now = datetime.now(UTC)
    claims = {"sub": sub, "iss": iss, "iat": now, "exp": now + timedelta(seconds=expires_in)}
    return jwt.encode(claims, private_pem, algorithm="RS256")


def test_valid_token_resolves_viewer(clerk_key):
    assert get_viewer_id_from_token(_token(clerk_key)) == "user_123"


def test_expired_token(clerk_key):
    assert get_viewer_id_from_token(_token(clerk_key, expires_in=-60)) is None


def test_wrong_issuer(clerk_key):
    assert get_viewer_id_from_token(_token(clerk_key, iss="https://evil.example")) is None


def test_token_signed_by_other_key(clerk_key):
    other_private, _ = _keypair()
    assert get_viewer_id_from_token(_token(other_private)) is None


def test_no_key_configured(keys, monkeypatch):
    monkeypatch.setattr(settings, "CLERK_JWT_KEY", "")
    assert get_viewer_id_from_token(_token(keys[0])) is None


def test_missing_token():
    assert get_viewer_id_from_token(None) is None
    assert get_viewer_id_from_token("") is None


def test_bearer_token_reaches_like_endpoint(clerk_key, fake_db):
    fake_db.put("articles", "a1", {
        "type": "Alert", "title": "Smog", "slug": "smog", "content": "Wear a mask.",
        "likeCount": 0, "likedBy": [], "viewCount": 0,
    })
    with TestClient(app) as client:
        r = client.put(
            "/api/articles/a1/like",
            headers={"Authorization": f"Bearer {_token(clerk_key, sub='user_42')}"},
        )
    assert r.status_code == 200
    assert r.json()["likes"] == 1
    assert fake_db.raw("articles", "a1")["likedBy"] == ["user_42"]
