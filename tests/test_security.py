import time

import httpx
import pytest
from fastapi import HTTPException
from jose import jwt
from starlette.requests import Request

from evenly.core import security
from evenly.core.config import settings
from evenly.core.dependencies import get_current_user


class FailingClient:
    def __init__(self, *args, **kwargs):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def get(self, url):
        raise httpx.ConnectError("down")


def _request(token=None):
    headers = []
    if token is not None:
        headers.append((b"authorization", f"Bearer {token}".encode()))
    return Request({"type": "http", "headers": headers})


def _token(sub, secret=None, **claims):
    payload = {"sub": sub, "exp": int(time.time()) + 60, **claims}
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGO)


async def test_verify_token_returns_claims():
    payload = await security.verify_token(_request(_token("auth-asha")))

    assert payload["sub"] == "auth-asha"


async def test_missing_token():
    with pytest.raises(HTTPException) as exc_info:
        await security.verify_token(_request())

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Missing token"


async def test_wrong_secret():
    with pytest.raises(HTTPException) as exc_info:
        await security.verify_token(_request(_token("auth-asha", secret="nope")))

    assert exc_info.value.detail == "Invalid token"


async def test_expired_token():
    token = _token("auth-asha", exp=int(time.time()) - 10)

    with pytest.raises(HTTPException) as exc_info:
        await security.verify_token(_request(token))

    assert exc_info.value.detail == "Token expired"


async def test_current_user_resolved_from_subject(db, make_user):
    user = await make_user("Asha")

    resolved = await get_current_user(_request(_token(user.auth_service_id)), db)

    assert resolved.id == user.id


async def test_unknown_subject_is_rejected(db):
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(_request(_token("auth-ghost")), db)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "User not found"


async def test_jwks_falls_back_to_stale_cache(monkeypatch):
    stale = {"keys": [{"kid": "old"}]}
    monkeypatch.setattr(settings, "JWKS_URL", "https://auth.invalid/.well-known/jwks.json")
    monkeypatch.setattr(security, "_jwks_cache", stale)
    monkeypatch.setattr(security, "_jwks_last_fetch", 0)
    monkeypatch.setattr(security.httpx, "AsyncClient", FailingClient)

    assert await security.get_jwks() == stale


async def test_jwks_unavailable_without_cache(monkeypatch):
    monkeypatch.setattr(settings, "JWKS_URL", "https://auth.invalid/.well-known/jwks.json")
    monkeypatch.setattr(security, "_jwks_cache", None)
    monkeypatch.setattr(security, "_jwks_last_fetch", 0)
    monkeypatch.setattr(security.httpx, "AsyncClient", FailingClient)

    with pytest.raises(HTTPException) as exc_info:
        await security.get_jwks()

    assert exc_info.value.status_code == 503
