"""Unit tests for middleware auth (src/notecollab/middleware/auth.py)."""

import uuid
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from src.notecollab.middleware import auth as auth_module
from src.notecollab.middleware.auth import JWTBearer, get_current_user_id


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/protected")
    async def protected(user_id=Depends(JWTBearer())):
        return {"user_id": str(user_id)}

    @app.get("/me")
    async def me(user_id=Depends(get_current_user_id)):
        return {"user_id": str(user_id)}

    return app


def _make_bearer(token: Optional[str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token is not None else {}


def _decoder_returning(value):
    async def decode(token):
        return value

    return decode


def test_jwtbearer_accepts_valid_token(monkeypatch):
    uid = uuid.uuid4()
    monkeypatch.setattr(auth_module, "get_user_id_from_token", _decoder_returning(uid))

    client = TestClient(build_app())
    resp = client.get("/protected", headers=_make_bearer("valid-token"))
    assert resp.status_code == 200
    assert resp.json() == {"user_id": str(uid)}


def test_jwtbearer_rejects_missing_header():
    client = TestClient(build_app())
    resp = client.get("/protected")
    # HTTPBearer answers 403 on older FastAPI releases and 401 on newer ones
    assert resp.status_code in (401, 403)


def test_jwtbearer_rejects_wrong_scheme():
    client = TestClient(build_app())
    resp = client.get("/protected", headers={"Authorization": "Basic abc"})
    assert resp.status_code in (401, 403)


def test_jwtbearer_rejects_invalid_token(monkeypatch):
    monkeypatch.setattr(auth_module, "get_user_id_from_token", _decoder_returning(None))

    client = TestClient(build_app())
    resp = client.get("/protected", headers=_make_bearer("invalid"))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token or expired token"


def test_get_current_user_id_dependency(monkeypatch):
    uid = uuid.uuid4()
    monkeypatch.setattr(auth_module, "get_user_id_from_token", _decoder_returning(uid))

    client = TestClient(build_app())
    resp = client.get("/me", headers=_make_bearer("valid"))
    assert resp.status_code == 200
    assert resp.json()["user_id"] == str(uid)
