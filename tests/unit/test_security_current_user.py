from unittest.mock import MagicMock

from fastapi import FastAPI, Depends
from fastapi.responses import Response
from fastapi.testclient import TestClient

from cakeshop.infra.supabase_client import get_db
from cakeshop.utils import security as security_mod
from cakeshop.utils.security import (
    set_session_cookie,
    clear_session_cookie,
    get_current_user,
    require_admin,
    COOKIE_NAME,
)


def _make_app():
    app = FastAPI()
    app.dependency_overrides[get_db] = lambda: MagicMock()

    @app.get("/me")
    def me(user=Depends(get_current_user)):
        return {"id": user["id"], "role": user.get("role")}

    @app.get("/admin")
    def admin(user=Depends(require_admin)):
        return {"ok": True}

    return app


def test_set_and_clear_session_cookie(monkeypatch):
    monkeypatch.setattr(security_mod, "COOKIE_SECURE", True, raising=False)
    resp = Response()
    set_session_cookie(resp, "abc123")
    low = (resp.headers.get("set-cookie") or "").lower()
    assert "sb_access=abc123" in low
    assert "httponly" in low
    assert "samesite=lax" in low
    assert "secure" in low

    resp2 = Response()
    clear_session_cookie(resp2)
    h2 = (resp2.headers.get("set-cookie") or "").lower()
    assert "sb_access=" in h2
    assert "max-age=0" in h2


def test_bearer_token_wins_over_cookie(monkeypatch):
    seen = []

    def fake(client, token):
        seen.append(token)
        return {"id": "u1", "role": "user"}
    monkeypatch.setattr(security_mod, "get_user_from_token", fake)

    client = TestClient(_make_app())
    client.cookies.set(COOKIE_NAME, "cookie-token")
    r = client.get("/me", headers={"Authorization": "Bearer tok-123"})
    assert r.status_code == 200
    assert seen == ["tok-123"]


def test_cookie_token_used_without_header(monkeypatch):
    monkeypatch.setattr(security_mod, "get_user_from_token", lambda c, t: {"id": "u1", "role": "admin"})
    client = TestClient(_make_app())
    client.cookies.set(COOKIE_NAME, "cookie-token")
    assert client.get("/me").json() == {"id": "u1", "role": "admin"}


def test_missing_token_401():
    r = TestClient(_make_app()).get("/me")
    assert r.status_code == 401
    assert "Non authentifié" in r.text


def test_token_without_user_id_401(monkeypatch):
    monkeypatch.setattr(security_mod, "get_user_from_token", lambda c, t: {"email": "x@y"})
    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer tok"})
    assert r.status_code == 401
    assert "Session expirée" in r.text


def test_auth_backend_error_401(monkeypatch):
    def boom(c, t):
        raise RuntimeError("invalid JWT")
    monkeypatch.setattr(security_mod, "get_user_from_token", boom)
    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer tok"})
    assert r.status_code == 401


def test_require_admin_forbidden_and_allowed(monkeypatch):
    client = TestClient(_make_app())
    monkeypatch.setattr(security_mod, "get_user_from_token", lambda c, t: {"id": "u1", "role": "user"})
    assert client.get("/admin", headers={"Authorization": "Bearer tok"}).status_code == 403

    monkeypatch.setattr(security_mod, "get_user_from_token", lambda c, t: {"id": "u1", "role": "admin"})
    r_ok = client.get("/admin", headers={"Authorization": "Bearer tok"})
    assert r_ok.status_code == 200
    assert r_ok.json() == {"ok": True}
