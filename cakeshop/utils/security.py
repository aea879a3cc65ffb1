"""
Authentification des requêtes API.
Le jeton Supabase est lu dans l'en-tête Authorization (Bearer) ou, à défaut,
dans le cookie httpOnly sb_access posé par POST /api/v1/auth/session.
"""
from typing import Any, Dict, Optional
import logging

from fastapi import Depends, HTTPException, Request
from fastapi.responses import Response

from cakeshop.config import COOKIE_SECURE
from cakeshop.infra.supabase_client import get_db
from cakeshop.auth.service import get_user_from_token

logger = logging.getLogger(__name__)

COOKIE_NAME = "sb_access"
SESSION_MAX_AGE = 60 * 60


def set_session_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="Lax",
        max_age=SESSION_MAX_AGE,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(COOKIE_NAME, path="/")


def extract_access_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_NAME) or None


def get_current_user(request: Request, db=Depends(get_db)) -> Dict[str, Any]:
    token = extract_access_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")

    try:
        user = get_user_from_token(db, token)
    except Exception:
        logger.info("auth.current_user token rejected path=%s", request.url.path)
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    return user


def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user


def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Accès interdit")
    return user
