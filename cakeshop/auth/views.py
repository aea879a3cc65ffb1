# module cakeshop.auth.views
"""Endpoints de session.
La connexion elle-même (mot de passe, OAuth) est faite côté client avec
Supabase Auth; le front transmet ensuite l'access_token pour obtenir le
cookie httpOnly sb_access utilisé par les routes protégées.
"""
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cakeshop.infra.supabase_client import get_db
from cakeshop.auth.service import get_user_from_token
from cakeshop.utils.security import set_session_cookie, clear_session_cookie, require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["Auth API"])


class SessionRequest(BaseModel):
    access_token: str


@router.post("/session")
def open_session(payload: SessionRequest, db=Depends(get_db)):
    try:
        user = get_user_from_token(db, payload.access_token)
    except Exception:
        logger.exception("auth.session token rejected")
        raise HTTPException(status_code=401, detail="Jeton invalide")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Jeton invalide")
    response = JSONResponse({"id": user["id"], "email": user.get("email"), "role": user.get("role")})
    set_session_cookie(response, payload.access_token)
    return response


@router.post("/logout")
def close_session():
    response = JSONResponse({"status": "ok"})
    clear_session_cookie(response)
    return response


@router.get("/me")
def me(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return {"id": user.get("id"), "email": user.get("email"), "role": user.get("role")}
