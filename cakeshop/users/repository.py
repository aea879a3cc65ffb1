"""Accès aux données (Supabase) pour le domaine Utilisateurs.
- Table users: profil applicatif (username, role, avatar_url)
- API admin de Supabase Auth: rôle recopié dans app_metadata
Les erreurs sont journalisées et transformées en valeurs neutres ([], None, False).
"""
from typing import Any, Dict, List, Optional
import logging

import httpx

from cakeshop.config import SUPABASE_URL, SUPABASE_SERVICE_KEY

logger = logging.getLogger(__name__)

# module cakeshop.users.repository
def list_users(client, limit: int = 200) -> List[dict]:
    try:
        res = (
            client.table("users")
            .select("id, username, email, role, avatar_url, created_at")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("users.repository.list_users failed")
        return []

def get_user(client, user_id: str) -> Optional[dict]:
    if not user_id:
        return None
    try:
        res = client.table("users").select("*").eq("id", user_id).limit(1).execute()
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("users.repository.get_user failed id=%s", user_id)
        return None

def update_user(client, user_id: str, data: Dict[str, Any]) -> Optional[dict]:
    """Met à jour la ligne users et renvoie la ligne modifiée, None si échec ou id inconnu."""
    try:
        res = client.table("users").update(data).eq("id", user_id).execute()
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("users.repository.update_user failed id=%s fields=%s", user_id, sorted(data))
        return None

def set_auth_user_role(user_id: str, role: str) -> bool:
    """Recopie le rôle dans app_metadata (PUT /auth/v1/admin/users/{id}, clé service requise)."""
    if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
        logger.warning("users.repository.set_auth_user_role skipped: SUPABASE_SERVICE_KEY absent")
        return False
    url = f"{SUPABASE_URL.rstrip('/')}/auth/v1/admin/users/{user_id}"
    headers = {
        "Authorization": f"Bearer {SUPABASE_SERVICE_KEY}",
        "apikey": SUPABASE_SERVICE_KEY,
        "Content-Type": "application/json",
    }
    try:
        resp = httpx.put(url, json={"app_metadata": {"role": role}}, headers=headers, timeout=10)
    except httpx.HTTPError:
        logger.exception("users.repository.set_auth_user_role failed id=%s role=%s", user_id, role)
        return False
    if 200 <= resp.status_code < 300:
        return True
    logger.error("users.repository.set_auth_user_role status=%s body=%s", resp.status_code, resp.text)
    return False
