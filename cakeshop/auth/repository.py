from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

def get_user_from_access_token(client, access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l’utilisateur depuis supabase.auth.get_user(access_token)."""
    res = client.auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
            "app_metadata": getattr(user, "app_metadata", None),
        }
    return user or {}

def get_user_profile(client, user_id: str) -> Optional[Dict[str, Any]]:
    """Profil applicatif (table users: username, role, avatar_url)."""
    if not user_id:
        return None
    try:
        res = client.table("users").select("*").eq("id", user_id).limit(1).execute()
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("auth.repository.get_user_profile failed user_id=%s", user_id)
        return None
