from typing import Optional, Dict, Any

from cakeshop.config import ADMIN_EMAILS
from . import repository


def determine_role(email: Optional[str], profile: Dict[str, Any] | None, app_metadata: Dict[str, Any] | None) -> str:
    """
    Rôle effectif:
    - colonne users.role (gérée depuis le back office) en priorité
    - sinon app_metadata.role (modifiable seulement avec la clé service)
    - sinon ADMIN_EMAILS, "user" par défaut
    user_metadata (modifiable par l'utilisateur) n'est jamais consulté.
    """
    role = str((profile or {}).get("role") or (app_metadata or {}).get("role") or "").lower()
    if role == "admin":
        return "admin"
    if email and email in ADMIN_EMAILS:
        return "admin"
    return "user"


def get_user_from_token(client, access_token: str) -> Dict[str, Any]:
    """Normalise user issu de supabase.auth.get_user(access_token):
    - Retourne {id, email, metadata, role, token}
    """
    raw = repository.get_user_from_access_token(client, access_token)
    uid = raw.get("id")
    email = raw.get("email")
    metadata = raw.get("user_metadata") or {}
    profile = repository.get_user_profile(client, uid) if uid else None
    role = determine_role(email, profile, raw.get("app_metadata"))
    return {"id": uid, "email": email, "metadata": metadata, "role": role, "token": access_token}
