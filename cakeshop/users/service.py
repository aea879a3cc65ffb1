"""Couche service du domaine Utilisateurs: profil de l'utilisateur connecté."""
from typing import Any, Dict
import logging

from cakeshop.errors import ShopError
from . import repository

logger = logging.getLogger(__name__)


def get_profile(client, user: Dict[str, Any]) -> Dict[str, Any]:
    """Ligne users de l'utilisateur; à défaut, l'identité issue du jeton."""
    profile = repository.get_user(client, user.get("id"))
    if profile:
        return profile
    return {"id": user.get("id"), "email": user.get("email"), "username": None, "role": user.get("role")}


def update_username(client, user: Dict[str, Any], username: str) -> Dict[str, Any]:
    name = (username or "").strip()
    if not name:
        raise ShopError("Veuillez saisir un nom d'utilisateur")
    updated = repository.update_user(client, user["id"], {"username": name})
    if not updated:
        raise ShopError("Mise à jour du profil impossible")
    logger.info("users.profile username updated user_id=%s", user["id"])
    return updated
