"""
Accès au catalogue (tables 'categories' et 'menu_items').
Lecture pour la vitrine et le panier; écriture pour le back-office (client service).
"""
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# module cakeshop.catalog.repository
def fetch_categories(client) -> List[dict]:
    try:
        res = client.table("categories").select("*").order("name").execute()
        return res.data or []
    except Exception:
        logger.exception("catalog.repository.fetch_categories failed")
        return []

def fetch_menu_items(client, category_id: Optional[int] = None) -> List[dict]:
    """
    Articles du menu avec leur catégorie, triés par nom.
    - Filtre optionnel sur category_id
    - Retourne [] en cas d'erreur
    """
    try:
        query = client.table("menu_items").select("*, categories(id, name)")
        if category_id is not None:
            query = query.eq("category_id", category_id)
        res = query.order("name").execute()
        return res.data or []
    except Exception:
        logger.exception("catalog.repository.fetch_menu_items failed category_id=%s", category_id)
        return []

def get_menu_item(client, item_id: int) -> Optional[dict]:
    try:
        res = client.table("menu_items").select("*").eq("id", item_id).limit(1).execute()
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("catalog.repository.get_menu_item failed id=%s", item_id)
        return None

def _first_row(res) -> Optional[dict]:
    rows = getattr(res, "data", None) or []
    return rows[0] if rows else None

def create_category(client, name: str) -> Optional[dict]:
    try:
        return _first_row(client.table("categories").insert({"name": name}).execute())
    except Exception:
        logger.exception("catalog.repository.create_category failed name=%s", name)
        return None

def update_category(client, category_id: int, name: str) -> Optional[dict]:
    try:
        return _first_row(client.table("categories").update({"name": name}).eq("id", category_id).execute())
    except Exception:
        logger.exception("catalog.repository.update_category failed id=%s", category_id)
        return None

def delete_category(client, category_id: int) -> bool:
    """False si la suppression est refusée (ex: articles encore rattachés à la catégorie)."""
    try:
        client.table("categories").delete().eq("id", category_id).execute()
        return True
    except Exception:
        logger.exception("catalog.repository.delete_category failed id=%s", category_id)
        return False

def create_menu_item(client, data: Dict[str, Any]) -> Optional[dict]:
    try:
        return _first_row(client.table("menu_items").insert(data).execute())
    except Exception:
        logger.exception("catalog.repository.create_menu_item failed name=%s", data.get("name"))
        return None

def update_menu_item(client, item_id: int, data: Dict[str, Any]) -> Optional[dict]:
    try:
        return _first_row(client.table("menu_items").update(data).eq("id", item_id).execute())
    except Exception:
        logger.exception("catalog.repository.update_menu_item failed id=%s", item_id)
        return None

def delete_menu_item(client, item_id: int) -> bool:
    try:
        client.table("menu_items").delete().eq("id", item_id).execute()
        return True
    except Exception:
        logger.exception("catalog.repository.delete_menu_item failed id=%s", item_id)
        return False
