"""
Accès aux données pour la feature 'orders' (tables 'orders' et 'order_items').
Les fonctions reçoivent le client Supabase en premier argument; en cas d'erreur
elles journalisent et renvoient None / [] / False, le service décide du reste.
Seule exception: la recherche par Idempotency-Key lève OrderCreationError.
"""
from typing import Any, Dict, List, Optional
import logging

from cakeshop.errors import OrderCreationError

logger = logging.getLogger(__name__)

ORDER_LIST_COLUMNS = (
    "id, user_id, status, total, delivery_address, phone_number, special_instructions, "
    "payment_reference, discount_amount, created_at, users(username, email)"
)

# module cakeshop.orders.repository
def insert_order(client, payload: Dict[str, Any]) -> Optional[dict]:
    """Insère une commande et renvoie la ligne créée (avec son id), None si refus du data store."""
    try:
        res = client.table("orders").insert(payload).execute()
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.insert_order failed user_id=%s", payload.get("user_id"))
        return None

def insert_order_items(client, rows: List[Dict[str, Any]]) -> bool:
    if not rows:
        return False
    try:
        client.table("order_items").insert(rows).execute()
        return True
    except Exception:
        logger.exception("orders.repository.insert_order_items failed order_id=%s", rows[0].get("order_id"))
        return False

def find_order_by_idempotency_key(client, user_id: str, key: str) -> Optional[dict]:
    """
    Commande déjà créée avec cette Idempotency-Key, None sinon.
    OrderCreationError si le data store ne répond pas (aucune commande n'est alors insérée).
    """
    try:
        res = (
            client.table("orders")
            .select("*")
            .eq("user_id", user_id)
            .eq("idempotency_key", key)
            .limit(1)
            .execute()
        )
    except Exception:
        logger.exception("orders.repository.find_order_by_idempotency_key failed user_id=%s", user_id)
        raise OrderCreationError()
    rows = res.data or []
    return rows[0] if rows else None

def get_order(client, order_id: int) -> Optional[dict]:
    try:
        res = client.table("orders").select("*").eq("id", order_id).limit(1).execute()
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.get_order failed id=%s", order_id)
        return None

def get_order_items(client, order_id: int) -> List[dict]:
    """Lignes de la commande avec l'article du menu (id, name, price, image_url)."""
    try:
        res = (
            client.table("order_items")
            .select("*, menu_items(id, name, price, image_url)")
            .eq("order_id", order_id)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.get_order_items failed order_id=%s", order_id)
        return []

def mark_order_paid(client, order_id: int, payment_reference: str) -> Optional[dict]:
    """Enregistre la référence de paiement et passe la commande en 'processing'."""
    try:
        res = (
            client.table("orders")
            .update({"payment_reference": payment_reference, "status": "processing"})
            .eq("id", order_id)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.mark_order_paid failed id=%s", order_id)
        return None

def update_order_status(client, order_id: int, status: str) -> Optional[dict]:
    try:
        res = client.table("orders").update({"status": status}).eq("id", order_id).execute()
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.update_order_status failed id=%s status=%s", order_id, status)
        return None

def list_user_orders(client, user_id: str, limit: int = 50) -> List[dict]:
    if not user_id:
        return []
    try:
        res = (
            client.table("orders")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_user_orders failed user_id=%s", user_id)
        return []

def list_orders(client, limit: int = 200) -> List[dict]:
    """Commandes pour l'admin, avec jointure sur users."""
    try:
        res = (
            client.table("orders")
            .select(ORDER_LIST_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_orders failed")
        return []
