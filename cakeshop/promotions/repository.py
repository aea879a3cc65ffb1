"""
Accès aux données pour la feature 'promotions' (table 'promo_codes').
"""
from datetime import datetime
from typing import List, Optional
import logging

from cakeshop.errors import PromoLookupError

logger = logging.getLogger(__name__)

# module cakeshop.promotions.repository
def find_active_promo_code(client, code: str) -> Optional[dict]:
    """
    Cherche un code actif (déjà normalisé en majuscules).
    - None si aucun code ne correspond
    - PromoLookupError si le data store ne répond pas (ne pas confondre avec "code invalide")
    """
    try:
        res = (
            client.table("promo_codes")
            .select("*")
            .eq("code", code)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
    except Exception:
        logger.exception("promotions.repository.find_active_promo_code failed code=%s", code)
        raise PromoLookupError()
    rows = res.data or []
    return rows[0] if rows else None

def list_promo_codes(client) -> List[dict]:
    try:
        res = client.table("promo_codes").select("*").order("created_at", desc=True).execute()
        return res.data or []
    except Exception:
        logger.exception("promotions.repository.list_promo_codes failed")
        return []

def create_promo_code(client, code: str, discount_percentage: int, expiry_date: datetime) -> Optional[dict]:
    payload = {
        "code": code.strip().upper(),
        "discount_percentage": int(discount_percentage),
        "expiry_date": expiry_date.isoformat(),
        "is_active": True,
    }
    try:
        res = client.table("promo_codes").insert(payload).execute()
        rows = res.data or []
        return rows[0] if rows else {"status": "ok", **payload}
    except Exception:
        logger.exception("promotions.repository.create_promo_code failed code=%s", payload["code"])
        return None

def set_promo_code_active(client, promo_id: str, is_active: bool) -> Optional[dict]:
    try:
        res = client.table("promo_codes").update({"is_active": is_active}).eq("id", promo_id).execute()
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("promotions.repository.set_promo_code_active failed id=%s", promo_id)
        return None

def delete_promo_code(client, promo_id: str) -> bool:
    try:
        client.table("promo_codes").delete().eq("id", promo_id).execute()
        return True
    except Exception:
        logger.exception("promotions.repository.delete_promo_code failed id=%s", promo_id)
        return False
