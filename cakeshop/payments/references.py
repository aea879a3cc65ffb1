"""
Références de paiement et lecture des métadonnées Stripe.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple


def make_payment_reference(order_id: Any, now: Optional[datetime] = None) -> str:
    """order_<id>_<epoch ms>: unique par tentative, même pour une commande relancée."""
    now = now or datetime.now(timezone.utc)
    return f"order_{order_id}_{int(now.timestamp() * 1000)}"


def extract_order_metadata(session: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """
    Extrait (order_id, payment_reference) d'une session Checkout.
    - metadata.payment_reference, sinon client_reference_id
    """
    meta = (session or {}).get("metadata") or {}
    order_id = meta.get("order_id")
    reference = meta.get("payment_reference") or (session or {}).get("client_reference_id")
    return (str(order_id) if order_id else None), reference


def extract_session_from_event(event: Dict[str, Any]) -> Dict[str, Any]:
    return ((event or {}).get("data") or {}).get("object") or {}
