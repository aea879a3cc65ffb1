"""
Validation des codes promo avant application au panier.

validate_promo_code est une fonction pure de (code, now, lookup, promo déjà
appliquée): l'accès au data store est injecté via `lookup`.
"""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from cakeshop.cart.models import AppliedPromotion
from cakeshop.errors import PromoCodeError

PromoLookup = Callable[[str], Optional[Dict[str, Any]]]


def _as_aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def validate_promo_code(
    code: Optional[str],
    now: datetime,
    lookup: PromoLookup,
    applied: Optional[AppliedPromotion] = None,
) -> AppliedPromotion:
    """
    Contrôles, dans l'ordre:
    1) code vide -> refus
    2) une promotion est déjà appliquée -> refus
    3) recherche du code en majuscules parmi les promotions actives
    4) introuvable -> refus
    5) expiry_date < now -> refus
    """
    normalized = (code or "").strip().upper()
    if not normalized:
        raise PromoCodeError("Veuillez saisir un code promo", reason="empty")
    if applied is not None:
        raise PromoCodeError("Un code promo est déjà appliqué", reason="already_applied")

    row = lookup(normalized)
    if not row:
        raise PromoCodeError("Code promo invalide", reason="not_found")

    try:
        promo = AppliedPromotion.from_row(row)
    except ValidationError:
        raise PromoCodeError("Code promo invalide", reason="not_found")

    if _as_aware(promo.expiry_date) < _as_aware(now):
        raise PromoCodeError("Ce code promo a expiré", reason="expired")
    return promo
