"""
Module 'cart': point d'entrée public.
Réunit modèles de lignes/promotions, calculs de prix et panier persistant.
"""

from .models import CartLine, AppliedPromotion, CartSnapshot
from .pricing import compute_subtotal, compute_discount, compute_total, to_minor_units, quantize_money
from .store import CartStore, get_cart

__all__ = [
    # models
    "CartLine",
    "AppliedPromotion",
    "CartSnapshot",
    # pricing
    "compute_subtotal",
    "compute_discount",
    "compute_total",
    "to_minor_units",
    "quantize_money",
    # store
    "CartStore",
    "get_cart",
]
