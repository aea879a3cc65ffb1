"""
Calculs de prix du panier.

total = sous-total - remise + frais de livraison, recalculé à chaque lecture
depuis les lignes et la promotion courantes.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from cakeshop.config import DELIVERY_FEE
from .models import AppliedPromotion, CartLine

CENT = Decimal("0.01")


def quantize_money(amount) -> Decimal:
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_subtotal(lines: Iterable[CartLine]) -> Decimal:
    return quantize_money(sum((line.unit_price * line.quantity for line in lines), Decimal("0")))


def compute_discount(subtotal: Decimal, promo: Optional[AppliedPromotion]) -> Decimal:
    if promo is None:
        return quantize_money(0)
    return quantize_money(subtotal * promo.discount_percentage / Decimal(100))


def compute_total(
    lines: Iterable[CartLine],
    promo: Optional[AppliedPromotion],
    delivery_fee: Decimal = DELIVERY_FEE,
) -> Decimal:
    subtotal = compute_subtotal(lines)
    discount = compute_discount(subtotal, promo)
    return quantize_money(subtotal - discount + delivery_fee)


def to_minor_units(amount: Decimal) -> int:
    """Montant en centimes (unité mineure attendue par la passerelle)."""
    return int((quantize_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
