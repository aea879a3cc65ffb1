# module cakeshop.cart.store
"""
Panier du client, persisté dans un stockage clé/valeur (la session signée
Starlette en production, un dict dans les tests).

Clés:
- "cart": tableau JSON de CartLine
- "promo": AppliedPromotion en JSON, absente si aucune promotion
"""
import json
import logging
from decimal import Decimal
from typing import List, MutableMapping, Optional

from fastapi import Request
from pydantic import ValidationError

from cakeshop.config import DELIVERY_FEE
from . import pricing
from .models import AppliedPromotion, CartLine, CartSnapshot

logger = logging.getLogger(__name__)

CART_KEY = "cart"
PROMO_KEY = "promo"


class CartStore:
    def __init__(self, storage: MutableMapping[str, str], delivery_fee: Decimal = DELIVERY_FEE):
        self._storage = storage
        self.delivery_fee = delivery_fee
        self._lines: List[CartLine] = []
        self._promo: Optional[AppliedPromotion] = None
        self._load()

    # --- Chargement / persistance ---

    def _load(self) -> None:
        raw_cart = self._storage.get(CART_KEY)
        if raw_cart:
            try:
                for entry in json.loads(raw_cart):
                    self._merge(CartLine.model_validate(entry))
            except (ValueError, TypeError, ValidationError):
                logger.warning("cart.load discarded malformed cart payload")
                self._lines = []

        raw_promo = self._storage.get(PROMO_KEY)
        if raw_promo:
            try:
                self._promo = AppliedPromotion.model_validate_json(raw_promo)
            except (ValueError, TypeError, ValidationError):
                logger.warning("cart.load discarded malformed promo payload")
                self._promo = None

    def _persist(self) -> None:
        self._storage[CART_KEY] = json.dumps([line.model_dump(mode="json") for line in self._lines])
        if self._promo is not None:
            self._storage[PROMO_KEY] = self._promo.model_dump_json()
        else:
            self._storage.pop(PROMO_KEY, None)

    def _merge(self, line: CartLine) -> None:
        for existing in self._lines:
            if existing.item_id == line.item_id:
                existing.quantity += line.quantity
                return
        self._lines.append(line.model_copy())

    # --- Opérations ---

    @property
    def items(self) -> List[CartLine]:
        return [line.model_copy() for line in self._lines]

    @property
    def applied_promo(self) -> Optional[AppliedPromotion]:
        return self._promo

    def is_empty(self) -> bool:
        return not self._lines

    def add_item(self, line: CartLine) -> None:
        """Ajoute la ligne, ou incrémente la quantité si l'article est déjà présent."""
        self._merge(line)
        self._persist()

    def remove_item(self, item_id: int) -> str:
        self._lines = [line for line in self._lines if line.item_id != item_id]
        self._persist()
        return "Article retiré du panier"

    def update_quantity(self, item_id: int, quantity: int) -> Optional[str]:
        if quantity < 1:
            return self.remove_item(item_id)
        for line in self._lines:
            if line.item_id == item_id:
                line.quantity = quantity
        self._persist()
        return None

    def clear_cart(self) -> str:
        self._lines = []
        self._promo = None
        self._persist()
        return "Panier vidé"

    def apply_promo_code(self, promo: AppliedPromotion) -> str:
        # La règle "une seule promotion" est vérifiée par l'appelant (validate_promo_code)
        self._promo = promo
        self._persist()
        return f"Code promo appliqué ! -{promo.discount_percentage}%"

    def remove_promo_code(self) -> str:
        self._promo = None
        self._persist()
        return "Code promo retiré"

    # --- Dérivés ---

    @property
    def subtotal(self) -> Decimal:
        return pricing.compute_subtotal(self._lines)

    @property
    def discount(self) -> Decimal:
        return pricing.compute_discount(self.subtotal, self._promo)

    @property
    def total(self) -> Decimal:
        return pricing.compute_total(self._lines, self._promo, self.delivery_fee)

    def snapshot(self, message: Optional[str] = None) -> CartSnapshot:
        return CartSnapshot(
            items=self.items,
            subtotal=self.subtotal,
            discount=self.discount,
            delivery_fee=pricing.quantize_money(self.delivery_fee),
            total=self.total,
            promo=self._promo,
            message=message,
        )


def get_cart(request: Request) -> CartStore:
    """Dépendance FastAPI: panier adossé à la session signée du navigateur."""
    return CartStore(request.session)
