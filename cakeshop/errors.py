"""
Exceptions métier de la boutique.

Chaque exception porte un status_code HTTP et un detail lisible par
l'utilisateur; register_exception_handlers les convertit en JSON {"detail": ...}.
"""
from typing import Any, Dict, Optional


class ShopError(Exception):
    status_code = 400
    default_detail = "Requête invalide"

    def __init__(self, detail: Optional[str] = None, **context: Any):
        self.detail = detail or self.default_detail
        self.context: Dict[str, Any] = context
        super().__init__(self.detail)


# --- Promotions ---

class PromoCodeError(ShopError):
    """Code promo refusé; reason ∈ {empty, already_applied, not_found, expired}."""

    def __init__(self, detail: str, reason: str):
        super().__init__(detail, reason=reason)
        self.reason = reason


class PromoLookupError(ShopError):
    status_code = 502
    default_detail = "Impossible de vérifier le code promo"


# --- Panier / catalogue ---

class MenuItemNotFoundError(ShopError):
    status_code = 404
    default_detail = "Article introuvable"


# --- Checkout / commandes ---

class CheckoutValidationError(ShopError):
    """(a) Validation locale: aucun appel réseau n'a eu lieu."""


class NotAuthenticatedError(CheckoutValidationError):
    status_code = 401
    default_detail = "Utilisateur non authentifié"


class OrderCreationError(ShopError):
    """(b) Le data store a refusé l'insertion de la commande."""
    status_code = 502
    default_detail = "Impossible de créer la commande, veuillez réessayer"


class OrderItemsError(ShopError):
    """(c) Commande créée mais lignes non insérées: la commande reste 'pending' sans articles."""
    status_code = 502
    default_detail = "Impossible de finaliser la commande, veuillez contacter le support"

    def __init__(self, order_id: Any, detail: Optional[str] = None):
        super().__init__(detail, order_id=order_id)
        self.order_id = order_id


class PaymentNotCompletedError(ShopError):
    """(d) Paiement non confirmé ou annulé: la commande reste 'pending'."""
    status_code = 402
    default_detail = "Paiement non confirmé"


class PaymentGatewayError(ShopError):
    status_code = 502
    default_detail = "Service de paiement indisponible, veuillez réessayer"


class ReconciliationError(ShopError):
    """(e) Paiement encaissé mais statut local non mis à jour."""
    status_code = 500
    default_detail = "Paiement reçu mais commande non mise à jour, veuillez contacter le support"

    def __init__(self, order_id: Any, payment_reference: str):
        super().__init__(None, order_id=order_id, payment_reference=payment_reference)
        self.order_id = order_id
        self.payment_reference = payment_reference


class OrderNotFoundError(ShopError):
    status_code = 404
    default_detail = "Commande introuvable"


class OrderAccessDeniedError(ShopError):
    status_code = 403
    default_detail = "Vous n'avez pas accès à cette commande"


class OrderStateError(ShopError):
    status_code = 409
    default_detail = "Statut de commande incompatible avec cette opération"
