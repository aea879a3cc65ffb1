"""Couche service des commandes: checkout, paiement, rapprochement.

Séquence de checkout:
1) contrôles locaux (utilisateur, adresse, téléphone, panier non vide), aucun appel réseau
2) insertion de la commande 'pending' (total, frais, remise, code promo)
3) insertion des lignes order_items avec price_at_time = prix copié dans le panier
4) création de la session Stripe Checkout (montant en centimes, référence unique)
Le retour navigateur (confirm_payment) ou le webhook (handle_payment_event)
vérifient le paiement auprès de Stripe puis appellent reconcile_payment, qui
renseigne payment_reference et passe la commande en 'processing'.

Les étapes 2 et 3 ne sont pas transactionnelles: si 3 échoue, la commande
reste en base, 'pending' et sans lignes (OrderItemsError porte son id).
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from cakeshop.cart.pricing import to_minor_units
from cakeshop.cart.store import CartStore
from cakeshop.config import PAYMENT_CURRENCY
from cakeshop.errors import (
    CheckoutValidationError,
    NotAuthenticatedError,
    OrderAccessDeniedError,
    OrderCreationError,
    OrderItemsError,
    OrderNotFoundError,
    OrderStateError,
    PaymentGatewayError,
    PaymentNotCompletedError,
    ReconciliationError,
)
from cakeshop.payments import stripe_client
from cakeshop.payments.references import (
    extract_order_metadata,
    extract_session_from_event,
    make_payment_reference,
)
from . import repository
from .models import CheckoutRequest, OrderStatus

logger = logging.getLogger(__name__)

# (success_url, cancel_url) pour une commande donnée
UrlBuilder = Callable[[Any], Tuple[str, str]]


def validate_checkout(user: Optional[Dict[str, Any]], cart: CartStore, details: CheckoutRequest) -> None:
    """(a) Validation locale, avant toute mutation ou appel réseau."""
    if not user or not user.get("id"):
        raise NotAuthenticatedError()
    if not (details.delivery_address or "").strip() or not (details.phone_number or "").strip():
        raise CheckoutValidationError("Veuillez renseigner l'adresse de livraison et le numéro de téléphone")
    if cart.is_empty():
        raise CheckoutValidationError("Votre panier est vide")


def build_order_payload(user_id: str, cart: CartStore, details: CheckoutRequest, idempotency_key: Optional[str] = None) -> Dict[str, Any]:
    promo = cart.applied_promo
    payload: Dict[str, Any] = {
        "user_id": user_id,
        "status": OrderStatus.PENDING.value,
        "total": str(cart.total),
        "delivery_address": details.delivery_address.strip(),
        "phone_number": details.phone_number.strip(),
        "special_instructions": (details.special_instructions or "").strip() or None,
        "promo_code_id": promo.id if promo else None,
        "discount_amount": str(cart.discount),
    }
    if idempotency_key:
        payload["idempotency_key"] = idempotency_key
    return payload


def build_order_items(order_id: Any, cart: CartStore) -> List[Dict[str, Any]]:
    return [
        {
            "order_id": order_id,
            "menu_item_id": line.item_id,
            "quantity": line.quantity,
            "price_at_time": str(line.unit_price),
        }
        for line in cart.items
    ]


def ensure_order_has_items(client, order: Dict[str, Any]) -> None:
    """Une commande sans lignes ne part jamais au paiement."""
    if not repository.get_order_items(client, order["id"]):
        logger.error("orders.payment refused order_id=%s has no items", order["id"])
        raise OrderItemsError(order["id"])


def create_pending_order(
    client,
    user: Dict[str, Any],
    cart: CartStore,
    details: CheckoutRequest,
    idempotency_key: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Étapes 1 et 2: commande 'pending' puis ses lignes.
    - Rejeu d'une Idempotency-Key déjà vue pour cet utilisateur: renvoie la commande existante
    - OrderCreationError si l'insertion de la commande échoue (aucun id produit)
    - OrderItemsError si l'insertion des lignes échoue (la commande reste en base)
    """
    validate_checkout(user, cart, details)
    user_id = user["id"]

    if idempotency_key:
        existing = repository.find_order_by_idempotency_key(client, user_id, idempotency_key)
        if existing:
            logger.info("orders.checkout replay idempotency_key=%s order_id=%s", idempotency_key, existing.get("id"))
            ensure_order_has_items(client, existing)
            return existing

    order = repository.insert_order(client, build_order_payload(user_id, cart, details, idempotency_key))
    if not order or order.get("id") is None:
        raise OrderCreationError()

    order_id = order["id"]
    if not repository.insert_order_items(client, build_order_items(order_id, cart)):
        logger.error("orders.checkout order %s left pending without items", order_id)
        raise OrderItemsError(order_id)

    logger.info("orders.checkout created order_id=%s user_id=%s total=%s", order_id, user_id, order.get("total"))
    return order


def start_payment(
    order: Dict[str, Any],
    email: Optional[str],
    success_url: str,
    cancel_url: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Étape 3: session Stripe Checkout pour le total de la commande, sans toucher à la base."""
    if order.get("status") != OrderStatus.PENDING.value:
        raise OrderStateError("Cette commande n'est plus en attente de paiement")

    order_id = order["id"]
    reference = make_payment_reference(order_id, now)
    try:
        session = stripe_client.create_payment_session(
            amount_minor=to_minor_units(order["total"]),
            currency=PAYMENT_CURRENCY,
            reference=reference,
            email=email,
            success_url=success_url,
            cancel_url=cancel_url,
            description=f"Commande #{order_id}",
            metadata={"order_id": str(order_id), "payment_reference": reference, "user_id": str(order.get("user_id") or "")},
        )
    except Exception:
        logger.exception("orders.payment stripe session failed order_id=%s", order_id)
        raise PaymentGatewayError()

    logger.info("orders.payment started order_id=%s reference=%s", order_id, reference)
    return {
        "order_id": order_id,
        "payment_reference": reference,
        "session_id": session.get("id"),
        "url": session.get("url"),
    }


def checkout(
    client,
    user: Dict[str, Any],
    cart: CartStore,
    details: CheckoutRequest,
    build_urls: UrlBuilder,
    idempotency_key: Optional[str] = None,
) -> Dict[str, Any]:
    order = create_pending_order(client, user, cart, details, idempotency_key=idempotency_key)
    success_url, cancel_url = build_urls(order["id"])
    return start_payment(order, user.get("email"), success_url, cancel_url)


def get_order_for_user(client, order_id: Any, user: Dict[str, Any]) -> Dict[str, Any]:
    order = repository.get_order(client, order_id)
    if not order:
        raise OrderNotFoundError()
    if str(order.get("user_id")) != str(user.get("id")) and user.get("role") != "admin":
        raise OrderAccessDeniedError()
    return order


def retry_payment(client, user: Dict[str, Any], order_id: Any, build_urls: UrlBuilder) -> Dict[str, Any]:
    """Relance l'étape 3 pour une commande existante: ni nouvelle commande, ni nouvelles lignes."""
    order = get_order_for_user(client, order_id, user)
    ensure_order_has_items(client, order)
    success_url, cancel_url = build_urls(order["id"])
    return start_payment(order, user.get("email"), success_url, cancel_url)


def reconcile_payment(client, order_id: Any, payment_reference: str) -> Dict[str, Any]:
    """
    Reporte un paiement réussi sur la commande (idempotent).
    - Déjà 'processing'/'completed' avec la même référence: no-op
    - Échec de la mise à jour: ReconciliationError (argent encaissé, statut non mis à jour)
    """
    order = repository.get_order(client, order_id)
    if not order:
        logger.critical("orders.reconcile paid order not found order_id=%s reference=%s", order_id, payment_reference)
        raise ReconciliationError(order_id, payment_reference)

    status = order.get("status")
    if status in (OrderStatus.PROCESSING.value, OrderStatus.COMPLETED.value) and order.get("payment_reference") == payment_reference:
        return order
    if status != OrderStatus.PENDING.value:
        logger.critical(
            "orders.reconcile payment received for order in status=%s order_id=%s reference=%s",
            status, order_id, payment_reference,
        )
        raise OrderStateError("Paiement reçu pour une commande qui n'est plus en attente")

    updated = repository.mark_order_paid(client, order_id, payment_reference)
    if not updated:
        logger.critical("orders.reconcile status update failed order_id=%s reference=%s", order_id, payment_reference)
        raise ReconciliationError(order_id, payment_reference)
    logger.info("orders.reconcile order_id=%s reference=%s", order_id, payment_reference)
    return updated


def confirm_payment(client, user: Dict[str, Any], order_id: Any, session_id: str) -> Dict[str, Any]:
    """
    Retour navigateur après paiement: la session est relue chez Stripe
    (le paramètre session_id seul ne prouve rien).
    """
    get_order_for_user(client, order_id, user)
    try:
        session = stripe_client.get_session(session_id)
    except Exception:
        logger.exception("orders.confirm stripe session lookup failed session_id=%s", session_id)
        raise PaymentGatewayError()

    meta_order_id, reference = extract_order_metadata(session)
    if meta_order_id != str(order_id) or not reference:
        raise OrderAccessDeniedError("Session de paiement sans rapport avec cette commande")
    payment_status = session.get("payment_status") or ""
    if payment_status != "paid":
        raise PaymentNotCompletedError(f"Paiement non confirmé (payment_status={payment_status})")
    return reconcile_payment(client, order_id, reference)


def cancel_payment(client, user: Dict[str, Any], order_id: Any) -> Dict[str, Any]:
    """(d) Abandon du paiement: la commande reste 'pending' et peut être relancée."""
    order = get_order_for_user(client, order_id, user)
    logger.info("orders.payment cancelled order_id=%s", order_id)
    return {"order_id": order["id"], "status": order.get("status"), "message": "Paiement annulé"}


def handle_payment_event(client, event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Webhook Stripe, source de vérité du paiement.
    - checkout.session.completed + payment_status=paid: reconcile_payment
    - checkout.session.expired: la commande reste 'pending'
    - autres événements: ignorés
    """
    event_type = (event or {}).get("type")
    if event_type not in ("checkout.session.completed", "checkout.session.expired"):
        return {"status": "ignored"}

    session = extract_session_from_event(event)
    order_id, reference = extract_order_metadata(session)
    if not order_id or not reference:
        logger.warning("payments.webhook %s without order metadata session_id=%s", event_type, session.get("id"))
        return {"status": "ignored"}

    if event_type == "checkout.session.expired" or session.get("payment_status") != "paid":
        logger.info("payments.webhook %s order_id=%s left pending", event_type, order_id)
        return {"status": "pending", "order_id": order_id}

    order = reconcile_payment(client, order_id, reference)
    return {"status": "ok", "order_id": order.get("id", order_id)}
