# module cakeshop.orders.views

"""Endpoints Commandes / Checkout.
- POST /checkout: crée la commande 'pending' + lignes depuis le panier, puis la session Stripe.
- POST /{id}/pay: relance le paiement d'une commande existante (pas de nouvelle commande).
- GET /{id}/confirm: retour Stripe après paiement; vérifie la session, met à jour la commande, vide le panier.
- GET /{id}/cancel: retour Stripe après abandon; la commande reste 'pending'.
- GET /{id}, GET /: détail et historique de l'utilisateur connecté.
Sécurité:
- require_user sur toutes les routes; la propriété de la commande est vérifiée par le service.
- optional_rate_limit: limite la fréquence des checkouts.
"""
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, Header, Request

from cakeshop.cart.store import CartStore, get_cart
from cakeshop.infra.supabase_client import get_service_db
from cakeshop.utils.rate_limit import optional_rate_limit
from cakeshop.utils.security import require_user
from cakeshop.orders import repository, service
from cakeshop.orders.models import CheckoutRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])


def _url_builder(request: Request):
    def build(order_id):
        confirm = str(request.url_for("confirm_order_payment", order_id=order_id))
        cancel = str(request.url_for("cancel_order_payment", order_id=order_id))
        return f"{confirm}?session_id={{CHECKOUT_SESSION_ID}}", cancel
    return build


@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout(
    request: Request,
    details: CheckoutRequest,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    user: Dict[str, Any] = Depends(require_user),
    cart: CartStore = Depends(get_cart),
    db=Depends(get_service_db),
):
    """
    Corps JSON: {"delivery_address": "...", "phone_number": "...", "special_instructions": "..."}
    En-tête optionnel Idempotency-Key: un rejeu renvoie la même commande.
    Réponse: {"order_id", "payment_reference", "session_id", "url"}
    """
    return service.checkout(db, user, cart, details, _url_builder(request), idempotency_key=idempotency_key)


@router.post("/{order_id}/pay", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def retry_order_payment(
    request: Request,
    order_id: int,
    user: Dict[str, Any] = Depends(require_user),
    db=Depends(get_service_db),
):
    return service.retry_payment(db, user, order_id, _url_builder(request))


@router.get("/{order_id}/confirm", name="confirm_order_payment")
def confirm_order_payment(
    request: Request,
    order_id: int,
    session_id: str,
    user: Dict[str, Any] = Depends(require_user),
    cart: CartStore = Depends(get_cart),
    db=Depends(get_service_db),
):
    order = service.confirm_payment(db, user, order_id, session_id)
    cart.clear_cart()
    return {
        "status": order.get("status"),
        "order_id": order_id,
        "payment_reference": order.get("payment_reference"),
        "message": "Commande passée avec succès !",
        "redirect_url": str(request.url_for("read_order", order_id=order_id)),
    }


@router.get("/{order_id}/cancel", name="cancel_order_payment")
def cancel_order_payment(
    order_id: int,
    user: Dict[str, Any] = Depends(require_user),
    db=Depends(get_service_db),
):
    return service.cancel_payment(db, user, order_id)


@router.get("/{order_id}", name="read_order")
def read_order(
    order_id: int,
    user: Dict[str, Any] = Depends(require_user),
    db=Depends(get_service_db),
) -> Dict[str, Any]:
    order = service.get_order_for_user(db, order_id, user)
    return {"order": order, "items": repository.get_order_items(db, order_id)}


@router.get("")
def list_my_orders(user: Dict[str, Any] = Depends(require_user), db=Depends(get_service_db)) -> Dict[str, Any]:
    return {"orders": repository.list_user_orders(db, user.get("id"))}
