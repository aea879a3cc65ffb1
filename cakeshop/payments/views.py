# module cakeshop.payments.views
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
import logging

from cakeshop.config import PAYMENT_CURRENCY, STRIPE_PUBLIC_KEY
from cakeshop.infra.supabase_client import get_service_db
from cakeshop.orders import service as orders_service
from cakeshop.payments import stripe_client

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])


@router.get("/config")
def payment_config():
    """Clé publique Stripe et devise, pour le front."""
    return {"publishable_key": STRIPE_PUBLIC_KEY, "currency": PAYMENT_CURRENCY}


@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request, db=Depends(get_service_db)):
    """
    Webhook Stripe (Checkout), source de vérité du paiement.
    - Signature: stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - checkout.session.completed payé: orders_service.reconcile_payment via handle_payment_event
    - Réponses: {"status": "ok" | "pending" | "ignored", ...}
    - Erreurs: 400 si signature/payload invalide; les erreurs métier gardent leur statut
      (Stripe relance alors l'envoi)
    """
    try:
        event = await stripe_client.parse_event(request)
    except Exception:
        logger.exception("payments.webhook invalid payload")
        raise HTTPException(status_code=400, detail="Invalid Stripe webhook payload")

    result = orders_service.handle_payment_event(db, event)
    logger.info("payments.webhook type=%s status=%s", (event or {}).get("type"), result.get("status"))
    return JSONResponse(result)
