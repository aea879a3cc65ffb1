# module cakeshop.cart.views
"""Endpoints du panier (session navigateur, pas d'authentification requise).
- Ajout: copie nom/prix/image depuis le catalogue au moment de l'ajout.
- Code promo: validate_promo_code avant apply_promo_code.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends

from cakeshop.errors import MenuItemNotFoundError
from cakeshop.infra.supabase_client import get_db
from cakeshop.catalog import repository as catalog_repo
from cakeshop.promotions import repository as promo_repo
from cakeshop.promotions.service import validate_promo_code
from .models import AddItemRequest, ApplyPromoRequest, CartLine, CartSnapshot, UpdateQuantityRequest
from .store import CartStore, get_cart

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/cart", tags=["Cart API"])


@router.get("", response_model=CartSnapshot)
def read_cart(cart: CartStore = Depends(get_cart)):
    return cart.snapshot()


@router.delete("", response_model=CartSnapshot)
def clear_cart(cart: CartStore = Depends(get_cart)):
    return cart.snapshot(cart.clear_cart())


@router.post("/items", response_model=CartSnapshot)
def add_item(payload: AddItemRequest, cart: CartStore = Depends(get_cart), db=Depends(get_db)):
    item = catalog_repo.get_menu_item(db, payload.menu_item_id)
    if not item:
        raise MenuItemNotFoundError()
    cart.add_item(CartLine(
        item_id=item["id"],
        name=item.get("name") or "Article",
        unit_price=item.get("price") or 0,
        quantity=payload.quantity,
        image=item.get("image_url"),
    ))
    return cart.snapshot(f"{item.get('name') or 'Article'} ajouté au panier")


@router.patch("/items/{item_id}", response_model=CartSnapshot)
def update_item(item_id: int, payload: UpdateQuantityRequest, cart: CartStore = Depends(get_cart)):
    return cart.snapshot(cart.update_quantity(item_id, payload.quantity))


@router.delete("/items/{item_id}", response_model=CartSnapshot)
def remove_item(item_id: int, cart: CartStore = Depends(get_cart)):
    return cart.snapshot(cart.remove_item(item_id))


@router.post("/promo", response_model=CartSnapshot)
def apply_promo(payload: ApplyPromoRequest, cart: CartStore = Depends(get_cart), db=Depends(get_db)):
    promo = validate_promo_code(
        payload.code,
        now=datetime.now(timezone.utc),
        lookup=lambda code: promo_repo.find_active_promo_code(db, code),
        applied=cart.applied_promo,
    )
    logger.info("cart.promo applied code=%s pct=%s", promo.code, promo.discount_percentage)
    return cart.snapshot(cart.apply_promo_code(promo))


@router.delete("/promo", response_model=CartSnapshot)
def remove_promo(cart: CartStore = Depends(get_cart)):
    return cart.snapshot(cart.remove_promo_code())
