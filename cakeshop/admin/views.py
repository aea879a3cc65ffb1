# module cakeshop.admin.views

"""API JSON du back-office (réservée aux admins).
- Commandes: liste filtrée (statut + recherche), changement de statut
- Codes promo: liste, création, activation/désactivation, suppression
- Catalogue: catégories et articles du menu (CRUD, recherche sur les articles)
- Utilisateurs: liste avec recherche, changement de rôle
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from cakeshop.infra.supabase_client import get_service_db
from cakeshop.utils.security import require_admin
from cakeshop.admin import service as admin_service
from cakeshop.admin.models import (
    CategoryRequest,
    MenuItemRequest,
    PromoCodeCreateRequest,
    PromoCodeToggleRequest,
    RoleUpdateRequest,
)
from cakeshop.catalog import repository as catalog_repository
from cakeshop.orders.models import StatusUpdateRequest
from cakeshop.promotions import repository as promotions_repository

router = APIRouter(prefix="/api/v1/admin", tags=["Admin API"])


@router.get("/orders")
def admin_list_orders(
    status: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
) -> Dict[str, Any]:
    return {"orders": admin_service.list_orders(db, status=status, query=q)}


@router.patch("/orders/{order_id}/status")
def admin_update_order_status(
    order_id: int,
    payload: StatusUpdateRequest,
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
):
    return admin_service.update_order_status(db, order_id, payload.status)


@router.get("/promo-codes")
def admin_list_promo_codes(user: dict = Depends(require_admin), db=Depends(get_service_db)) -> Dict[str, Any]:
    return {"items": promotions_repository.list_promo_codes(db)}


@router.post("/promo-codes", status_code=201)
def admin_create_promo_code(
    payload: PromoCodeCreateRequest,
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
):
    return admin_service.create_promo_code(db, payload.code, payload.discount_percentage, payload.expiry_date)


@router.patch("/promo-codes/{promo_id}")
def admin_toggle_promo_code(
    promo_id: str,
    payload: PromoCodeToggleRequest,
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
):
    updated = promotions_repository.set_promo_code_active(db, promo_id, payload.is_active)
    if not updated:
        raise HTTPException(status_code=404, detail="Code promo introuvable")
    return updated


@router.delete("/promo-codes/{promo_id}")
def admin_delete_promo_code(promo_id: str, user: dict = Depends(require_admin), db=Depends(get_service_db)):
    if not promotions_repository.delete_promo_code(db, promo_id):
        raise HTTPException(status_code=400, detail="Suppression impossible")
    return {"status": "deleted", "id": promo_id}


@router.get("/categories")
def admin_list_categories(user: dict = Depends(require_admin), db=Depends(get_service_db)) -> Dict[str, Any]:
    return {"categories": catalog_repository.fetch_categories(db)}


@router.post("/categories", status_code=201)
def admin_create_category(payload: CategoryRequest, user: dict = Depends(require_admin), db=Depends(get_service_db)):
    return admin_service.save_category(db, payload.name)


@router.put("/categories/{category_id}")
def admin_update_category(
    category_id: int,
    payload: CategoryRequest,
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
):
    return admin_service.save_category(db, payload.name, category_id=category_id)


@router.delete("/categories/{category_id}")
def admin_delete_category(category_id: int, user: dict = Depends(require_admin), db=Depends(get_service_db)):
    admin_service.delete_category(db, category_id)
    return {"status": "deleted", "id": category_id}


@router.get("/menu-items")
def admin_list_menu_items(
    q: Optional[str] = Query(default=None),
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
) -> Dict[str, Any]:
    return {"items": admin_service.list_menu_items(db, query=q)}


@router.post("/menu-items", status_code=201)
def admin_create_menu_item(payload: MenuItemRequest, user: dict = Depends(require_admin), db=Depends(get_service_db)):
    return admin_service.save_menu_item(db, payload.model_dump(mode="json"))


@router.put("/menu-items/{item_id}")
def admin_update_menu_item(
    item_id: int,
    payload: MenuItemRequest,
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
):
    return admin_service.save_menu_item(db, payload.model_dump(mode="json"), item_id=item_id)


@router.delete("/menu-items/{item_id}")
def admin_delete_menu_item(item_id: int, user: dict = Depends(require_admin), db=Depends(get_service_db)):
    admin_service.delete_menu_item(db, item_id)
    return {"status": "deleted", "id": item_id}


@router.get("/users")
def admin_list_users(
    q: Optional[str] = Query(default=None),
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
) -> Dict[str, Any]:
    return {"users": admin_service.list_users(db, query=q)}


@router.patch("/users/{user_id}/role")
def admin_update_user_role(
    user_id: str,
    payload: RoleUpdateRequest,
    user: dict = Depends(require_admin),
    db=Depends(get_service_db),
):
    return admin_service.update_user_role(db, user_id, payload.role)
