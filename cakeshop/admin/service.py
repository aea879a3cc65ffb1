# module cakeshop.admin.service

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from cakeshop.catalog import repository as catalog_repository
from cakeshop.errors import OrderNotFoundError, ShopError
from cakeshop.orders import repository as orders_repository
from cakeshop.orders.models import OrderStatus
from cakeshop.promotions import repository as promotions_repository
from cakeshop.users import repository as users_repository

logger = logging.getLogger(__name__)


def _lower(value: Any) -> str:
    return str(value or "").lower()


def filter_orders(orders: List[dict], status: Optional[str] = None, query: Optional[str] = None) -> List[dict]:
    """
    Filtre la liste admin des commandes.
    - status: égalité stricte ("all" ou vide = pas de filtre)
    - query: sous-chaîne, insensible à la casse, sur l'id, le nom d'utilisateur,
      l'email et l'adresse de livraison
    """
    filtered = list(orders or [])
    if status and status != "all":
        filtered = [o for o in filtered if o.get("status") == status]

    q = (query or "").strip().lower()
    if q:
        def matches(order: dict) -> bool:
            user = order.get("users") or {}
            return (
                q in _lower(order.get("id"))
                or q in _lower(user.get("username"))
                or q in _lower(user.get("email"))
                or q in _lower(order.get("delivery_address"))
            )
        filtered = [o for o in filtered if matches(o)]
    return filtered


def list_orders(client, status: Optional[str] = None, query: Optional[str] = None) -> List[dict]:
    return filter_orders(orders_repository.list_orders(client), status=status, query=query)


def update_order_status(client, order_id: int, status: OrderStatus) -> dict:
    """Tout passage entre les quatre statuts est permis à l'admin."""
    if not orders_repository.get_order(client, order_id):
        raise OrderNotFoundError()
    updated = orders_repository.update_order_status(client, order_id, status.value)
    if not updated:
        raise OrderNotFoundError("Mise à jour du statut impossible")
    logger.info("admin.orders status order_id=%s status=%s", order_id, status.value)
    return updated


def create_promo_code(client, code: str, discount_percentage: int, expiry_date: datetime) -> dict:
    if not (code or "").strip():
        raise ShopError("Veuillez saisir un code promo")
    created = promotions_repository.create_promo_code(client, code, discount_percentage, expiry_date)
    if not created:
        raise ShopError("Création du code promo impossible")
    logger.info("admin.promo created code=%s", code.strip().upper())
    return created


# --- Catalogue ---

def save_category(client, name: str, category_id: Optional[int] = None) -> dict:
    """Création (category_id absent) ou renommage d'une catégorie."""
    clean = (name or "").strip()
    if not clean:
        raise ShopError("Veuillez saisir un nom de catégorie")
    if category_id is None:
        saved = catalog_repository.create_category(client, clean)
    else:
        saved = catalog_repository.update_category(client, category_id, clean)
    if not saved:
        raise ShopError("Enregistrement de la catégorie impossible")
    logger.info("admin.catalog category saved id=%s name=%s", saved.get("id"), clean)
    return saved


def delete_category(client, category_id: int) -> None:
    if not catalog_repository.delete_category(client, category_id):
        raise ShopError("Suppression impossible: la catégorie est peut-être utilisée par des articles")
    logger.info("admin.catalog category deleted id=%s", category_id)


def filter_menu_items(items: List[dict], query: Optional[str] = None) -> List[dict]:
    """Recherche insensible à la casse sur le nom, la description et le nom de la catégorie."""
    q = (query or "").strip().lower()
    if not q:
        return list(items or [])

    def matches(item: dict) -> bool:
        category = item.get("categories") or {}
        return (
            q in _lower(item.get("name"))
            or q in _lower(item.get("description"))
            or q in _lower(category.get("name"))
        )
    return [i for i in items or [] if matches(i)]


def list_menu_items(client, query: Optional[str] = None) -> List[dict]:
    return filter_menu_items(catalog_repository.fetch_menu_items(client), query=query)


def save_menu_item(client, data: Dict[str, Any], item_id: Optional[int] = None) -> dict:
    """data: champs name, price, description, category_id, image_url (déjà validés par MenuItemRequest)."""
    payload = dict(data)
    payload["name"] = (payload.get("name") or "").strip()
    if not payload["name"]:
        raise ShopError("Veuillez saisir le nom de l'article")
    if item_id is None:
        saved = catalog_repository.create_menu_item(client, payload)
    else:
        saved = catalog_repository.update_menu_item(client, item_id, payload)
    if not saved:
        raise ShopError("Enregistrement de l'article impossible")
    logger.info("admin.catalog menu item saved id=%s", saved.get("id"))
    return saved


def delete_menu_item(client, item_id: int) -> None:
    if not catalog_repository.delete_menu_item(client, item_id):
        raise ShopError("Suppression de l'article impossible")
    logger.info("admin.catalog menu item deleted id=%s", item_id)


# --- Utilisateurs ---

def filter_users(users: List[dict], query: Optional[str] = None) -> List[dict]:
    """Recherche insensible à la casse sur le nom d'utilisateur, l'email et le rôle."""
    q = (query or "").strip().lower()
    if not q:
        return list(users or [])
    return [
        u for u in users or []
        if q in _lower(u.get("username")) or q in _lower(u.get("email")) or q in _lower(u.get("role"))
    ]


def list_users(client, query: Optional[str] = None) -> List[dict]:
    return filter_users(users_repository.list_users(client), query=query)


def update_user_role(client, user_id: str, role: str) -> dict:
    """
    users.role fait foi; le rôle est aussi recopié dans app_metadata
    (un échec de cette copie est journalisé sans annuler le changement).
    """
    updated = users_repository.update_user(client, user_id, {"role": role})
    if not updated:
        raise ShopError("Utilisateur introuvable ou mise à jour impossible")
    if not users_repository.set_auth_user_role(user_id, role):
        logger.warning("admin.users app_metadata role not synced user_id=%s", user_id)
    logger.info("admin.users role user_id=%s role=%s", user_id, role)
    return updated
