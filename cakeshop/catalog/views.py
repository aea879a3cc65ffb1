# module cakeshop.catalog.views
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from cakeshop.infra.supabase_client import get_db
from cakeshop.catalog import repository

router = APIRouter(prefix="/api/v1/menu", tags=["Menu API"])


@router.get("")
def list_menu(category_id: Optional[int] = None, db=Depends(get_db)) -> Dict[str, Any]:
    return {"items": repository.fetch_menu_items(db, category_id=category_id)}


@router.get("/categories")
def list_categories(db=Depends(get_db)) -> Dict[str, Any]:
    return {"categories": repository.fetch_categories(db)}
