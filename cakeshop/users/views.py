# module cakeshop.users.views
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cakeshop.infra.supabase_client import get_service_db
from cakeshop.utils.security import require_user
from . import service

router = APIRouter(prefix="/api/v1/users", tags=["Users API"])


class ProfileUpdateRequest(BaseModel):
    username: str = Field(max_length=50)


@router.get("/me")
def read_profile(user: Dict[str, Any] = Depends(require_user), db=Depends(get_service_db)):
    return service.get_profile(db, user)


@router.patch("/me")
def update_profile(
    payload: ProfileUpdateRequest,
    user: Dict[str, Any] = Depends(require_user),
    db=Depends(get_service_db),
):
    """Seul le nom d'utilisateur est modifiable; le rôle reste géré par le back-office."""
    return service.update_username(db, user, payload.username)
