# module cakeshop.admin.models
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field


class PromoCodeCreateRequest(BaseModel):
    code: str
    discount_percentage: int = Field(ge=1, le=100)
    expiry_date: datetime


class PromoCodeToggleRequest(BaseModel):
    is_active: bool


class CategoryRequest(BaseModel):
    name: str = Field(max_length=100)


class MenuItemRequest(BaseModel):
    name: str = Field(max_length=200)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    description: str = ""
    category_id: int
    image_url: Optional[str] = None


class RoleUpdateRequest(BaseModel):
    role: Literal["user", "admin"]
