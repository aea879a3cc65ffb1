# module cakeshop.cart.models
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class CartLine(BaseModel):
    """
    Ligne du panier. name, unit_price et image sont copiés depuis le catalogue
    au moment de l'ajout et ne sont pas revalidés ensuite.
    """
    item_id: int
    name: str
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    image: Optional[str] = None


class AppliedPromotion(BaseModel):
    id: Optional[Union[int, str]] = None
    code: str
    discount_percentage: int = Field(ge=1, le=100)
    expiry_date: datetime

    @field_validator("code")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AppliedPromotion":
        """Construit la promotion depuis une ligne 'promo_codes'."""
        return cls(
            id=row.get("id"),
            code=row.get("code") or "",
            discount_percentage=row.get("discount_percentage"),
            expiry_date=row.get("expiry_date"),
        )


class CartSnapshot(BaseModel):
    items: List[CartLine]
    subtotal: Decimal
    discount: Decimal
    delivery_fee: Decimal
    total: Decimal
    promo: Optional[AppliedPromotion] = None
    message: Optional[str] = None


class AddItemRequest(BaseModel):
    menu_item_id: int
    quantity: int = Field(default=1, ge=1)


class UpdateQuantityRequest(BaseModel):
    # < 1 vaut suppression de la ligne
    quantity: int


class ApplyPromoRequest(BaseModel):
    code: str = ""
