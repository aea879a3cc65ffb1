# module cakeshop.orders.models
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CheckoutRequest(BaseModel):
    """Coordonnées de livraison saisies au checkout (contrôlées par le service, pas ici)."""
    delivery_address: str = ""
    phone_number: str = ""
    special_instructions: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: OrderStatus
