from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from storefront.models.order import OrderStatus


class CheckoutIn(BaseModel):
    """Raw checkout form. Everything is optional here; rules live in the validator."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    card_number: Optional[str] = None
    card_expiry: Optional[str] = None
    card_cvv: Optional[str] = None
    cardholder_name: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_text(cls, v):
        # form values may arrive as JSON numbers (zip, cvv, card number)
        if v is None or isinstance(v, str):
            return v
        return str(v)


class OrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    product_id: int
    name: str
    qty: int
    price_cents: int


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_number: str
    customer_name: str
    email: str
    status: OrderStatus
    total_cents: int
    created_at: datetime
    lines: List[OrderLineOut]


class OrderStatusIn(BaseModel):
    status: str
