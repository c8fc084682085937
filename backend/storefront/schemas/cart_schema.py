from typing import List, Optional

from pydantic import BaseModel, Field


class CartLine(BaseModel):
    """One cart entry; name/price/category/image are display snapshots."""

    product_id: int
    name: str
    price_cents: int
    category: Optional[str] = None
    image: Optional[str] = None
    quantity: int = Field(default=1, ge=1)

    @property
    def line_total_cents(self) -> int:
        return self.price_cents * self.quantity


class CartOut(BaseModel):
    items: List[CartLine]
    total_cents: int
    notice: Optional[str] = None


def cart_out(cart: List[CartLine], notice: Optional[str] = None) -> CartOut:
    return CartOut(
        items=cart,
        total_cents=sum(line.line_total_cents for line in cart),
        notice=notice,
    )
