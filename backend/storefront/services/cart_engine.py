"""Pure cart operations.

A cart is a list of `CartLine` values. Every function takes a cart (or None)
and returns a new list; inputs are never mutated. `catalog` is anything with a
`get_by_id(product_id)` method returning a product or None.
"""

from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError

from storefront.schemas.cart_schema import CartLine

Cart = List[CartLine]


class ProductNotFound(Exception):
    def __init__(self, product_id):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


def load_cart(raw: Optional[Iterable[dict]]) -> Cart:
    """Build a cart from a session blob. None or empty means an empty cart.

    Entries that do not form a valid line (e.g. quantity below 1) are dropped.
    """
    cart = []
    for entry in raw or []:
        try:
            cart.append(CartLine.model_validate(entry))
        except ValidationError:
            continue
    return cart


def dump_cart(cart: Optional[Cart]) -> List[dict]:
    return [line.model_dump() for line in (cart or [])]


def snapshot_line(product, quantity: int = 1) -> CartLine:
    return CartLine(
        product_id=product.id,
        name=product.name,
        price_cents=product.price_cents or 0,
        category=product.category,
        image=product.image,
        quantity=quantity,
    )


def add_item(cart: Optional[Cart], product_id: int, catalog) -> Cart:
    product = catalog.get_by_id(product_id)
    if not product:
        raise ProductNotFound(product_id)
    lines = [line.model_copy() for line in (cart or [])]
    existing = next((ln for ln in lines if ln.product_id == product_id), None)
    if existing:
        existing.quantity += 1
    else:
        lines.append(snapshot_line(product))
    return lines


def change_quantity(cart: Optional[Cart], product_id: int, delta: int) -> Cart:
    if delta not in (1, -1):
        raise ValueError(f"Quantity delta must be +1 or -1, got {delta}")
    lines = []
    for line in cart or []:
        if line.product_id == product_id:
            line = line.model_copy(update={"quantity": line.quantity + delta})
            if line.quantity <= 0:
                continue
        lines.append(line)
    return lines


def remove_item(cart: Optional[Cart], product_id: int) -> Cart:
    return [line for line in (cart or []) if line.product_id != product_id]


def reconcile(cart: Optional[Cart], catalog) -> Tuple[Cart, bool]:
    """Drop lines whose product is gone from the catalog.

    Returns (cleaned cart, whether anything was dropped).
    """
    kept = [line for line in (cart or []) if catalog.get_by_id(line.product_id)]
    return kept, len(kept) != len(cart or [])
