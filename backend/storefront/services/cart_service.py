import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.session_repo import SessionRepository
from storefront.services import cart_engine
from storefront.services.cart_engine import Cart

logger = logging.getLogger("storefront.cart")

# action names accepted by update_quantity, mapped to engine deltas
QUANTITY_ACTIONS = {"add": 1, "sub": -1}

TRIMMED_NOTICE = "Some products were removed because they are no longer available."


def new_session_id() -> str:
    return uuid.uuid4().hex


def _contains(cart: Cart, product_id: int) -> bool:
    return any(line.product_id == product_id for line in cart)


class CartService:
    """Session-backed cart: load blob, run a cart_engine operation, save blob."""

    def __init__(self, db: Session):
        self.db = db
        self.sessions = SessionRepository(db)
        self.catalog = ProductRepository(db)

    def load(self, session_id: Optional[str]) -> Cart:
        return cart_engine.load_cart(self.sessions.get_cart(session_id))

    def save(self, session_id: str, cart: Cart) -> None:
        self.sessions.save_cart(session_id, cart_engine.dump_cart(cart))
        self.db.commit()

    def add_to_cart(self, session_id: str, product_id: int) -> Cart:
        """Raises ProductNotFound without touching the session."""
        cart = cart_engine.add_item(self.load(session_id), product_id, self.catalog)
        self.save(session_id, cart)
        line = next(ln for ln in cart if ln.product_id == product_id)
        logger.info(
            "cart.item_added",
            extra={
                "event": "cart.item_added",
                "session_id": session_id,
                "product_id": product_id,
                "quantity": line.quantity,
            },
        )
        return cart

    def update_quantity(self, session_id: Optional[str], product_id: int, action: str) -> Cart:
        """Unknown actions and products not in the cart leave the session untouched."""
        current = self.load(session_id)
        delta = QUANTITY_ACTIONS.get(action)
        if delta is None or not _contains(current, product_id):
            return current
        cart = cart_engine.change_quantity(current, product_id, delta)
        self.save(session_id, cart)
        logger.info(
            "cart.quantity_changed",
            extra={
                "event": "cart.quantity_changed",
                "session_id": session_id,
                "product_id": product_id,
                "delta": delta,
            },
        )
        return cart

    def remove_from_cart(self, session_id: Optional[str], product_id: int) -> Cart:
        current = self.load(session_id)
        if not _contains(current, product_id):
            return current
        cart = cart_engine.remove_item(current, product_id)
        self.save(session_id, cart)
        logger.info(
            "cart.item_removed",
            extra={"event": "cart.item_removed", "session_id": session_id, "product_id": product_id},
        )
        return cart

    def view_cart(self, session_id: Optional[str]) -> Tuple[Cart, bool]:
        """Reconcile against the catalog, persisting the cleaned cart if it changed."""
        cart, trimmed = cart_engine.reconcile(self.load(session_id), self.catalog)
        if trimmed and session_id:
            self.save(session_id, cart)
            logger.info(
                "cart.reconciled",
                extra={"event": "cart.reconciled", "session_id": session_id, "remaining": len(cart)},
            )
        else:
            # commits the removal of an expired session, if any
            self.db.commit()
        return cart, trimmed

    def clear_cart(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        self.sessions.clear(session_id)
        self.db.commit()
        logger.info("cart.cleared", extra={"event": "cart.cleared", "session_id": session_id})
