import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.models.order import ALLOWED_TRANSITIONS, Order, OrderStatus
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.session_repo import SessionRepository
from storefront.schemas.order_schema import CheckoutIn
from storefront.services import cart_engine
from storefront.services.cart_engine import Cart
from storefront.services.cart_service import TRIMMED_NOTICE
from storefront.services.checkout_validator import validate_checkout

logger = logging.getLogger("storefront.orders")


class OrderServiceException(Exception):
    pass


class EmptyCart(OrderServiceException):
    def __init__(self):
        super().__init__("Your cart is empty.")


class EmptyCartAfterReconciliation(OrderServiceException):
    def __init__(self):
        super().__init__("No valid products in cart.")


class CartChangedDuringCheckout(OrderServiceException):
    def __init__(self, cart: Cart):
        super().__init__(TRIMMED_NOTICE)
        self.cart = cart


class OrderNotFound(OrderServiceException):
    def __init__(self, order_id: int):
        super().__init__("Order not found")
        self.order_id = order_id


class InvalidStatusTransition(OrderServiceException):
    pass


def price_cart(cart: Cart, catalog) -> Tuple[List[dict], Cart, int, bool]:
    """Re-resolve every line against the catalog.

    Returns (order lines, surviving cart with refreshed snapshots, total in
    cents, whether any line was dropped). Cart snapshot prices are ignored.
    """
    order_lines = []
    surviving = []
    total_cents = 0
    for line in cart:
        product = catalog.get_by_id(line.product_id)
        if not product:
            continue
        qty = max(1, int(line.quantity or 1))
        price = int(product.price_cents or 0)
        total_cents += price * qty
        order_lines.append(
            {"product_id": product.id, "name": product.name, "qty": qty, "price_cents": price}
        )
        surviving.append(cart_engine.snapshot_line(product, quantity=qty))
    return order_lines, surviving, total_cents, len(surviving) != len(cart)


class OrderService:
    def __init__(self, db: Session, catalog=None):
        self.db = db
        self.orders = OrderRepository(db)
        self.sessions = SessionRepository(db)
        self.catalog = catalog or ProductRepository(db)

    def _load_cart(self, session_id: Optional[str]) -> Cart:
        return cart_engine.load_cart(self.sessions.get_cart(session_id))

    def begin_checkout(self, session_id: Optional[str]) -> Tuple[Cart, bool]:
        """Gate for the checkout page: refuse empty carts, reconcile the rest."""
        cart = self._load_cart(session_id)
        if not cart:
            raise EmptyCart()
        cleaned, trimmed = cart_engine.reconcile(cart, self.catalog)
        if trimmed:
            self.sessions.save_cart(session_id, cart_engine.dump_cart(cleaned))
            self.db.commit()
            if not cleaned:
                raise EmptyCart()
        return cleaned, trimmed

    def submit_checkout(self, session_id: Optional[str], form: CheckoutIn) -> Order:
        """
        Validate the form, re-price the session cart against the live catalog
        and persist a Pending order. The order is only created when every cart
        line is still in the catalog; otherwise the session cart is adjusted and
        EmptyCartAfterReconciliation / CartChangedDuringCheckout is raised.
        """
        cart = self._load_cart(session_id)
        if not cart:
            raise EmptyCart()

        # raises ValidationError; nothing below runs and nothing is mutated
        fields = validate_checkout(form)

        order_lines, surviving, total_cents, dropped = price_cart(cart, self.catalog)

        if not order_lines:
            self.sessions.clear(session_id)
            self.db.commit()
            logger.info(
                "checkout.abandoned_empty",
                extra={"event": "checkout.abandoned_empty", "session_id": session_id},
            )
            raise EmptyCartAfterReconciliation()

        if dropped:
            self.sessions.save_cart(session_id, cart_engine.dump_cart(surviving))
            self.db.commit()
            logger.info(
                "checkout.cart_changed",
                extra={
                    "event": "checkout.cart_changed",
                    "session_id": session_id,
                    "dropped": len(cart) - len(surviving),
                },
            )
            raise CartChangedDuringCheckout(surviving)

        try:
            order = self.orders.create(
                customer_name=fields.name.strip(),
                email=fields.email.lower(),
                lines=order_lines,
                total_cents=total_cents,
                data={
                    "shipping": fields.shipping(),
                    "payment": {
                        "card_last4": fields.card_last4,
                        "cardholder_name": fields.cardholder_name,
                    },
                },
            )
            self.sessions.clear(session_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(
                "checkout.persist_failed",
                extra={"event": "checkout.persist_failed", "session_id": session_id},
            )
            raise OrderServiceException("Unable to place order.") from e

        logger.info(
            "order.created",
            extra={
                "event": "order.created",
                "session_id": session_id,
                "order_id": order.id,
                "total_cents": total_cents,
                "lines": len(order_lines),
            },
        )
        return order

    def get_order(self, order_id: int) -> Order:
        order = self.orders.get(order_id)
        if not order:
            raise OrderNotFound(order_id)
        return order

    def list_orders(self, limit: int = 100) -> List[Order]:
        return self.orders.list_recent(limit=limit)

    def set_status(self, order_id: int, status: str) -> Order:
        """Admin transition: Pending -> Confirmed | Cancelled, both terminal."""
        try:
            target = OrderStatus(status)
        except ValueError:
            raise InvalidStatusTransition("Invalid status.")
        order = self.get_order(order_id)
        prev = OrderStatus(order.status)
        if target not in ALLOWED_TRANSITIONS[prev]:
            raise InvalidStatusTransition(
                f"Cannot change order status from {prev.value} to {target.value}."
            )
        self.orders.update_status(order_id, target)
        self.db.commit()
        logger.info(
            "order.status_changed",
            extra={
                "event": "order.status_changed",
                "order_id": order.id,
                "status_from": prev.value,
                "status_to": target.value,
            },
        )
        return order
