import pytest
from sqlalchemy.exc import SQLAlchemyError

from storefront.models.order import Order, OrderStatus
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.session_repo import SessionRepository
from storefront.schemas.cart_schema import CartLine
from storefront.schemas.order_schema import CheckoutIn
from storefront.services.cart_service import CartService, new_session_id
from storefront.services.checkout_validator import ValidationError
from storefront.services.order_service import (
    CartChangedDuringCheckout,
    EmptyCart,
    EmptyCartAfterReconciliation,
    InvalidStatusTransition,
    OrderNotFound,
    OrderService,
    OrderServiceException,
    price_cart,
)


def _seed_cart(db, session_id, lines):
    SessionRepository(db).save_cart(session_id, lines)
    db.commit()


def _order_count(db):
    return db.query(Order).count()


def test_total_uses_current_catalog_price_not_snapshot(db, make_product, checkout_form):
    a = make_product(name="Caslon", price_cents=1200)
    sid = new_session_id()
    _seed_cart(db, sid, [{"product_id": a.id, "name": "Caslon", "price_cents": 1000, "quantity": 2}])

    order = OrderService(db).submit_checkout(sid, CheckoutIn(**checkout_form))

    assert order.total_cents == 2400
    assert order.status == OrderStatus.PENDING
    assert [(ln.product_id, ln.qty, ln.price_cents) for ln in order.lines] == [(a.id, 2, 1200)]
    assert order.customer_name == "Ada Lovelace"
    assert order.email == "ada@example.com"
    assert order.data["payment"] == {"card_last4": "1111", "cardholder_name": "Ada Lovelace"}
    assert SessionRepository(db).get_cart(sid) == []


def test_deleted_product_rewrites_cart_and_creates_no_order(db, make_product, checkout_form):
    a = make_product(name="Futura", price_cents=500)
    b = make_product(name="Gill Sans", price_cents=700)
    sid = new_session_id()
    cart = CartService(db)
    cart.add_to_cart(sid, a.id)
    cart.add_to_cart(sid, b.id)
    db.delete(b)
    db.commit()
    before = _order_count(db)

    with pytest.raises(CartChangedDuringCheckout) as exc:
        OrderService(db).submit_checkout(sid, CheckoutIn(**checkout_form))

    stored = SessionRepository(db).get_cart(sid)
    assert [(ln["product_id"], ln["quantity"]) for ln in stored] == [(a.id, 1)]
    assert [ln.product_id for ln in exc.value.cart] == [a.id]
    assert _order_count(db) == before


def test_all_products_deleted_clears_cart(db, make_product, checkout_form):
    a = make_product(name="Optima")
    sid = new_session_id()
    CartService(db).add_to_cart(sid, a.id)
    db.delete(a)
    db.commit()
    before = _order_count(db)

    with pytest.raises(EmptyCartAfterReconciliation):
        OrderService(db).submit_checkout(sid, CheckoutIn(**checkout_form))

    assert SessionRepository(db).get_cart(sid) == []
    assert _order_count(db) == before


def test_invalid_expiry_rejected_before_catalog_access(db, catalog, checkout_form):
    catalog.add(1)
    sid = new_session_id()
    blob = [{"product_id": 1, "name": "P1", "price_cents": 100, "quantity": 1}]
    _seed_cart(db, sid, blob)
    form = CheckoutIn(**{**checkout_form, "card_expiry": "13/25"})

    with pytest.raises(ValidationError) as exc:
        OrderService(db, catalog=catalog).submit_checkout(sid, form)

    assert exc.value.field == "card_expiry"
    assert catalog.calls == []
    assert SessionRepository(db).get_cart(sid) == blob


def test_empty_cart_refused_up_front(db, catalog, checkout_form):
    before = _order_count(db)
    with pytest.raises(EmptyCart):
        OrderService(db, catalog=catalog).submit_checkout(new_session_id(), CheckoutIn(**checkout_form))
    with pytest.raises(EmptyCart):
        # empty cart is refused even when the form itself is invalid
        OrderService(db, catalog=catalog).submit_checkout(None, CheckoutIn())
    assert catalog.calls == []
    assert _order_count(db) == before


def test_persistence_failure_leaves_cart_intact(db, make_product, checkout_form, monkeypatch):
    a = make_product(name="Rockwell")
    sid = new_session_id()
    CartService(db).add_to_cart(sid, a.id)

    def boom(self, **kwargs):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(OrderRepository, "create", boom)

    with pytest.raises(OrderServiceException) as exc:
        OrderService(db).submit_checkout(sid, CheckoutIn(**checkout_form))

    assert str(exc.value) == "Unable to place order."
    assert [ln["product_id"] for ln in SessionRepository(db).get_cart(sid)] == [a.id]


def test_price_cart_clamps_quantity(catalog):
    catalog.add(1, price_cents=300)
    cart = [CartLine(product_id=1, name="old", price_cents=1).model_copy(update={"quantity": 0})]

    lines, surviving, total, dropped = price_cart(cart, catalog)

    assert lines == [{"product_id": 1, "name": "Item", "qty": 1, "price_cents": 300}]
    assert surviving[0].name == "Item"
    assert (total, dropped) == (300, False)


def test_begin_checkout_refuses_empty_and_reconciles(db, make_product):
    svc = OrderService(db)
    with pytest.raises(EmptyCart):
        svc.begin_checkout(new_session_id())

    a = make_product(name="Didot")
    b = make_product(name="Bembo")
    sid = new_session_id()
    CartService(db).add_to_cart(sid, a.id)
    CartService(db).add_to_cart(sid, b.id)
    db.delete(b)
    db.commit()

    cart, trimmed = svc.begin_checkout(sid)

    assert trimmed is True
    assert [ln.product_id for ln in cart] == [a.id]


def _pending_order(db):
    return OrderRepository(db).create(
        customer_name="Grace", email="grace@example.com", lines=[], total_cents=0
    )


def test_status_transitions_from_pending(db):
    svc = OrderService(db)
    confirmed = _pending_order(db)
    cancelled = _pending_order(db)
    db.commit()

    assert svc.set_status(confirmed.id, "Confirmed").status == OrderStatus.CONFIRMED
    assert svc.set_status(cancelled.id, "Cancelled").status == OrderStatus.CANCELLED


@pytest.mark.parametrize("first,second", [("Confirmed", "Cancelled"), ("Cancelled", "Confirmed"), ("Confirmed", "Pending")])
def test_terminal_statuses_do_not_transition(db, first, second):
    svc = OrderService(db)
    order = _pending_order(db)
    db.commit()
    svc.set_status(order.id, first)

    with pytest.raises(InvalidStatusTransition):
        svc.set_status(order.id, second)


def test_unknown_status_and_order(db):
    svc = OrderService(db)
    order = _pending_order(db)
    db.commit()
    with pytest.raises(InvalidStatusTransition):
        svc.set_status(order.id, "Shipped")
    with pytest.raises(InvalidStatusTransition):
        svc.set_status(order.id, "Pending")
    with pytest.raises(OrderNotFound):
        svc.set_status(999999, "Confirmed")
