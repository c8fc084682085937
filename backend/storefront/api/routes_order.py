from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storefront.api.session import get_session_id
from storefront.db import get_db
from storefront.schemas.cart_schema import cart_out
from storefront.schemas.order_schema import CheckoutIn, OrderOut
from storefront.services.cart_service import TRIMMED_NOTICE
from storefront.services.checkout_validator import ValidationError
from storefront.services.order_service import (
    CartChangedDuringCheckout,
    EmptyCart,
    EmptyCartAfterReconciliation,
    OrderNotFound,
    OrderService,
    OrderServiceException,
)

router = APIRouter(tags=["orders"])


def _redirect(status_code: int, message: str, to: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "redirect": to})


@router.get("/checkout", summary="Start checkout")
def start_checkout(request: Request, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        cart, trimmed = svc.begin_checkout(get_session_id(request))
    except EmptyCart as e:
        return _redirect(400, str(e), "/api/cart")
    return cart_out(cart, notice=TRIMMED_NOTICE if trimmed else None)


@router.post("/checkout", summary="Place order", status_code=status.HTTP_201_CREATED)
def submit_checkout(payload: CheckoutIn, request: Request, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        order = svc.submit_checkout(get_session_id(request), payload)
    except EmptyCart as e:
        return _redirect(400, str(e), "/api/cart")
    except ValidationError as e:
        return JSONResponse(status_code=422, content={"detail": e.message, "field": e.field})
    except EmptyCartAfterReconciliation as e:
        return _redirect(409, str(e), "/api/products")
    except CartChangedDuringCheckout as e:
        return _redirect(409, str(e), "/api/cart")
    except OrderServiceException as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "orderId": order.id,
        "orderNumber": order.order_number,
        "status": order.status.value,
        "total_cents": order.total_cents,
        "redirect": f"/api/orders/{order.id}",
    }


@router.get("/orders/{order_id}", summary="Order confirmation", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    try:
        return OrderService(db).get_order(order_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
