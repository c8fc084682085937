from typing import Literal

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storefront.api.session import ensure_session_id, get_session_id, touch_session_id
from storefront.db import get_db
from storefront.schemas.cart_schema import CartOut, cart_out
from storefront.services.cart_engine import ProductNotFound
from storefront.services.cart_service import TRIMMED_NOTICE, CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", summary="Get cart", response_model=CartOut)
def get_cart(request: Request, db: Session = Depends(get_db)):
    svc = CartService(db)
    cart, trimmed = svc.view_cart(get_session_id(request))
    return cart_out(cart, notice=TRIMMED_NOTICE if trimmed else None)


@router.post("/items/{product_id}", summary="Add item to cart", response_model=CartOut)
def add_item(
    product_id: int,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    session_id = ensure_session_id(request, response)
    svc = CartService(db)
    try:
        cart = svc.add_to_cart(session_id, product_id)
    except ProductNotFound:
        return JSONResponse(
            status_code=404,
            content={"detail": "Product no longer available.", "redirect": "/api/products"},
        )
    return cart_out(cart)


@router.post(
    "/items/{product_id}/{action}",
    summary="Increment or decrement an item",
    response_model=CartOut,
)
def update_quantity(
    product_id: int,
    action: Literal["add", "sub"],
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    session_id = touch_session_id(request, response)
    cart = CartService(db).update_quantity(session_id, product_id, action)
    return cart_out(cart)


@router.delete("/items/{product_id}", summary="Remove item", response_model=CartOut)
def remove_item(
    product_id: int,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    session_id = touch_session_id(request, response)
    cart = CartService(db).remove_from_cart(session_id, product_id)
    return cart_out(cart)


@router.delete("", summary="Clear cart")
def clear_cart(request: Request, response: Response, db: Session = Depends(get_db)):
    session_id = touch_session_id(request, response)
    CartService(db).clear_cart(session_id)
    return {"ok": True}
