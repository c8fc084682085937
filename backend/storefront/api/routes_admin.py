import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.db import get_db
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order_schema import OrderOut, OrderStatusIn
from storefront.schemas.product_schema import ProductIn, ProductOut
from storefront.services.order_service import (
    InvalidStatusTransition,
    OrderNotFound,
    OrderService,
)

logger = logging.getLogger("storefront.catalog")


def require_admin(x_admin_token: Optional[str] = Header(None)):
    if not x_admin_token:
        raise HTTPException(status_code=401, detail="Admin access required.")
    if x_admin_token != settings.ADMIN_TOKEN:
        raise HTTPException(status_code=403, detail="Admin access required.")


router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/orders", summary="List orders, newest first")
def list_orders(db: Session = Depends(get_db), limit: int = 100):
    orders = OrderService(db).list_orders(limit=limit)
    return [OrderOut.model_validate(o).model_dump(mode="json") for o in orders]


@router.post("/orders/{order_id}/status", summary="Confirm or cancel a pending order")
def set_order_status(order_id: int, payload: OrderStatusIn, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        order = svc.set_status(order_id, payload.status)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": order.id, "status": order.status.value}


def _product_fields(payload: ProductIn) -> dict:
    fields = payload.model_dump()
    fields["image"] = fields.get("image") or settings.PLACEHOLDER_IMAGE
    return fields


@router.post("/products", summary="Create product", status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    p = repo.create(**_product_fields(payload))
    db.commit()
    logger.info("catalog.product_created", extra={"event": "catalog.product_created", "product_id": p.id})
    return ProductOut.model_validate(p).model_dump()


@router.put("/products/{product_id}", summary="Edit product")
def update_product(product_id: int, payload: ProductIn, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    p = repo.get_by_id(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    repo.update(p, **_product_fields(payload))
    db.commit()
    logger.info("catalog.product_updated", extra={"event": "catalog.product_updated", "product_id": p.id})
    return ProductOut.model_validate(p).model_dump()


@router.delete("/products/{product_id}", summary="Delete product")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    if not repo.delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    db.commit()
    # carts still holding this id are cleaned on their next reconcile
    logger.info("catalog.product_deleted", extra={"event": "catalog.product_deleted", "product_id": product_id})
    return {"ok": True}
