from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from sqlalchemy.orm import Session
from storefront.config import settings
from storefront.db import get_db
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product_schema import ProductOut

router = APIRouter(tags=["catalogue"])

@router.get("", summary="List products")
def list_products(
    q: Optional[str] = Query(None, description="search term"),
    category: Optional[str] = Query(None),
    min_price: Optional[int] = Query(None, ge=0, description="cents; needs max_price"),
    max_price: Optional[int] = Query(None, ge=0, description="cents; needs min_price"),
    page: int = Query(1, ge=1),
    size: int = Query(settings.CATALOG_PAGE_SIZE, ge=1, le=200),
    db: Session = Depends(get_db),
):
    repo = ProductRepository(db)
    items, total = repo.list(
        q=q, category=category, min_price=min_price, max_price=max_price, page=page, size=size
    )
    return {
        "items": [ProductOut.model_validate(p).model_dump() for p in items],
        "total": total,
        "page": page,
        "total_pages": (total + size - 1) // size,
    }

@router.get("/{product_id}", summary="Get product by id")
def get_product(product_id: int, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    p = repo.get_by_id(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductOut.model_validate(p).model_dump()
