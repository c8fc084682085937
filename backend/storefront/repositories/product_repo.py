from typing import List, Optional, Tuple

from storefront.models.product import Product
from sqlalchemy import func
from sqlalchemy.orm import Session


class ProductRepository:
    """Catalog accessor. Cart and order code only ever calls `get_by_id`."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product)
        if category:
            query = query.filter(Product.category == category)
        # price range only applies when both bounds are given
        if min_price is not None and max_price is not None:
            query = query.filter(
                Product.price_cents >= min_price, Product.price_cents <= max_price
            )
        if q:
            like = f"%{q}%"
            query = query.filter(
                (Product.name.ilike(like)) | (Product.description.ilike(like))
            )
        total = query.with_entities(func.count()).scalar() or 0
        items = query.order_by(Product.id).offset((page - 1) * size).limit(size).all()
        return items, total

    def list_all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.id).all()

    def create(self, **fields) -> Product:
        p = Product(**fields)
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: Product, **fields) -> Product:
        for key, value in fields.items():
            setattr(product, key, value)
        self.db.flush()
        return product

    def delete(self, product_id: int) -> bool:
        p = self.get_by_id(product_id)
        if not p:
            return False
        self.db.delete(p)
        self.db.flush()
        return True

    def upsert_by_name(self, name: str, **fields) -> Product:
        p = self.db.query(Product).filter(Product.name == name).first()
        if p:
            return self.update(p, **fields)
        return self.create(name=name, **fields)
