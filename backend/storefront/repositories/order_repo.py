from typing import List, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from storefront.models.order import Order, OrderLine, OrderStatus


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def _gen_order_number(self) -> str:
        return f"ORD-{uuid4().hex[:10].upper()}"

    def create(
        self,
        customer_name: str,
        email: str,
        lines: List[dict],
        total_cents: int,
        data: Optional[dict] = None,
    ) -> Order:
        """
        lines: list of {product_id, name, qty, price_cents}
        The caller owns the transaction; this only adds and flushes.
        """
        order = Order(
            order_number=self._gen_order_number(),
            customer_name=customer_name,
            email=email,
            status=OrderStatus.PENDING,
            total_cents=total_cents,
            data=data,
        )
        self.db.add(order)
        self.db.flush()
        for ln in lines:
            self.db.add(OrderLine(order_id=order.id, **ln))
        self.db.flush()
        self.db.refresh(order)
        return order

    def get(self, order_id: int) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def list_recent(self, limit: int = 100) -> List[Order]:
        return (
            self.db.query(Order)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .all()
        )

    def update_status(self, order_id: int, status: OrderStatus) -> Optional[Order]:
        order = self.get(order_id)
        if not order:
            return None
        order.status = status
        self.db.flush()
        return order
