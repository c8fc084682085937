from datetime import datetime, timezone

from storefront.db import Base
from sqlalchemy import JSON, Column, DateTime, Integer, String


class CartSession(Base):
    """Server-side session row; `items` is the cart blob as a list of dicts."""

    __tablename__ = "cart_sessions"
    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), unique=True, index=True, nullable=False)
    items = Column(JSON, nullable=False, default=list)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
