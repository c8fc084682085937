from sqlalchemy import Column, Integer, String, Boolean, Text
from storefront.db import Base

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(128), nullable=True, index=True)
    price_cents = Column(Integer, nullable=False, default=0)
    image = Column(String(512), nullable=True)
    featured = Column(Boolean, default=False, nullable=False)
    bestseller = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Product id={self.id} name={self.name}>"
