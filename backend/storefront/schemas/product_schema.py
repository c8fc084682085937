# backend/storefront/schemas/product_schema.py
from typing import Optional
from pydantic import BaseModel, Field
from pydantic import ConfigDict

class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price_cents: int
    image: Optional[str] = None
    featured: bool = False
    bestseller: bool = False


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    price_cents: int = Field(..., ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    featured: bool = False
    bestseller: bool = False
