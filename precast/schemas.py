"""
Pydantic schemas for products, drafts and catalog snapshots
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ProductRead(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    base_price: float = 0
    transport_cost: float = 0
    images: List[str] = Field(default_factory=list)
    is_available: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    # Amounts accept any input; non-numeric values are coerced to 0 by the service
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Any = None
    transport_cost: Any = None
    images: Optional[List[str]] = None
    is_available: Optional[bool] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Any = None
    transport_cost: Any = None
    images: Optional[List[str]] = None
    is_available: Optional[bool] = None


class ProductDraft(BaseModel):
    """
    Partial product held by the admin editor.
    Only turned into a full field set when it is submitted.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Any = None
    transport_cost: Any = None
    images: Optional[List[str]] = None
    is_available: Optional[bool] = None

    @classmethod
    def from_product(cls, product: ProductRead) -> "ProductDraft":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            base_price=product.base_price,
            transport_cost=product.transport_cost,
            images=list(product.images),
            is_available=product.is_available,
        )

    def to_fields(self) -> dict:
        """Full field set for create/update, with submit-time defaults applied"""
        return {
            "name": self.name,
            "description": self.description or None,
            "base_price": self.base_price,
            "transport_cost": self.transport_cost,
            "images": list(self.images or []),
            "is_available": True if self.is_available is None else self.is_available,
        }


class DraftUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Any = None
    transport_cost: Any = None
    is_available: Optional[bool] = None


class CatalogSnapshot(BaseModel):
    status: str  # "loading", "ready" or "error"
    products: List[ProductRead] = Field(default_factory=list)
    error: Optional[str] = None
    fetched_at: Optional[datetime] = None
