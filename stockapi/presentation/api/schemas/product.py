from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ....domain.models import Product


class ProductView(BaseModel):
    """Response schema for a product, serialised with camelCase timestamps."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    description: str
    price: float
    stock: int
    created_date: datetime = Field(alias="createdDate")
    last_updated_date: Optional[datetime] = Field(default=None, alias="lastUpdatedDate")

    @classmethod
    def from_domain(cls, product: Product) -> "ProductView":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=float(product.price),
            stock=product.stock,
            created_date=product.created_date,
            last_updated_date=product.last_updated_date,
        )
