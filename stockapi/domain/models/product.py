from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True, slots=True)
class ProductDraft:
    """The four business fields of a product, already validated."""

    name: str
    description: str
    price: Decimal
    stock: int


@dataclass(slots=True)
class Product:
    id: int
    name: str
    description: str
    price: Decimal
    stock: int
    created_date: datetime
    last_updated_date: Optional[datetime] = None
