"""Domain models for the product stock service."""

from .product import Product, ProductDraft
from .user import User

__all__ = [
    "Product",
    "ProductDraft",
    "User",
]
