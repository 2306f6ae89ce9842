from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

from ..models import Product, ProductDraft, User


class UserRepository(Protocol):
    """Persistence functions related to user credentials."""

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    def create_user(
        self,
        user_id: str,
        email: str,
        password_hash: str,
        created_at: datetime,
    ) -> User:
        """Insert a user; raises ``DuplicateEmailError`` when the email exists."""
        ...


class ProductRepository(Protocol):
    """Persistence functions related to products. Each call is atomic."""

    def list_products(self) -> List[Product]:
        ...

    def get_product(self, product_id: int) -> Optional[Product]:
        ...

    def create_product(self, draft: ProductDraft, created_date: datetime) -> Product:
        ...

    def replace_product(self, product: Product) -> bool:
        """Overwrite every mutable column; ``False`` when the row no longer exists."""
        ...

    def delete_product(self, product_id: int) -> bool:
        ...


class PersistenceGateway(
    UserRepository,
    ProductRepository,
    Protocol,
):
    """Composite gateway combining every persistence concern used by the app."""

    def close(self) -> None:
        ...
