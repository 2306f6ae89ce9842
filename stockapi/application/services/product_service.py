from __future__ import annotations

import asyncio
import dataclasses
import logging
from datetime import datetime, timezone
from typing import Callable, List

from ...domain.errors import ProductNotFoundError
from ...domain.models import Product, ProductDraft
from ...domain.ports.persistence import ProductRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class ProductService:
    """
    Product lifecycle: create, read, full-field update and delete.

    Storage calls run in worker threads and are the only points where a
    request yields. No version check is made, so concurrent updates of the
    same product are last-writer-wins.
    """

    def __init__(
        self,
        repository: ProductRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._clock = clock

    # Queries --------------------------------------------------------------
    async def list_products(self) -> List[Product]:
        return await asyncio.to_thread(self._repository.list_products)

    async def get_product(self, product_id: int) -> Product:
        product = await asyncio.to_thread(self._repository.get_product, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    # Mutations ------------------------------------------------------------
    async def create_product(self, draft: ProductDraft) -> Product:
        product = await asyncio.to_thread(self._repository.create_product, draft, self._clock())
        logger.info("Product %s (%s) created", product.id, product.name)
        return product

    async def update_product(self, product_id: int, draft: ProductDraft) -> Product:
        current = await self.get_product(product_id)
        updated = dataclasses.replace(
            current,
            name=draft.name,
            description=draft.description,
            price=draft.price,
            stock=draft.stock,
            last_updated_date=self._clock(),
        )
        replaced = await asyncio.to_thread(self._repository.replace_product, updated)
        if not replaced:
            # Deleted between the read and the write.
            raise ProductNotFoundError(product_id)
        logger.info("Product %s updated", product_id)
        return updated

    async def delete_product(self, product_id: int) -> None:
        deleted = await asyncio.to_thread(self._repository.delete_product, product_id)
        if not deleted:
            raise ProductNotFoundError(product_id)
        logger.info("Product %s deleted", product_id)
