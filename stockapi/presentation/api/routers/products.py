from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response, status

from ....application.services.product_service import ProductService
from ....application.services.token_service import Claims
from ....core.dependencies import get_product_service
from ....domain.validation import parse_product_payload
from ...api.dependencies import json_object_body, require_authenticated_user
from ...api.schemas.product import ProductView

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=List[ProductView])
async def list_products(
    service: ProductService = Depends(get_product_service),
) -> List[ProductView]:
    products = await service.list_products()
    return [ProductView.from_domain(product) for product in products]


@router.get("/{product_id}", response_model=ProductView)
async def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> ProductView:
    product = await service.get_product(product_id)
    return ProductView.from_domain(product)


@router.post("", response_model=ProductView, status_code=status.HTTP_201_CREATED)
async def create_product(
    response: Response,
    _: Claims = Depends(require_authenticated_user),
    payload: Dict[str, Any] = Depends(json_object_body),
    service: ProductService = Depends(get_product_service),
) -> ProductView:
    draft = parse_product_payload(payload)
    product = await service.create_product(draft)
    response.headers["Location"] = f"{router.prefix}/{product.id}"
    return ProductView.from_domain(product)


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_product(
    product_id: int,
    _: Claims = Depends(require_authenticated_user),
    payload: Dict[str, Any] = Depends(json_object_body),
    service: ProductService = Depends(get_product_service),
) -> None:
    draft = parse_product_payload(payload)
    await service.update_product(product_id, draft)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    _: Claims = Depends(require_authenticated_user),
    service: ProductService = Depends(get_product_service),
) -> None:
    await service.delete_product(product_id)
