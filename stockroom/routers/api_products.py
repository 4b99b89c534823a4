from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..deps.auth import require_token
from ..deps.services import get_catalog_service
from ..schemas.auth import MessageResponse
from ..schemas.product import ProductCreate, ProductOut, ProductUpdate
from ..services.catalog import CatalogService

router = APIRouter(prefix="/products", tags=["products"], dependencies=[Depends(require_token)])


@router.get("", response_model=list[ProductOut])
async def api_list(catalog: CatalogService = Depends(get_catalog_service)):
    return await catalog.list()


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def api_create(payload: ProductCreate, catalog: CatalogService = Depends(get_catalog_service)):
    return await catalog.create(payload)


@router.put("/{product_sn}", response_model=MessageResponse)
async def api_update(product_sn: str, payload: ProductUpdate, catalog: CatalogService = Depends(get_catalog_service)):
    # Zero matched rows is still a success.
    await catalog.update(product_sn, payload)
    return MessageResponse(message="Product updated successfully")


@router.delete("/{product_sn}", response_model=MessageResponse)
async def api_delete(product_sn: str, catalog: CatalogService = Depends(get_catalog_service)):
    await catalog.delete(product_sn)
    return MessageResponse(message="Product and related rentals deleted successfully")
