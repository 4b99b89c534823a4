"""Product catalog operations."""

from __future__ import annotations

import logging

from ..core.config import AppSettings
from ..core.dates import normalize_datetime
from ..core.errors import ConstraintError, StoreError
from ..core.serials import allocate_serial, generate_serial
from ..schemas.product import ProductCreate, ProductOut, ProductUpdate
from ..storage.base import ProductStore

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, products: ProductStore, settings: AppSettings) -> None:
        self.products = products
        self.settings = settings
        self.generate_serial = generate_serial

    async def list(self) -> list[ProductOut]:
        return await self.products.list()

    async def create(self, payload: ProductCreate) -> ProductOut:
        product = ProductOut(
            product_sn=payload.product_sn or "",
            purchase_date=normalize_datetime(payload.purchase_date, self.settings.local_zone),
            name=payload.name,
            price=payload.price,
            vendor=payload.vendor,
            description=payload.description,
        )
        if payload.product_sn is None:
            created = await self._create_with_allocated_serial(product)
        else:
            # A caller-chosen serial goes in untouched; a duplicate trips the store's key.
            created = await self.products.create(product)
        logger.info("product.created", extra={"extra_data": {"product_sn": created.product_sn}})
        return created

    async def _create_with_allocated_serial(self, product: ProductOut) -> ProductOut:
        attempts = self.settings.SERIAL_ALLOCATION_ATTEMPTS
        for _ in range(attempts):
            product_sn = await allocate_serial(self.products.exists, attempts, self.generate_serial)
            try:
                return await self.products.create(product.model_copy(update={"product_sn": product_sn}))
            except ConstraintError:
                # Claimed by a concurrent create between the check and the insert.
                logger.warning("product.serial_collision", extra={"extra_data": {"product_sn": product_sn}})
        raise StoreError(f"Could not insert a product with a fresh serial after {attempts} attempts")

    async def update(self, product_sn: str, payload: ProductUpdate) -> int:
        values = payload.model_dump()
        values["purchase_date"] = normalize_datetime(payload.purchase_date, self.settings.local_zone)
        return await self.products.update(product_sn, values)

    async def delete(self, product_sn: str) -> int:
        deleted = await self.products.delete(product_sn)
        logger.info("product.deleted", extra={"extra_data": {"product_sn": product_sn, "rows": deleted}})
        return deleted
