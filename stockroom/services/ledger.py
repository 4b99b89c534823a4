"""Rental (stock movement) operations.

Rentals are addressed either by their surrogate ``id`` or by the legacy
``(product_sn, start_date)`` pair. For the pair, the ``start_date`` given by
the caller goes through the same normalisation as on create and is then
compared as text: it has to render to exactly the stored value.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.config import AppSettings
from ..core.dates import normalize_datetime, normalize_optional
from ..core.errors import NotFoundError
from ..schemas.rental import RentalCreate, RentalOut, RentalUpdate
from ..storage.base import RentalStore

logger = logging.getLogger(__name__)


class LedgerService:
    def __init__(self, rentals: RentalStore, settings: AppSettings) -> None:
        self.rentals = rentals
        self.settings = settings

    def _key(self, start_date: str) -> str:
        return normalize_datetime(start_date, self.settings.local_zone)

    def _changes(self, patch: RentalUpdate) -> dict[str, Any]:
        values = patch.changes()
        if "end_date" in values:
            values["end_date"] = normalize_optional(values["end_date"], self.settings.local_zone)
        return values

    async def list_by_product(self, product_sn: str) -> list[RentalOut]:
        return await self.rentals.list_by_product(product_sn)

    async def get(self, product_sn: str, start_date: str) -> RentalOut:
        rental = await self.rentals.get(product_sn, self._key(start_date))
        if rental is None:
            raise NotFoundError("Rental record not found")
        return rental

    async def create(self, payload: RentalCreate) -> RentalOut:
        zone = self.settings.local_zone
        values = {
            "product_sn": payload.product_sn,
            "start_date": normalize_datetime(payload.start_date, zone),
            "transaction_type": payload.transaction_type,
            "end_date": normalize_optional(payload.end_date, zone),
            "qty": payload.qty,
            "description": payload.description,
        }
        rental = await self.rentals.create(values)
        logger.info("rental.created", extra={"extra_data": {"rental_id": rental.id, "product_sn": rental.product_sn}})
        return rental

    async def update(self, product_sn: str, start_date: str, patch: RentalUpdate) -> int:
        return await self.rentals.update(product_sn, self._key(start_date), self._changes(patch))

    async def delete(self, product_sn: str, start_date: str) -> int:
        return await self.rentals.delete(product_sn, self._key(start_date))

    async def update_by_id(self, rental_id: int, patch: RentalUpdate) -> RentalOut:
        rental = await self.rentals.update_by_id(rental_id, self._changes(patch))
        if rental is None:
            raise NotFoundError("Rental record not found")
        return rental

    async def delete_by_id(self, rental_id: int) -> None:
        if not await self.rentals.delete_by_id(rental_id):
            raise NotFoundError("Rental record not found")
