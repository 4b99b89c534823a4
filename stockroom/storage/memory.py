"""In-process storage backend.

Rows live in insertion-ordered maps guarded by one ``asyncio.Lock``, so a
product delete and its rental cascade are observed together or not at all.
Useful for demos and tests; nothing survives a restart.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.errors import ConflictError, ConstraintError
from ..schemas.auth import AccountRecord
from ..schemas.product import ProductOut
from ..schemas.rental import RentalOut
from .base import AccountStore, ProductStore, RentalStore, Storage

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    {
        "product_sn": "ABCDE123",
        "purchase_date": "2023-07-10 10:00:00",
        "name": "Product 1",
        "price": 100.5,
        "vendor": "Vendor A",
        "description": "Description for Product 1",
    },
    {
        "product_sn": "FGHIJ456",
        "purchase_date": "2023-07-11 11:30:00",
        "name": "Product 2",
        "price": 150.75,
        "vendor": "Vendor B",
        "description": "Description for Product 2",
    },
]

DEMO_RENTALS = [
    {
        "product_sn": "ABCDE123",
        "start_date": "2024-07-19 17:19:10",
        "transaction_type": 1,
        "end_date": "2024-07-20 18:00:00",
        "qty": 1,
        "description": "",
    },
]


@dataclass
class MemoryDatabase:
    accounts: OrderedDict[str, AccountRecord] = field(default_factory=OrderedDict)
    products: OrderedDict[str, ProductOut] = field(default_factory=OrderedDict)
    rentals: OrderedDict[int, RentalOut] = field(default_factory=OrderedDict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    next_account_id: int = 1
    next_rental_id: int = 1

    def find_rental(self, product_sn: str, start_date: str) -> RentalOut | None:
        for rental in self.rentals.values():
            if rental.product_sn == product_sn and rental.start_date == start_date:
                return rental
        return None


class _MemoryStore:
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db


class MemoryAccountStore(_MemoryStore, AccountStore):
    async def get_by_name(self, name: str) -> AccountRecord | None:
        account = self._db.accounts.get(name)
        return account.model_copy() if account else None

    async def create(self, name: str, password_hash: str) -> AccountRecord:
        async with self._db.lock:
            if name in self._db.accounts:
                raise ConflictError("User already exists")
            account = AccountRecord(id=self._db.next_account_id, name=name, password_hash=password_hash)
            self._db.next_account_id += 1
            self._db.accounts[name] = account
            return account.model_copy()

    async def set_last_login(self, account_id: int, when: datetime) -> int:
        async with self._db.lock:
            for account in self._db.accounts.values():
                if account.id == account_id:
                    account.last_login_at = when
                    return 1
            return 0


class MemoryProductStore(_MemoryStore, ProductStore):
    async def list(self) -> list[ProductOut]:
        return [product.model_copy() for product in self._db.products.values()]

    async def exists(self, product_sn: str) -> bool:
        return product_sn in self._db.products

    async def create(self, product: ProductOut) -> ProductOut:
        async with self._db.lock:
            if product.product_sn in self._db.products:
                logger.error("store.duplicate_key", extra={"extra_data": {"product_sn": product.product_sn}})
                raise ConstraintError()
            self._db.products[product.product_sn] = product.model_copy()
            return product.model_copy()

    async def update(self, product_sn: str, values: dict[str, Any]) -> int:
        async with self._db.lock:
            current = self._db.products.get(product_sn)
            if current is None:
                return 0
            self._db.products[product_sn] = current.model_copy(update=values)
            return 1

    async def delete(self, product_sn: str) -> int:
        async with self._db.lock:
            doomed = [key for key, rental in self._db.rentals.items() if rental.product_sn == product_sn]
            for key in doomed:
                del self._db.rentals[key]
            return 1 if self._db.products.pop(product_sn, None) is not None else 0


class MemoryRentalStore(_MemoryStore, RentalStore):
    async def list_by_product(self, product_sn: str) -> list[RentalOut]:
        return [rental.model_copy() for rental in self._db.rentals.values() if rental.product_sn == product_sn]

    async def get(self, product_sn: str, start_date: str) -> RentalOut | None:
        rental = self._db.find_rental(product_sn, start_date)
        return rental.model_copy() if rental else None

    async def get_by_id(self, rental_id: int) -> RentalOut | None:
        rental = self._db.rentals.get(rental_id)
        return rental.model_copy() if rental else None

    async def create(self, values: dict[str, Any]) -> RentalOut:
        async with self._db.lock:
            # Mirror the relational backend's foreign key and unique constraints.
            if values["product_sn"] not in self._db.products:
                logger.error("store.foreign_key", extra={"extra_data": {"product_sn": values["product_sn"]}})
                raise ConstraintError()
            if self._db.find_rental(values["product_sn"], values["start_date"]):
                logger.error("store.duplicate_key", extra={"extra_data": dict(values)})
                raise ConstraintError()
            rental = RentalOut(id=self._db.next_rental_id, **values)
            self._db.next_rental_id += 1
            self._db.rentals[rental.id] = rental
            return rental.model_copy()

    async def update(self, product_sn: str, start_date: str, values: dict[str, Any]) -> int:
        async with self._db.lock:
            rental = self._db.find_rental(product_sn, start_date)
            if rental is None:
                return 0
            self._db.rentals[rental.id] = rental.model_copy(update=values)
            return 1

    async def update_by_id(self, rental_id: int, values: dict[str, Any]) -> RentalOut | None:
        async with self._db.lock:
            rental = self._db.rentals.get(rental_id)
            if rental is None:
                return None
            updated = rental.model_copy(update=values)
            self._db.rentals[rental_id] = updated
            return updated.model_copy()

    async def delete(self, product_sn: str, start_date: str) -> int:
        async with self._db.lock:
            rental = self._db.find_rental(product_sn, start_date)
            if rental is None:
                return 0
            del self._db.rentals[rental.id]
            return 1

    async def delete_by_id(self, rental_id: int) -> int:
        async with self._db.lock:
            return 1 if self._db.rentals.pop(rental_id, None) is not None else 0


@dataclass
class MemoryStorage(Storage):
    db: MemoryDatabase | None = None
    seed_demo_data: bool = False

    async def startup(self) -> None:
        if not self.seed_demo_data or self.db.products:
            return
        for values in DEMO_PRODUCTS:
            await self.products.create(ProductOut(**values))
        for values in DEMO_RENTALS:
            await self.rentals.create(dict(values))
        logger.info("storage.seeded", extra={"extra_data": {"products": len(DEMO_PRODUCTS)}})


def build_memory_storage(seed_demo_data: bool = False) -> MemoryStorage:
    db = MemoryDatabase()
    return MemoryStorage(
        backend="memory",
        accounts=MemoryAccountStore(db),
        products=MemoryProductStore(db),
        rentals=MemoryRentalStore(db),
        db=db,
        seed_demo_data=seed_demo_data,
    )
