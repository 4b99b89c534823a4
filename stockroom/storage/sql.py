"""Relational storage backend built on SQLAlchemy's asyncio extension."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..core.config import AppSettings
from ..core.errors import ConflictError, ConstraintError, StoreError
from ..crud import accounts as account_crud
from ..crud import products as product_crud
from ..crud import rentals as rental_crud
from ..db.session import build_engine, build_sessionmaker, create_schema
from ..schemas.auth import AccountRecord
from ..schemas.product import ProductOut
from ..schemas.rental import RentalOut
from .base import AccountStore, ProductStore, RentalStore, Storage

logger = logging.getLogger(__name__)


class _SqlStore:
    def __init__(self, sessions: async_sessionmaker) -> None:
        self._sessions = sessions

    @asynccontextmanager
    async def _unit(self, action: str, conflict_message: str | None = None) -> AsyncIterator[AsyncSession]:
        """Borrow one pooled connection for a single transaction.

        The connection goes back to the pool on every path. Database errors
        are logged with their detail and re-raised as a bare ``StoreError``
        (``ConstraintError`` when a key or foreign key refused the write).
        """

        try:
            async with self._sessions() as session, session.begin():
                yield session
        except IntegrityError as exc:
            if conflict_message is not None:
                raise ConflictError(conflict_message) from exc
            logger.exception("store.integrity_error", extra={"extra_data": {"action": action}})
            raise ConstraintError() from exc
        except SQLAlchemyError as exc:
            logger.exception("store.error", extra={"extra_data": {"action": action}})
            raise StoreError() from exc


class SqlAccountStore(_SqlStore, AccountStore):
    async def get_by_name(self, name: str) -> AccountRecord | None:
        async with self._unit("account.get") as db:
            account = await account_crud.get_account_by_name(db, name)
            return AccountRecord.model_validate(account) if account else None

    async def create(self, name: str, password_hash: str) -> AccountRecord:
        async with self._unit("account.create", conflict_message="User already exists") as db:
            account = await account_crud.create_account(db, name, password_hash)
            return AccountRecord.model_validate(account)

    async def set_last_login(self, account_id: int, when: datetime) -> int:
        async with self._unit("account.set_last_login") as db:
            return await account_crud.set_last_login(db, account_id, when)


class SqlProductStore(_SqlStore, ProductStore):
    async def list(self) -> list[ProductOut]:
        async with self._unit("product.list") as db:
            rows = await product_crud.list_products(db)
            return [ProductOut.model_validate(row) for row in rows]

    async def exists(self, product_sn: str) -> bool:
        async with self._unit("product.exists") as db:
            return await product_crud.product_exists(db, product_sn)

    async def create(self, product: ProductOut) -> ProductOut:
        async with self._unit("product.create") as db:
            row = await product_crud.create_product(db, product.model_dump())
            return ProductOut.model_validate(row)

    async def update(self, product_sn: str, values: dict[str, Any]) -> int:
        async with self._unit("product.update") as db:
            return await product_crud.update_product(db, product_sn, values)

    async def delete(self, product_sn: str) -> int:
        async with self._unit("product.delete") as db:
            return await product_crud.delete_product(db, product_sn)


class SqlRentalStore(_SqlStore, RentalStore):
    async def list_by_product(self, product_sn: str) -> list[RentalOut]:
        async with self._unit("rental.list") as db:
            rows = await rental_crud.list_rentals(db, product_sn)
            return [RentalOut.model_validate(row) for row in rows]

    async def get(self, product_sn: str, start_date: str) -> RentalOut | None:
        async with self._unit("rental.get") as db:
            row = await rental_crud.get_rental(db, product_sn, start_date)
            return RentalOut.model_validate(row) if row else None

    async def get_by_id(self, rental_id: int) -> RentalOut | None:
        async with self._unit("rental.get_by_id") as db:
            row = await rental_crud.get_rental_by_id(db, rental_id)
            return RentalOut.model_validate(row) if row else None

    async def create(self, values: dict[str, Any]) -> RentalOut:
        async with self._unit("rental.create") as db:
            row = await rental_crud.create_rental(db, values)
            return RentalOut.model_validate(row)

    async def update(self, product_sn: str, start_date: str, values: dict[str, Any]) -> int:
        async with self._unit("rental.update") as db:
            return await rental_crud.update_rental(db, product_sn, start_date, values)

    async def update_by_id(self, rental_id: int, values: dict[str, Any]) -> RentalOut | None:
        async with self._unit("rental.update_by_id") as db:
            row = await rental_crud.update_rental_by_id(db, rental_id, values)
            return RentalOut.model_validate(row) if row else None

    async def delete(self, product_sn: str, start_date: str) -> int:
        async with self._unit("rental.delete") as db:
            return await rental_crud.delete_rental(db, product_sn, start_date)

    async def delete_by_id(self, rental_id: int) -> int:
        async with self._unit("rental.delete_by_id") as db:
            return await rental_crud.delete_rental_by_id(db, rental_id)


@dataclass
class SqlStorage(Storage):
    engine: AsyncEngine | None = None

    async def startup(self) -> None:
        await create_schema(self.engine)

    async def shutdown(self) -> None:
        await self.engine.dispose()


def build_sql_storage(settings: AppSettings) -> SqlStorage:
    engine = build_engine(settings)
    sessions = build_sessionmaker(engine)
    return SqlStorage(
        backend="sql",
        accounts=SqlAccountStore(sessions),
        products=SqlProductStore(sessions),
        rentals=SqlRentalStore(sessions),
        engine=engine,
    )
