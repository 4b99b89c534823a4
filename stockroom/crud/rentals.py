"""Rental queries.

``start_date`` arguments are compared as stored text, so callers must pass the
normalised string produced by :func:`stockroom.core.dates.normalize_datetime`.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.rental import Rental


def _by_key(product_sn: str, start_date: str):
    return (Rental.product_sn == product_sn, Rental.start_date == start_date)


async def list_rentals(db: AsyncSession, product_sn: str) -> list[Rental]:
    stmt = select(Rental).where(Rental.product_sn == product_sn)
    return list((await db.execute(stmt)).scalars().all())


async def get_rental(db: AsyncSession, product_sn: str, start_date: str) -> Rental | None:
    stmt = select(Rental).where(*_by_key(product_sn, start_date))
    return (await db.execute(stmt)).scalars().first()


async def get_rental_by_id(db: AsyncSession, rental_id: int) -> Rental | None:
    return await db.get(Rental, rental_id)


async def create_rental(db: AsyncSession, values: dict[str, Any]) -> Rental:
    rental = Rental(**values)
    db.add(rental)
    await db.flush()
    return rental


async def update_rental(db: AsyncSession, product_sn: str, start_date: str, values: dict[str, Any]) -> int:
    if not values:
        # Nothing to write; report whether the key matched.
        return 1 if await get_rental(db, product_sn, start_date) else 0
    stmt = update(Rental).where(*_by_key(product_sn, start_date)).values(**values)
    result = await db.execute(stmt)
    return result.rowcount


async def update_rental_by_id(db: AsyncSession, rental_id: int, values: dict[str, Any]) -> Rental | None:
    rental = await db.get(Rental, rental_id)
    if rental is None:
        return None
    for key, value in values.items():
        setattr(rental, key, value)
    await db.flush()
    return rental


async def delete_rental(db: AsyncSession, product_sn: str, start_date: str) -> int:
    result = await db.execute(delete(Rental).where(*_by_key(product_sn, start_date)))
    return result.rowcount


async def delete_rental_by_id(db: AsyncSession, rental_id: int) -> int:
    result = await db.execute(delete(Rental).where(Rental.id == rental_id))
    return result.rowcount
