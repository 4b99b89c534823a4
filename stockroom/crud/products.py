"""Product queries. Each helper is one statement; callers own the transaction."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.product import Product
from ..models.rental import Rental


async def list_products(db: AsyncSession) -> list[Product]:
    return list((await db.execute(select(Product))).scalars().all())


async def product_exists(db: AsyncSession, product_sn: str) -> bool:
    stmt = select(Product.product_sn).where(Product.product_sn == product_sn)
    return (await db.execute(stmt)).first() is not None


async def create_product(db: AsyncSession, values: dict[str, Any]) -> Product:
    product = Product(**values)
    db.add(product)
    await db.flush()
    return product


async def update_product(db: AsyncSession, product_sn: str, values: dict[str, Any]) -> int:
    stmt = update(Product).where(Product.product_sn == product_sn).values(**values)
    result = await db.execute(stmt)
    return result.rowcount


async def delete_product(db: AsyncSession, product_sn: str) -> int:
    """Delete a product together with its rentals.

    The rentals go first and explicitly, so the cascade holds even on stores
    where the foreign key action is not enforced. Run inside one transaction.
    """

    await db.execute(delete(Rental).where(Rental.product_sn == product_sn))
    result = await db.execute(delete(Product).where(Product.product_sn == product_sn))
    return result.rowcount
