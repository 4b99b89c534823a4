"""Account queries."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.account import Account


async def get_account_by_name(db: AsyncSession, name: str) -> Account | None:
    stmt = select(Account).where(Account.name == name)
    return (await db.execute(stmt)).scalars().first()


async def create_account(db: AsyncSession, name: str, password_hash: str) -> Account:
    account = Account(name=name, password_hash=password_hash)
    db.add(account)
    # Flush so the unique constraint fires here and ``id`` is populated.
    await db.flush()
    return account


async def set_last_login(db: AsyncSession, account_id: int, when: datetime) -> int:
    stmt = update(Account).where(Account.id == account_id).values(last_login_at=when)
    result = await db.execute(stmt)
    return result.rowcount
