"""Storage interfaces shared by the SQL and in-memory backends.

Services only ever talk to these classes. Which implementation sits behind
them is decided once, when the application is built.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..schemas.auth import AccountRecord
from ..schemas.product import ProductOut
from ..schemas.rental import RentalOut


class AccountStore(ABC):
    @abstractmethod
    async def get_by_name(self, name: str) -> AccountRecord | None:
        """Exact, case-sensitive lookup."""

    @abstractmethod
    async def create(self, name: str, password_hash: str) -> AccountRecord:
        """Insert an account, raising ``ConflictError`` if the name is taken."""

    @abstractmethod
    async def set_last_login(self, account_id: int, when: datetime) -> int:
        ...


class ProductStore(ABC):
    @abstractmethod
    async def list(self) -> list[ProductOut]:
        ...

    @abstractmethod
    async def exists(self, product_sn: str) -> bool:
        ...

    @abstractmethod
    async def create(self, product: ProductOut) -> ProductOut:
        ...

    @abstractmethod
    async def update(self, product_sn: str, values: dict[str, Any]) -> int:
        """Overwrite the given columns, returning the number of rows touched."""

    @abstractmethod
    async def delete(self, product_sn: str) -> int:
        """Remove the product and all of its rentals as one atomic change."""


class RentalStore(ABC):
    @abstractmethod
    async def list_by_product(self, product_sn: str) -> list[RentalOut]:
        ...

    @abstractmethod
    async def get(self, product_sn: str, start_date: str) -> RentalOut | None:
        ...

    @abstractmethod
    async def get_by_id(self, rental_id: int) -> RentalOut | None:
        ...

    @abstractmethod
    async def create(self, values: dict[str, Any]) -> RentalOut:
        """Insert a rental. Unknown products and duplicate keys raise ``StoreError``."""

    @abstractmethod
    async def update(self, product_sn: str, start_date: str, values: dict[str, Any]) -> int:
        ...

    @abstractmethod
    async def update_by_id(self, rental_id: int, values: dict[str, Any]) -> RentalOut | None:
        ...

    @abstractmethod
    async def delete(self, product_sn: str, start_date: str) -> int:
        ...

    @abstractmethod
    async def delete_by_id(self, rental_id: int) -> int:
        ...


@dataclass
class Storage:
    """The three stores of one backend plus its lifecycle hooks."""

    backend: str
    accounts: AccountStore
    products: ProductStore
    rentals: RentalStore

    async def startup(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass
