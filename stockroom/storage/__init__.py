from __future__ import annotations

from ..core.config import AppSettings
from .base import AccountStore, ProductStore, RentalStore, Storage
from .memory import build_memory_storage
from .sql import build_sql_storage

__all__ = [
    "AccountStore",
    "ProductStore",
    "RentalStore",
    "Storage",
    "build_storage",
]


def build_storage(settings: AppSettings) -> Storage:
    """Pick the backend named by ``STORAGE_BACKEND``."""

    if settings.STORAGE_BACKEND == "memory":
        return build_memory_storage(seed_demo_data=settings.SEED_DEMO_DATA)
    return build_sql_storage(settings)
