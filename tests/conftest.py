import sys
from pathlib import Path

import pytest
import pytest_asyncio

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stockroom.core.config import AppSettings
from stockroom.storage.memory import build_memory_storage
from stockroom.storage.sql import build_sql_storage


def make_settings(tmp_path: Path, **overrides) -> AppSettings:
    values = {
        "DB_URL": f"sqlite+aiosqlite:///{tmp_path / 'stockroom-test.db'}",
        "APP_TZ": "UTC",
        "BCRYPT_ROUNDS": 4,
        "METRICS_ENABLED": False,
        "JWT_SECRET": "test-secret",
    }
    values.update(overrides)
    return AppSettings(**values)


@pytest.fixture()
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest_asyncio.fixture(params=["memory", "sql"])
async def storage(request, settings):
    """Each storage-level test runs once per backend."""

    if request.param == "memory":
        store = build_memory_storage()
    else:
        store = build_sql_storage(settings)
    await store.startup()
    try:
        yield store
    finally:
        await store.shutdown()
