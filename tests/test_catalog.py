"""Product catalog: creation, replacement and the rental cascade on delete."""

import pytest
import pytest_asyncio
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from stockroom.core.errors import StoreError, ValidationError
from stockroom.core.serials import SERIAL_PATTERN
from stockroom.crud import products as product_crud
from stockroom.models.rental import Rental
from stockroom.schemas.product import ProductCreate, ProductUpdate
from stockroom.schemas.rental import RentalCreate
from stockroom.services.catalog import CatalogService
from stockroom.services.ledger import LedgerService
from stockroom.storage.sql import build_sql_storage


def widget(**overrides) -> ProductCreate:
    values = {
        "product_sn": "ABCDE123",
        "purchase_date": "2024-01-01T00:00:00Z",
        "name": "Widget",
        "price": 9.99,
        "vendor": "Acme",
        "description": "",
    }
    values.update(overrides)
    return ProductCreate(**values)


@pytest_asyncio.fixture()
async def catalog(storage, settings):
    return CatalogService(storage.products, settings)


@pytest_asyncio.fixture()
async def ledger(storage, settings):
    return LedgerService(storage.rentals, settings)


@pytest.mark.asyncio
async def test_create_and_list(catalog):
    created = await catalog.create(widget())

    assert created.product_sn == "ABCDE123"
    assert created.purchase_date == "2024-01-01 00:00:00"
    products = await catalog.list()
    assert [p.product_sn for p in products] == ["ABCDE123"]
    assert products[0].price == pytest.approx(9.99)
    assert products[0].description == ""


@pytest.mark.asyncio
async def test_purchase_date_rendered_in_local_zone(storage, settings):
    seoul = settings.model_copy(update={"APP_TZ": "Asia/Seoul"})
    catalog = CatalogService(storage.products, seoul)

    created = await catalog.create(widget(purchase_date="2024-01-01T00:00:00Z"))

    assert created.purchase_date == "2024-01-01 09:00:00"


@pytest.mark.asyncio
async def test_naive_purchase_date_is_kept_as_local(catalog):
    created = await catalog.create(widget(purchase_date="2023-07-10 10:00:00"))
    assert created.purchase_date == "2023-07-10 10:00:00"


@pytest.mark.asyncio
async def test_unparseable_purchase_date_is_rejected(catalog):
    with pytest.raises(ValidationError):
        await catalog.create(widget(purchase_date="next tuesday"))
    assert await catalog.list() == []


@pytest.mark.asyncio
async def test_serial_allocated_when_missing(catalog):
    created = await catalog.create(widget(product_sn=None))

    assert SERIAL_PATTERN.match(created.product_sn)
    assert [p.product_sn for p in await catalog.list()] == [created.product_sn]


@pytest.mark.asyncio
async def test_caller_serial_is_not_format_checked(catalog):
    created = await catalog.create(widget(product_sn="legacy-1"))
    assert created.product_sn == "legacy-1"


@pytest.mark.asyncio
async def test_duplicate_serial_fails_at_store(catalog):
    await catalog.create(widget())
    with pytest.raises(StoreError):
        await catalog.create(widget(name="Other"))
    products = await catalog.list()
    assert len(products) == 1
    assert products[0].name == "Widget"


@pytest.mark.asyncio
async def test_update_replaces_every_mutable_field(catalog):
    await catalog.create(widget(description="old"))

    rows = await catalog.update(
        "ABCDE123",
        ProductUpdate(
            purchase_date="2024-02-02 12:30:00",
            name="Gadget",
            price=0,
            vendor="Globex",
            description=None,
        ),
    )

    assert rows == 1
    (product,) = await catalog.list()
    assert product.product_sn == "ABCDE123"
    assert product.purchase_date == "2024-02-02 12:30:00"
    assert product.name == "Gadget"
    assert product.price == 0
    assert product.vendor == "Globex"
    assert product.description == ""


@pytest.mark.asyncio
async def test_update_of_missing_product_touches_nothing(catalog):
    rows = await catalog.update(
        "NOPE0000",
        ProductUpdate(purchase_date="2024-02-02", name="Ghost", price=1, vendor="Nobody"),
    )
    assert rows == 0
    assert await catalog.list() == []


@pytest.mark.asyncio
async def test_delete_cascades_to_rentals(catalog, ledger):
    await catalog.create(widget())
    await catalog.create(widget(product_sn="FGHIJ456", name="Keeper"))
    for start in ("2024-07-19 17:19:10", "2024-07-20 08:00:00"):
        await ledger.create(RentalCreate(product_sn="ABCDE123", start_date=start, transaction_type=1, qty=2))
    await ledger.create(
        RentalCreate(product_sn="FGHIJ456", start_date="2024-07-19 17:19:10", transaction_type=2, qty=1)
    )

    assert await catalog.delete("ABCDE123") == 1

    assert await ledger.list_by_product("ABCDE123") == []
    assert [p.product_sn for p in await catalog.list()] == ["FGHIJ456"]
    assert len(await ledger.list_by_product("FGHIJ456")) == 1


@pytest.mark.asyncio
async def test_delete_of_missing_product_is_not_an_error(catalog):
    assert await catalog.delete("NOPE0000") == 0


@pytest.mark.asyncio
async def test_allocated_serial_retried_when_insert_collides(storage, catalog):
    await catalog.create(widget(product_sn="TAKEN100"))

    # The existence check misses the row, as it would when another create
    # claims the serial between the check and the insert.
    async def never_taken(product_sn):
        return False

    storage.products.exists = never_taken
    catalog.generate_serial = iter(["TAKEN100", "FREEE300"]).__next__

    created = await catalog.create(widget(product_sn=None, name="Second"))

    assert created.product_sn == "FREEE300"
    assert sorted(p.product_sn for p in await catalog.list()) == ["FREEE300", "TAKEN100"]


@pytest.mark.asyncio
async def test_allocated_serial_gives_up_after_repeated_collisions(storage, settings):
    catalog = CatalogService(storage.products, settings.model_copy(update={"SERIAL_ALLOCATION_ATTEMPTS": 3}))
    await catalog.create(widget(product_sn="TAKEN100"))

    async def never_taken(product_sn):
        return False

    storage.products.exists = never_taken
    catalog.generate_serial = lambda: "TAKEN100"

    with pytest.raises(StoreError):
        await catalog.create(widget(product_sn=None, name="Second"))
    assert [p.product_sn for p in await catalog.list()] == ["TAKEN100"]


@pytest.mark.asyncio
async def test_failed_product_delete_rolls_back_rental_cascade(settings, monkeypatch):
    storage = build_sql_storage(settings)
    await storage.startup()
    try:
        catalog = CatalogService(storage.products, settings)
        ledger = LedgerService(storage.rentals, settings)
        await catalog.create(widget())
        for start in ("2024-07-19 17:19:10", "2024-07-20 08:00:00"):
            await ledger.create(RentalCreate(product_sn="ABCDE123", start_date=start, transaction_type=1, qty=1))

        async def delete_rentals_then_fail(db, product_sn):
            await db.execute(delete(Rental).where(Rental.product_sn == product_sn))
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(product_crud, "delete_product", delete_rentals_then_fail)

        with pytest.raises(StoreError):
            await catalog.delete("ABCDE123")

        assert len(await ledger.list_by_product("ABCDE123")) == 2
        assert [p.product_sn for p in await catalog.list()] == ["ABCDE123"]
    finally:
        await storage.shutdown()
