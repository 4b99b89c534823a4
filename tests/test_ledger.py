"""Rental ledger: key normalisation, partial updates and surrogate ids."""

import pytest
import pytest_asyncio

from stockroom.core.errors import NotFoundError, StoreError, ValidationError
from stockroom.schemas.product import ProductCreate
from stockroom.schemas.rental import RentalCreate, RentalUpdate
from stockroom.services.catalog import CatalogService
from stockroom.services.ledger import LedgerService

START = "2024-07-19 17:19:10"


@pytest_asyncio.fixture()
async def ledger(storage, settings):
    catalog = CatalogService(storage.products, settings)
    await catalog.create(
        ProductCreate(
            product_sn="ABCDE123",
            purchase_date="2023-07-10 10:00:00",
            name="Product 1",
            price=100.5,
            vendor="Vendor A",
        )
    )
    return LedgerService(storage.rentals, settings)


def movement(**overrides) -> RentalCreate:
    values = {
        "product_sn": "ABCDE123",
        "start_date": START,
        "transaction_type": 1,
        "end_date": "2024-07-20T18:00:00Z",
        "qty": 1.5,
        "description": "first delivery",
    }
    values.update(overrides)
    return RentalCreate(**values)


@pytest.mark.asyncio
async def test_create_normalises_dates(ledger):
    rental = await ledger.create(movement(start_date="2024-07-19T17:19:10.250Z"))

    assert rental.id is not None
    assert rental.start_date == START
    assert rental.end_date == "2024-07-20 18:00:00"
    assert rental.qty == pytest.approx(1.5)


@pytest.mark.asyncio
async def test_open_ended_movement(ledger):
    rental = await ledger.create(movement(end_date=None, description=None))
    assert rental.end_date is None
    assert rental.description == ""


@pytest.mark.asyncio
async def test_unknown_transaction_type_is_stored(ledger):
    rental = await ledger.create(movement(transaction_type=7))
    assert rental.transaction_type == 7


@pytest.mark.asyncio
async def test_rental_for_unknown_product_fails(ledger):
    with pytest.raises(StoreError):
        await ledger.create(movement(product_sn="ZZZZZ999"))


@pytest.mark.asyncio
async def test_duplicate_key_fails(ledger):
    await ledger.create(movement())
    with pytest.raises(StoreError):
        await ledger.create(movement(qty=3))
    assert len(await ledger.list_by_product("ABCDE123")) == 1


@pytest.mark.asyncio
async def test_list_by_product(ledger):
    await ledger.create(movement())
    await ledger.create(movement(start_date="2024-07-21 09:00:00", transaction_type=2))

    rentals = await ledger.list_by_product("ABCDE123")

    assert sorted(r.start_date for r in rentals) == [START, "2024-07-21 09:00:00"]
    assert await ledger.list_by_product("FGHIJ456") == []


@pytest.mark.asyncio
async def test_update_changes_only_mutable_fields(ledger):
    created = await ledger.create(movement())

    rows = await ledger.update(
        "ABCDE123",
        START,
        RentalUpdate(transaction_type=2, end_date="2024-08-01 00:00:00", qty=4, description="returned"),
    )

    assert rows == 1
    fetched = await ledger.get("ABCDE123", START)
    assert fetched.id == created.id
    assert fetched.start_date == START
    assert fetched.transaction_type == 2
    assert fetched.end_date == "2024-08-01 00:00:00"
    assert fetched.qty == 4
    assert fetched.description == "returned"


@pytest.mark.asyncio
async def test_update_ignores_start_date_in_body(ledger):
    await ledger.create(movement())

    patch = RentalUpdate.model_validate({"start_date": "2030-01-01 00:00:00", "qty": 9})
    await ledger.update("ABCDE123", START, patch)

    (rental,) = await ledger.list_by_product("ABCDE123")
    assert rental.start_date == START
    assert rental.qty == 9


@pytest.mark.asyncio
async def test_partial_update_keeps_other_fields(ledger):
    await ledger.create(movement())

    await ledger.update("ABCDE123", START, RentalUpdate(qty=3))

    rental = await ledger.get("ABCDE123", START)
    assert rental.qty == 3
    assert rental.transaction_type == 1
    assert rental.end_date == "2024-07-20 18:00:00"
    assert rental.description == "first delivery"


@pytest.mark.asyncio
async def test_update_can_clear_end_date(ledger):
    await ledger.create(movement())
    await ledger.update("ABCDE123", START, RentalUpdate(end_date=None))
    assert (await ledger.get("ABCDE123", START)).end_date is None


def test_required_fields_cannot_be_cleared():
    with pytest.raises(ValueError):
        RentalUpdate(qty=None)


@pytest.mark.asyncio
async def test_delete_with_exact_key(ledger):
    await ledger.create(movement())

    assert await ledger.delete("ABCDE123", START) == 1
    assert await ledger.list_by_product("ABCDE123") == []


@pytest.mark.asyncio
async def test_delete_with_shifted_offset_matches_nothing(ledger):
    await ledger.create(movement())

    # Same wall-clock digits, different offset: renders to another local time.
    assert await ledger.delete("ABCDE123", "2024-07-19T17:19:10+09:00") == 0
    assert len(await ledger.list_by_product("ABCDE123")) == 1


@pytest.mark.asyncio
async def test_update_of_missing_key_touches_nothing(ledger):
    assert await ledger.update("ABCDE123", START, RentalUpdate(qty=2)) == 0


@pytest.mark.asyncio
async def test_bad_key_date_is_rejected(ledger):
    with pytest.raises(ValidationError):
        await ledger.delete("ABCDE123", "yesterday")


@pytest.mark.asyncio
async def test_get_missing(ledger):
    with pytest.raises(NotFoundError):
        await ledger.get("ABCDE123", START)


@pytest.mark.asyncio
async def test_surrogate_id_addressing(ledger):
    created = await ledger.create(movement())

    updated = await ledger.update_by_id(created.id, RentalUpdate(qty=10, description="recount"))
    assert updated.qty == 10
    assert updated.description == "recount"
    assert updated.start_date == START

    await ledger.delete_by_id(created.id)
    assert await ledger.list_by_product("ABCDE123") == []

    with pytest.raises(NotFoundError):
        await ledger.delete_by_id(created.id)
    with pytest.raises(NotFoundError):
        await ledger.update_by_id(created.id, RentalUpdate(qty=1))
