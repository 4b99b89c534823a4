from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..deps.auth import require_token
from ..deps.services import get_ledger_service
from ..schemas.auth import MessageResponse
from ..schemas.rental import RentalCreate, RentalOut, RentalUpdate
from ..services.ledger import LedgerService

router = APIRouter(prefix="/rentals", tags=["rentals"], dependencies=[Depends(require_token)])

# Addressing by surrogate id lives under its own prefix so it can never be
# mistaken for a ``/rentals/{product_sn}/{start_date}`` path.
records_router = APIRouter(prefix="/rental-records", tags=["rentals"], dependencies=[Depends(require_token)])


@router.get("/{product_sn}", response_model=list[RentalOut])
async def api_list(product_sn: str, ledger: LedgerService = Depends(get_ledger_service)):
    return await ledger.list_by_product(product_sn)


@router.get("/{product_sn}/{start_date}", response_model=RentalOut)
async def api_get(product_sn: str, start_date: str, ledger: LedgerService = Depends(get_ledger_service)):
    return await ledger.get(product_sn, start_date)


@router.post("", response_model=RentalOut, status_code=status.HTTP_201_CREATED)
async def api_create(payload: RentalCreate, ledger: LedgerService = Depends(get_ledger_service)):
    return await ledger.create(payload)


@router.put("/{product_sn}/{start_date}", response_model=MessageResponse)
async def api_update(
    product_sn: str,
    start_date: str,
    payload: RentalUpdate,
    ledger: LedgerService = Depends(get_ledger_service),
):
    await ledger.update(product_sn, start_date, payload)
    return MessageResponse(message="Rental record updated successfully")


@router.delete("/{product_sn}/{start_date}", response_model=MessageResponse)
async def api_delete(product_sn: str, start_date: str, ledger: LedgerService = Depends(get_ledger_service)):
    await ledger.delete(product_sn, start_date)
    return MessageResponse(message="Rental record deleted successfully")


@records_router.put("/{rental_id}", response_model=RentalOut)
async def api_update_record(rental_id: int, payload: RentalUpdate, ledger: LedgerService = Depends(get_ledger_service)):
    return await ledger.update_by_id(rental_id, payload)


@records_router.delete("/{rental_id}", response_model=MessageResponse)
async def api_delete_record(rental_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    await ledger.delete_by_id(rental_id)
    return MessageResponse(message="Rental record deleted successfully")
