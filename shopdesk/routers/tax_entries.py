"""GST tax entry API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from shopdesk.core.database import get_db
from shopdesk.models.tax_entry import TaxEntry
from shopdesk.repositories.tax_entry_repository import TaxEntryRepository
from shopdesk.schemas.tax_entry import (
    TaxEntryCreate,
    TaxEntryResponse,
    TaxEntryUpdate,
    TaxStatusUpdate,
)

router = APIRouter()


@router.post(
    "/",
    response_model=TaxEntryResponse,
    status_code=201,
    summary="Create tax entry",
)
async def create_tax_entry(
    data: TaxEntryCreate,
    db: Session = Depends(get_db),
) -> TaxEntry:
    return TaxEntryRepository(db).create(data)


@router.get(
    "/",
    response_model=list[TaxEntryResponse],
    summary="List tax entries",
)
async def list_tax_entries(
    response: Response,
    status: str | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[TaxEntry]:
    repo = TaxEntryRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return repo.get_all(skip=skip, limit=limit, status=status, order_by=order_by)


@router.get(
    "/{tax_entry_id}",
    response_model=TaxEntryResponse,
    summary="Get tax entry",
    responses={404: {"description": "Tax entry not found"}},
)
async def get_tax_entry(
    tax_entry_id: UUID,
    db: Session = Depends(get_db),
) -> TaxEntry:
    entry = TaxEntryRepository(db).get_by_id(tax_entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Tax entry not found")
    return entry


@router.put(
    "/{tax_entry_id}",
    response_model=TaxEntryResponse,
    summary="Update tax entry",
    responses={404: {"description": "Tax entry not found"}},
)
async def update_tax_entry(
    tax_entry_id: UUID,
    data: TaxEntryUpdate,
    db: Session = Depends(get_db),
) -> TaxEntry:
    entry = TaxEntryRepository(db).update(tax_entry_id, data)
    if not entry:
        raise HTTPException(status_code=404, detail="Tax entry not found")
    return entry


@router.put(
    "/{tax_entry_id}/status",
    response_model=TaxEntryResponse,
    summary="Update tax entry status",
    responses={404: {"description": "Tax entry not found"}},
)
async def update_tax_status(
    tax_entry_id: UUID,
    data: TaxStatusUpdate,
    db: Session = Depends(get_db),
) -> TaxEntry:
    entry = TaxEntryRepository(db).set_status(tax_entry_id, data.status)
    if not entry:
        raise HTTPException(status_code=404, detail="Tax entry not found")
    return entry


@router.delete(
    "/{tax_entry_id}",
    status_code=204,
    summary="Delete tax entry",
    responses={404: {"description": "Tax entry not found"}},
)
async def delete_tax_entry(
    tax_entry_id: UUID,
    db: Session = Depends(get_db),
) -> None:
    if not TaxEntryRepository(db).delete(tax_entry_id):
        raise HTTPException(status_code=404, detail="Tax entry not found")
