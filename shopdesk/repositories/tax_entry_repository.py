"""GST tax entry repository for data access."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shopdesk.core.sorting import apply_order_by
from shopdesk.models.shared import NEGATING_WORDS, SettlementState
from shopdesk.models.tax_entry import PENDING_TAX_WORDS, TaxEntry
from shopdesk.schemas.tax_entry import TaxEntryCreate, TaxEntryUpdate


class TaxEntryRepository:
    """Repository for TaxEntry model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: str | None = None,
        order_by: str | None = None,
    ) -> list[TaxEntry]:
        query = self.db.query(TaxEntry)
        if status is not None:
            query = query.filter(func.lower(TaxEntry.status) == status.lower())
        query = apply_order_by(query, TaxEntry, order_by, default_field="date")
        return query.offset(skip).limit(limit).all()

    def count(self) -> int:
        return self.db.query(TaxEntry).count()

    def get_by_id(self, tax_entry_id: UUID) -> TaxEntry | None:
        return self.db.query(TaxEntry).filter(TaxEntry.id == tax_entry_id).first()

    def list_pending(self, limit: int = 20) -> list[TaxEntry]:
        """Newest entries whose status reads as pending or draft."""
        status = func.lower(TaxEntry.status)
        # Substring prefilter; filing_state makes the final whole-word call.
        candidates = (
            self.db.query(TaxEntry)
            .filter(or_(*[status.contains(w) for w in PENDING_TAX_WORDS | NEGATING_WORDS]))
            .order_by(TaxEntry.date.desc())
            .all()
        )
        return [e for e in candidates if e.filing_state == SettlementState.PENDING][:limit]

    def list_settled(self, tax_entry_ids: Iterable[UUID]) -> list[TaxEntry]:
        ids = list(tax_entry_ids)
        if not ids:
            return []
        entries = self.db.query(TaxEntry).filter(TaxEntry.id.in_(ids)).all()
        return [e for e in entries if e.filing_state == SettlementState.SETTLED]

    def create(self, data: TaxEntryCreate) -> TaxEntry:
        entry = TaxEntry(**data.model_dump(exclude_none=True))
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def update(self, tax_entry_id: UUID, data: TaxEntryUpdate) -> TaxEntry | None:
        entry = self.get_by_id(tax_entry_id)
        if not entry:
            return None

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(entry, key, value)

        self.db.commit()
        self.db.refresh(entry)
        return entry

    def set_status(self, tax_entry_id: UUID, status: str) -> TaxEntry | None:
        entry = self.get_by_id(tax_entry_id)
        if not entry:
            return None
        entry.status = status  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def delete(self, tax_entry_id: UUID) -> bool:
        entry = self.get_by_id(tax_entry_id)
        if not entry:
            return False

        self.db.delete(entry)
        self.db.commit()
        return True
