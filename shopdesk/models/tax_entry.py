"""GST tax entry model."""

from sqlalchemy import Boolean, Column, DateTime, Numeric, String, Text, func

from shopdesk.core.database import Base
from shopdesk.models.shared import (
    SettlementState,
    UUIDType,
    classify_status,
    generate_uuid,
    utc_now,
)

PENDING_TAX_WORDS = frozenset({"pending", "draft", "due", "unpaid"})
SETTLED_TAX_WORDS = frozenset({"paid", "completed", "done", "filed"})


class TaxEntry(Base):
    __tablename__ = "tax_entries"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    invoice_no = Column(String(100), nullable=True, index=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    customer = Column(String(255), nullable=True)
    gstin = Column(String(20), nullable=True)
    is_inter_state = Column(Boolean, nullable=False, default=False)
    taxable_value = Column(Numeric(12, 2), nullable=False, default=0)
    total_tax = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Draft", index=True)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def filing_state(self) -> SettlementState | None:
        return classify_status(
            self.status,  # type: ignore[arg-type]
            PENDING_TAX_WORDS,
            SETTLED_TAX_WORDS,
        )
