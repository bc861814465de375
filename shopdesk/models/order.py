from enum import Enum

from sqlalchemy import Column, DateTime, Numeric, String, Text, func

from shopdesk.core.database import Base
from shopdesk.models.shared import (
    SettlementState,
    UUIDType,
    classify_status,
    generate_uuid,
    utc_now,
)

PENDING_PAYMENT_WORDS = frozenset({"pending", "due", "overdue", "unpaid", "partial"})
SETTLED_PAYMENT_WORDS = frozenset({"paid", "completed", "done", "settled"})


class PaymentMode(str, Enum):
    CASH = "Cash"
    CARD = "Card"
    UPI = "UPI"
    NET_BANKING = "Net Banking"


class Order(Base):
    """A customer bill. ``payment_status`` is free-form text from the till."""

    __tablename__ = "orders"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    order_id = Column(String(64), unique=True, index=True, nullable=False)
    bill_number = Column(String(100), unique=True, index=True, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_mode = Column(String(20), nullable=False, default=PaymentMode.CASH.value)
    payment_status = Column(String(20), nullable=False, default="Pending", index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def payment_state(self) -> SettlementState | None:
        return classify_status(
            self.payment_status,  # type: ignore[arg-type]
            PENDING_PAYMENT_WORDS,
            SETTLED_PAYMENT_WORDS,
        )
