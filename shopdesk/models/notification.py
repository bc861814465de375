"""Notification model for the alert feed."""

from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)

from shopdesk.core.database import Base
from shopdesk.models.shared import UUIDType, generate_uuid, utc_now


class NotificationKind(str, Enum):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    PAYMENT_ALERT = "payment_alert"
    GST_ALERT = "gst_alert"
    SYSTEM_ALERT = "system_alert"


STOCK_KINDS = (NotificationKind.LOW_STOCK, NotificationKind.OUT_OF_STOCK)


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationColor(str, Enum):
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    GRAY = "gray"


class Notification(Base):
    """Notification model - one row per alert occurrence.

    At most one unresolved row may exist per ``identity_hash``; resolved rows
    with the same hash are kept as history. Rows without a hash are exempt.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        Index(
            "uq_notifications_unresolved_identity_hash",
            "identity_hash",
            unique=True,
            sqlite_where=text("is_resolved = 0"),
            postgresql_where=text("NOT is_resolved"),
        ),
        Index("ix_notifications_is_resolved_is_read", "is_resolved", "is_read"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    kind = Column(String(30), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(String(1000), nullable=False)

    # Context fields, populated depending on kind
    product_id = Column(String(64), nullable=True, index=True)
    product_name = Column(String(255), nullable=True)
    current_stock = Column(Integer, nullable=True)
    min_stock = Column(Integer, nullable=True)
    order_id = Column(String(64), nullable=True)
    tax_id = Column(String(64), nullable=True)
    invoice_number = Column(String(100), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    gstin = Column(String(20), nullable=True)
    bill_number = Column(String(100), nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    payment_mode = Column(String(50), nullable=True)
    days_since = Column(Integer, nullable=True)

    priority = Column(String(10), nullable=False, default=NotificationPriority.MEDIUM.value)
    color = Column(String(10), nullable=False, default=NotificationColor.GRAY.value)
    icon = Column(String(50), nullable=False, default="Bell")
    is_high_value = Column(Boolean, nullable=False, default=False)

    is_read = Column(Boolean, nullable=False, default=False)
    is_resolved = Column(Boolean, nullable=False, default=False)
    resolution_note = Column(Text, nullable=True)

    identity_hash = Column(String(64), nullable=True)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
