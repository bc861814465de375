from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from shopdesk.core.database import Base
from shopdesk.models.shared import UUIDType, generate_uuid


class MovementType(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class StockMovement(Base):
    """Audit log entry for a single stock adjustment."""

    __tablename__ = "stock_movements"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    product_id = Column(
        UUIDType, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    movement_type = Column(String(10), nullable=False)
    quantity = Column(Integer, nullable=False)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    reason = Column(String(255), nullable=True)
    performed_by = Column(String(100), nullable=False, default="system")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
