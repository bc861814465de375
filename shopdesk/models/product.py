from enum import Enum

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text, func

from shopdesk.core.database import Base
from shopdesk.models.shared import UUIDType, generate_uuid


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class Product(Base):
    __tablename__ = "products"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    sku = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=5)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def stock_status(self) -> StockStatus:
        if self.stock <= 0:
            return StockStatus.OUT_OF_STOCK
        if self.stock <= self.min_stock:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK
