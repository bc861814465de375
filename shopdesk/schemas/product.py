from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from shopdesk.models.product import StockStatus


class ProductCreate(BaseModel):
    sku: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=5, ge=1)
    description: str = Field(default="", max_length=1000)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    price: Decimal | None = Field(default=None, ge=0)
    min_stock: int | None = Field(default=None, ge=1)
    description: str | None = Field(default=None, max_length=1000)


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sku: str
    name: str
    category: str
    price: Decimal
    stock: int
    min_stock: int
    stock_status: StockStatus
    description: str
    created_at: datetime
    updated_at: datetime


class StockAdjustRequest(BaseModel):
    quantity: int = Field(gt=0)
    movement_type: Literal["add", "remove"]
    reason: str | None = Field(default=None, max_length=255)
    performed_by: str = Field(default="system", max_length=100)


class StockMovementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    movement_type: str
    quantity: int
    previous_stock: int
    new_stock: int
    reason: str | None = None
    performed_by: str
    created_at: datetime


class StockAdjustResponse(BaseModel):
    product: ProductResponse
    movement: StockMovementResponse
    alert_status: str
