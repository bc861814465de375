from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from shopdesk.models.order import PaymentMode


class OrderCreate(BaseModel):
    order_id: str = Field(min_length=1, max_length=64)
    bill_number: str = Field(min_length=1, max_length=100)
    date: datetime | None = None
    customer_name: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=50)
    total_amount: Decimal = Field(ge=0)
    payment_mode: PaymentMode = PaymentMode.CASH
    payment_status: str = Field(default="Pending", min_length=1, max_length=20)
    notes: str | None = None


class OrderUpdate(BaseModel):
    customer_name: str | None = Field(default=None, min_length=1, max_length=255)
    customer_phone: str | None = Field(default=None, min_length=1, max_length=50)
    total_amount: Decimal | None = Field(default=None, ge=0)
    payment_mode: PaymentMode | None = None
    notes: str | None = None


class PaymentStatusUpdate(BaseModel):
    payment_status: str = Field(min_length=1, max_length=20)


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_id: str
    bill_number: str
    date: datetime
    customer_name: str
    customer_phone: str
    total_amount: Decimal
    payment_mode: str
    payment_status: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
