"""GST tax entry schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TaxEntryCreate(BaseModel):
    invoice_no: str | None = Field(default=None, max_length=100)
    date: datetime | None = None
    customer: str | None = Field(default=None, max_length=255)
    gstin: str | None = Field(default=None, max_length=20)
    is_inter_state: bool = False
    taxable_value: Decimal = Field(default=Decimal("0"), ge=0)
    total_tax: Decimal = Field(default=Decimal("0"), ge=0)
    total_amount: Decimal = Field(default=Decimal("0"), ge=0)
    status: str = Field(default="Draft", min_length=1, max_length=20)
    notes: str = ""


class TaxEntryUpdate(BaseModel):
    invoice_no: str | None = Field(default=None, max_length=100)
    customer: str | None = Field(default=None, max_length=255)
    gstin: str | None = Field(default=None, max_length=20)
    is_inter_state: bool | None = None
    taxable_value: Decimal | None = Field(default=None, ge=0)
    total_tax: Decimal | None = Field(default=None, ge=0)
    total_amount: Decimal | None = Field(default=None, ge=0)
    notes: str | None = None


class TaxStatusUpdate(BaseModel):
    status: str = Field(min_length=1, max_length=20)


class TaxEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoice_no: str | None = None
    date: datetime
    customer: str | None = None
    gstin: str | None = None
    is_inter_state: bool
    taxable_value: Decimal
    total_tax: Decimal
    total_amount: Decimal
    status: str
    notes: str
    created_at: datetime
    updated_at: datetime
