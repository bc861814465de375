"""Pydantic schemas for Notification."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shopdesk.models.notification import NotificationColor, NotificationKind, NotificationPriority


class NotificationCandidate(BaseModel):
    """Notification data proposed by a generator or an external caller.

    Only fields explicitly set are compared against, and applied to, an
    existing notification with the same identity.
    """

    kind: NotificationKind
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1, max_length=1000)

    product_id: str | None = Field(default=None, max_length=64)
    product_name: str | None = Field(default=None, max_length=255)
    current_stock: int | None = None
    min_stock: int | None = None
    order_id: str | None = Field(default=None, max_length=64)
    tax_id: str | None = Field(default=None, max_length=64)
    invoice_number: str | None = Field(default=None, max_length=100)
    customer_name: str | None = Field(default=None, max_length=255)
    customer_phone: str | None = Field(default=None, max_length=50)
    gstin: str | None = Field(default=None, max_length=20)
    bill_number: str | None = Field(default=None, max_length=100)
    amount: Decimal | None = None
    payment_mode: str | None = Field(default=None, max_length=50)
    days_since: int | None = None

    priority: NotificationPriority = NotificationPriority.MEDIUM
    color: NotificationColor = NotificationColor.GRAY
    icon: str = Field(default="Bell", max_length=50)
    is_high_value: bool = False
    is_read: bool = False
    is_resolved: bool = False

    identity_hash: str | None = Field(default=None, min_length=1, max_length=64)

    @field_validator("amount")
    @classmethod
    def round_amount(cls, v: Decimal | None) -> Decimal | None:
        # Same scale as the Numeric(12, 2) column, so stored and submitted amounts compare equal.
        if v is None:
            return v
        return v.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class NotificationSubmit(BaseModel):
    notification: NotificationCandidate
    source: str = Field(default="api", max_length=50)
    reset_timestamp: bool = False


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    kind: NotificationKind
    title: str
    message: str
    product_id: str | None = None
    product_name: str | None = None
    current_stock: int | None = None
    min_stock: int | None = None
    order_id: str | None = None
    tax_id: str | None = None
    invoice_number: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    gstin: str | None = None
    bill_number: str | None = None
    amount: Decimal | None = None
    payment_mode: str | None = None
    days_since: int | None = None
    priority: NotificationPriority
    color: NotificationColor
    icon: str
    is_high_value: bool
    is_read: bool
    is_resolved: bool
    resolution_note: str | None = None
    identity_hash: str | None = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime
    last_updated: datetime
    resolved_at: datetime | None = None


class UpsertResponse(BaseModel):
    action: str
    notification: NotificationResponse
    message: str


class ResolveRequest(BaseModel):
    resolution_note: str | None = Field(default=None, max_length=1000)


class NotificationCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated_count: int


class ClearResolvedResponse(BaseModel):
    deleted_count: int


class NotificationStatsResponse(BaseModel):
    unread_count: int
    low_stock_count: int
    gst_alert_count: int
    payment_alert_count: int
    total_notifications: int
    breakdown: dict[str, int]


class StockCheckRequest(BaseModel):
    product_id: str = Field(min_length=1, max_length=64)
    product_name: str = Field(min_length=1, max_length=255)
    current_stock: int
    min_stock: int = Field(ge=0)


class StockCheckResponse(BaseModel):
    status: str
    action: str | None = None
    notification: NotificationResponse | None = None
    resolved_count: int = 0
    stock_sufficient: bool
    message: str


class GeneratorReportResponse(BaseModel):
    name: str
    created: int
    updated: int
    unchanged: int
    resolved: int
    error: str | None = None


class AlertRefreshResponse(BaseModel):
    reports: list[GeneratorReportResponse]
