from shopdesk.schemas.notification import (
    NotificationCandidate,
    NotificationResponse,
    NotificationSubmit,
    UpsertResponse,
)
from shopdesk.schemas.order import OrderCreate, OrderResponse, OrderUpdate
from shopdesk.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from shopdesk.schemas.tax_entry import TaxEntryCreate, TaxEntryResponse, TaxEntryUpdate

__all__ = [
    "NotificationCandidate",
    "NotificationResponse",
    "NotificationSubmit",
    "OrderCreate",
    "OrderResponse",
    "OrderUpdate",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
    "TaxEntryCreate",
    "TaxEntryResponse",
    "TaxEntryUpdate",
    "UpsertResponse",
]
