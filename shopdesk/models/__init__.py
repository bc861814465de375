from shopdesk.models.notification import (
    Notification,
    NotificationColor,
    NotificationKind,
    NotificationPriority,
)
from shopdesk.models.order import Order, PaymentMode
from shopdesk.models.product import Product, StockStatus
from shopdesk.models.stock_movement import MovementType, StockMovement
from shopdesk.models.tax_entry import TaxEntry

__all__ = [
    "MovementType",
    "Notification",
    "NotificationColor",
    "NotificationKind",
    "NotificationPriority",
    "Order",
    "PaymentMode",
    "Product",
    "StockMovement",
    "StockStatus",
    "TaxEntry",
]
