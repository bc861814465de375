from shopdesk.repositories.notification_repository import NotificationRepository
from shopdesk.repositories.order_repository import OrderRepository
from shopdesk.repositories.product_repository import ProductRepository
from shopdesk.repositories.stock_movement_repository import StockMovementRepository
from shopdesk.repositories.tax_entry_repository import TaxEntryRepository

__all__ = [
    "NotificationRepository",
    "OrderRepository",
    "ProductRepository",
    "StockMovementRepository",
    "TaxEntryRepository",
]
