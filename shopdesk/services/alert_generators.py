"""Alert generators that turn domain data into notifications.

Each generator scans a bounded window of source records, upserts one
candidate notification per record and then resolves notifications whose
source record has reached a settled state. Both passes are idempotent:
re-running them over unchanged data writes nothing and broadcasts nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from shopdesk.core.broadcast import BroadcastChannel
from shopdesk.core.config import settings
from shopdesk.models.notification import (
    STOCK_KINDS,
    Notification,
    NotificationColor,
    NotificationKind,
    NotificationPriority,
)
from shopdesk.models.order import Order
from shopdesk.models.shared import as_utc, utc_now
from shopdesk.models.tax_entry import TaxEntry
from shopdesk.repositories.order_repository import OrderRepository
from shopdesk.repositories.product_repository import ProductRepository
from shopdesk.repositories.tax_entry_repository import TaxEntryRepository
from shopdesk.schemas.notification import NotificationCandidate
from shopdesk.services.notification_service import (
    NotificationService,
    UpsertAction,
    UpsertResult,
)

logger = logging.getLogger(__name__)


@dataclass
class GeneratorReport:
    name: str
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    resolved: int = 0
    error: str | None = None

    def record(self, result: UpsertResult) -> None:
        if result.action == UpsertAction.CREATED:
            self.created += 1
        elif result.action == UpsertAction.UPDATED:
            self.updated += 1
        else:
            self.unchanged += 1


@dataclass
class StockCheckResult:
    status: str
    action: UpsertAction | None = None
    notification: Notification | None = None
    resolved: list[Notification] = field(default_factory=list)

    @property
    def stock_sufficient(self) -> bool:
        return self.action is None


def days_since(moment: datetime, now: datetime | None = None) -> int:
    now = now or utc_now()
    return max(0, (now - as_utc(moment)).days)


def _parse_uuids(values: set[str]) -> list[UUID]:
    parsed = []
    for value in values:
        try:
            parsed.append(UUID(value))
        except ValueError:
            continue
    return parsed


class AlertGenerator:
    """Base class: subclasses implement ``scan`` and ``resolve_settled``."""

    name = "base"
    source = "system"

    def __init__(self, db: Session, service: NotificationService | None = None):
        self.db = db
        self.service = service or NotificationService(db)

    def scan(self, report: GeneratorReport) -> None:
        raise NotImplementedError

    def resolve_settled(self, report: GeneratorReport) -> None:
        raise NotImplementedError

    def run(self, report: GeneratorReport | None = None) -> GeneratorReport:
        report = report or GeneratorReport(self.name)
        self.scan(report)
        self.resolve_settled(report)
        logger.debug(
            "%s: %d created, %d updated, %d unchanged, %d resolved",
            self.name,
            report.created,
            report.updated,
            report.unchanged,
            report.resolved,
        )
        return report


def stock_candidate(
    product_id: str, product_name: str, current_stock: int, min_stock: int
) -> NotificationCandidate | None:
    """Build the stock alert for a product level, or None if stock is sufficient."""
    if current_stock <= 0:
        return NotificationCandidate(
            kind=NotificationKind.OUT_OF_STOCK,
            title="Out of Stock Alert",
            message=f"{product_name} is completely out of stock",
            product_id=product_id,
            product_name=product_name,
            current_stock=current_stock,
            min_stock=min_stock,
            priority=NotificationPriority.HIGH,
            color=NotificationColor.RED,
            icon="Package",
        )
    if current_stock > min_stock:
        return None

    critical = current_stock <= 2
    if critical:
        priority = NotificationPriority.HIGH
    elif current_stock <= 5:
        priority = NotificationPriority.MEDIUM
    else:
        priority = NotificationPriority.LOW
    return NotificationCandidate(
        kind=NotificationKind.LOW_STOCK,
        title="Critical Stock Alert" if critical else "Low Stock Warning",
        message=(
            f"{product_name} stock is {'critically ' if critical else ''}low "
            f"({current_stock} units remaining)"
        ),
        product_id=product_id,
        product_name=product_name,
        current_stock=current_stock,
        min_stock=min_stock,
        priority=priority,
        color=NotificationColor.RED if critical else NotificationColor.ORANGE,
        icon="Package",
    )


class StockAlertGenerator(AlertGenerator):
    name = "stock"
    source = "stock_service"

    def __init__(self, db: Session, service: NotificationService | None = None):
        super().__init__(db, service)
        self.products = ProductRepository(db)

    def check_stock(
        self,
        product_id: str,
        product_name: str,
        current_stock: int,
        min_stock: int,
    ) -> StockCheckResult:
        """Raise, refresh or resolve the stock alert for one product level."""
        candidate = stock_candidate(product_id, product_name, current_stock, min_stock)
        if candidate is None:
            resolved = self.resolve_product_alerts(
                product_id, f"Stock replenished ({current_stock} units)"
            )
            return StockCheckResult(
                status="alerts_resolved" if resolved else "no_alert_needed",
                resolved=resolved,
            )

        result = self.service.upsert(candidate, source=self.source)
        other_kind = (
            NotificationKind.LOW_STOCK
            if candidate.kind == NotificationKind.OUT_OF_STOCK
            else NotificationKind.OUT_OF_STOCK
        )
        superseded = self.service.resolve_by_identity(
            other_kind,
            {"product_id": product_id},
            f"Superseded by {candidate.kind.value} alert",
            source=self.source,
        )
        status = {
            UpsertAction.CREATED: "alert_created",
            UpsertAction.UPDATED: "alert_updated",
        }.get(result.action, "alert_unchanged")
        return StockCheckResult(
            status=status,
            action=result.action,
            notification=result.notification,
            resolved=superseded,
        )

    def resolve_product_alerts(self, product_id: str, note: str) -> list[Notification]:
        resolved: list[Notification] = []
        for kind in STOCK_KINDS:
            resolved.extend(
                self.service.resolve_by_identity(
                    kind, {"product_id": product_id}, note, source=self.source
                )
            )
        return resolved

    def scan(self, report: GeneratorReport) -> None:
        for product in self.products.list_below_minimum(limit=settings.ALERT_SCAN_LIMIT):
            outcome = self.check_stock(
                str(product.id), str(product.name), int(product.stock), int(product.min_stock)
            )
            if outcome.action is not None and outcome.notification is not None:
                report.record(UpsertResult(outcome.action, outcome.notification))
            report.resolved += len(outcome.resolved)

    def resolve_settled(self, report: GeneratorReport) -> None:
        alerted = self.service.repo.active_context_values(STOCK_KINDS, "product_id")
        for product in self.products.get_by_ids(_parse_uuids(alerted)):
            if product.stock > product.min_stock:
                resolved = self.resolve_product_alerts(
                    str(product.id), f"Stock replenished ({product.stock} units)"
                )
                report.resolved += len(resolved)


class GstAlertGenerator(AlertGenerator):
    name = "gst"
    source = "gst_service"

    def __init__(self, db: Session, service: NotificationService | None = None):
        super().__init__(db, service)
        self.tax_entries = TaxEntryRepository(db)

    def build_candidate(
        self, entry: TaxEntry, now: datetime | None = None
    ) -> NotificationCandidate:
        days = days_since(entry.date, now)  # type: ignore[arg-type]
        amount = Decimal(entry.total_tax or 0) or Decimal(entry.total_amount or 0)
        is_high_value = amount >= Decimal(str(settings.GST_HIGH_VALUE_THRESHOLD))

        if days >= settings.GST_DUE_DAYS:
            title = "GST Payment Overdue!"
            priority = NotificationPriority.HIGH
            color = NotificationColor.RED
            prefix = f"GST payment overdue for {days} days"
        elif days >= settings.GST_DUE_SOON_DAYS:
            title = "GST Payment Due Soon"
            priority = NotificationPriority.MEDIUM
            color = NotificationColor.ORANGE
            prefix = f"GST payment due in {settings.GST_DUE_DAYS - days} days"
        else:
            title = "GST Payment Pending"
            priority = NotificationPriority.MEDIUM
            color = NotificationColor.BLUE
            prefix = f"GST payment pending ({days} days)"

        return NotificationCandidate(
            kind=NotificationKind.GST_ALERT,
            title=title,
            message=(
                f"{prefix} for invoice {entry.invoice_no or entry.id}. "
                f"Customer: {entry.customer or 'Unknown'}"
            ),
            tax_id=str(entry.id),
            invoice_number=entry.invoice_no or f"TAX-{entry.id}",
            customer_name=entry.customer or "Unknown Customer",
            gstin=entry.gstin or "N/A",
            amount=amount,
            days_since=days,
            is_high_value=is_high_value,
            priority=NotificationPriority.HIGH if is_high_value else priority,
            color=color,
            icon="FileText",
        )

    def scan(self, report: GeneratorReport) -> None:
        now = utc_now()
        for entry in self.tax_entries.list_pending(limit=settings.ALERT_SCAN_LIMIT):
            report.record(self.service.upsert(self.build_candidate(entry, now), source=self.source))

    def resolve_settled(self, report: GeneratorReport) -> None:
        alerted = self.service.repo.active_context_values([NotificationKind.GST_ALERT], "tax_id")
        for entry in self.tax_entries.list_settled(_parse_uuids(alerted)):
            resolved = self.service.resolve_by_identity(
                NotificationKind.GST_ALERT,
                {"tax_id": str(entry.id)},
                f"GST payment marked as {entry.status}",
                source=self.source,
            )
            report.resolved += len(resolved)


class PaymentAlertGenerator(AlertGenerator):
    name = "payment"
    source = "payment_service"

    def __init__(self, db: Session, service: NotificationService | None = None):
        super().__init__(db, service)
        self.orders = OrderRepository(db)

    def build_candidate(self, order: Order, now: datetime | None = None) -> NotificationCandidate:
        days = days_since(order.date, now)  # type: ignore[arg-type]
        amount = Decimal(order.total_amount or 0)
        is_high_value = amount >= Decimal(str(settings.PAYMENT_HIGH_VALUE_THRESHOLD))
        label = "High-Value Payment" if is_high_value else "Payment"

        if days >= settings.PAYMENT_SEVERELY_OVERDUE_DAYS:
            title = f"{label} Severely Overdue!"
            priority = NotificationPriority.HIGH
            color = NotificationColor.RED
            prefix = f"Payment severely overdue for {days} days"
        elif days >= settings.PAYMENT_OVERDUE_DAYS:
            title = f"{label} Overdue"
            priority = NotificationPriority.HIGH if is_high_value else NotificationPriority.MEDIUM
            color = NotificationColor.ORANGE
            prefix = f"Payment overdue for {days} days"
        else:
            title = f"{label} Pending"
            priority = NotificationPriority.MEDIUM
            color = NotificationColor.BLUE
            prefix = f"Payment pending for {days} days"

        return NotificationCandidate(
            kind=NotificationKind.PAYMENT_ALERT,
            title=title,
            message=(
                f"{prefix}. Customer: {order.customer_name or 'Unknown'}. "
                f"Amount: {settings.CURRENCY_SYMBOL}{amount:,.2f}"
            ),
            order_id=str(order.order_id),
            bill_number=str(order.bill_number),
            invoice_number=str(order.bill_number),
            customer_name=order.customer_name or "Unknown Customer",
            customer_phone=order.customer_phone or "N/A",
            amount=amount,
            payment_mode=order.payment_mode or "Unknown",
            days_since=days,
            is_high_value=is_high_value,
            priority=priority,
            color=color,
            icon="DollarSign" if is_high_value else "CreditCard",
        )

    def scan(self, report: GeneratorReport) -> None:
        now = utc_now()
        for order in self.orders.list_pending_payment(limit=settings.ALERT_SCAN_LIMIT):
            report.record(self.service.upsert(self.build_candidate(order, now), source=self.source))

    def resolve_settled(self, report: GeneratorReport) -> None:
        alerted = self.service.repo.active_context_values(
            [NotificationKind.PAYMENT_ALERT], "order_id"
        )
        for order in self.orders.list_settled(alerted):
            resolved = self.service.resolve_by_identity(
                NotificationKind.PAYMENT_ALERT,
                {"order_id": str(order.order_id)},
                f"Payment marked as {order.payment_status}",
                source=self.source,
            )
            report.resolved += len(resolved)


class AlertFeedService:
    """Runs every generator, isolating failures so one source cannot sink the feed."""

    def __init__(self, db: Session, channel: BroadcastChannel | None = None):
        self.db = db
        service = NotificationService(db, channel)
        self.generators: list[AlertGenerator] = [
            StockAlertGenerator(db, service),
            GstAlertGenerator(db, service),
            PaymentAlertGenerator(db, service),
        ]

    def refresh(self) -> list[GeneratorReport]:
        reports = []
        for generator in self.generators:
            report = GeneratorReport(generator.name)
            try:
                generator.run(report)
            except Exception as exc:
                self.db.rollback()
                logger.exception("Alert generator %s failed", generator.name)
                report.error = str(exc) or exc.__class__.__name__
            reports.append(report)
        return reports
