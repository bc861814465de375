"""Tests for the stock, GST and payment alert generators."""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from shopdesk.core.broadcast import BroadcastEventKind
from shopdesk.models.notification import Notification, NotificationKind
from shopdesk.models.order import Order, PaymentMode
from shopdesk.models.shared import SettlementState, utc_now
from shopdesk.models.tax_entry import TaxEntry
from shopdesk.repositories.order_repository import OrderRepository
from shopdesk.repositories.product_repository import ProductRepository
from shopdesk.repositories.tax_entry_repository import TaxEntryRepository
from shopdesk.schemas.order import OrderCreate
from shopdesk.schemas.product import ProductCreate
from shopdesk.schemas.tax_entry import TaxEntryCreate
from shopdesk.services.alert_generators import (
    AlertFeedService,
    GstAlertGenerator,
    PaymentAlertGenerator,
    StockAlertGenerator,
    days_since,
    stock_candidate,
)
from shopdesk.services.notification_service import NotificationService, UpsertAction


def make_product(db, sku="RICE-5KG", name="Basmati Rice 5kg", stock=10, min_stock=5):
    return ProductRepository(db).create(
        ProductCreate(
            sku=sku,
            name=name,
            category="Grocery",
            price=Decimal("450.00"),
            stock=stock,
            min_stock=min_stock,
        )
    )


def make_tax_entry(db, invoice_no="INV-001", age_days=8, status="Pending", total_tax="500"):
    return TaxEntryRepository(db).create(
        TaxEntryCreate(
            invoice_no=invoice_no,
            date=utc_now() - timedelta(days=age_days),
            customer="Sharma Traders",
            gstin="29ABCDE1234F1Z5",
            taxable_value=Decimal("2777.78"),
            total_tax=Decimal(total_tax),
            total_amount=Decimal("3277.78"),
            status=status,
        )
    )


def make_order(db, order_id="ORD-1001", age_days=4, total="6000", status="Pending"):
    return OrderRepository(db).create(
        OrderCreate(
            order_id=order_id,
            bill_number=f"BILL-{order_id}",
            date=utc_now() - timedelta(days=age_days),
            customer_name="Asha Rao",
            customer_phone="9876543210",
            total_amount=Decimal(total),
            payment_mode=PaymentMode.UPI,
            payment_status=status,
        )
    )


class TestStockCandidate:
    def test_out_of_stock(self):
        candidate = stock_candidate("p-1", "Rice", 0, 5)
        assert candidate.kind == NotificationKind.OUT_OF_STOCK
        assert candidate.title == "Out of Stock Alert"
        assert candidate.priority == "high"
        assert candidate.color == "red"
        assert candidate.message == "Rice is completely out of stock"

    def test_critical(self):
        candidate = stock_candidate("p-1", "Rice", 2, 5)
        assert candidate.kind == NotificationKind.LOW_STOCK
        assert candidate.title == "Critical Stock Alert"
        assert candidate.priority == "high"
        assert candidate.message == "Rice stock is critically low (2 units remaining)"

    def test_low_medium(self):
        candidate = stock_candidate("p-1", "Rice", 4, 5)
        assert candidate.title == "Low Stock Warning"
        assert candidate.priority == "medium"
        assert candidate.color == "orange"

    def test_low_priority_above_five(self):
        candidate = stock_candidate("p-1", "Rice", 8, 10)
        assert candidate.priority == "low"

    def test_sufficient_returns_none(self):
        assert stock_candidate("p-1", "Rice", 6, 5) is None

    def test_at_minimum_is_low(self):
        assert stock_candidate("p-1", "Rice", 5, 5) is not None


class TestStockAlertGenerator:
    def test_out_of_stock_then_replenished(self, db_session, events):
        generator = StockAlertGenerator(db_session)

        first = generator.check_stock("p-1", "Rice", 0, 5)

        assert first.status == "alert_created"
        assert first.stock_sufficient is False
        assert first.notification.kind == NotificationKind.OUT_OF_STOCK.value
        assert first.notification.priority == "high"

        second = generator.check_stock("p-1", "Rice", 50, 5)

        assert second.status == "alerts_resolved"
        assert second.stock_sufficient is True
        assert len(second.resolved) == 1
        resolved = second.resolved[0]
        assert resolved.is_resolved is True
        assert resolved.resolution_note == "Stock replenished (50 units)"
        assert NotificationService(db_session).list_active() == []
        assert [e.kind for e in events] == [BroadcastEventKind.CREATED, BroadcastEventKind.RESOLVED]

    def test_repeat_check_is_unchanged(self, db_session):
        generator = StockAlertGenerator(db_session)
        generator.check_stock("p-1", "Rice", 3, 5)

        again = generator.check_stock("p-1", "Rice", 3, 5)

        assert again.status == "alert_unchanged"
        assert again.action == UpsertAction.UNCHANGED

    def test_stock_change_updates_alert(self, db_session):
        generator = StockAlertGenerator(db_session)
        first = generator.check_stock("p-1", "Rice", 4, 5)

        second = generator.check_stock("p-1", "Rice", 3, 5)

        assert second.status == "alert_updated"
        assert second.notification.id == first.notification.id
        assert second.notification.current_stock == 3

    def test_switching_kind_resolves_previous(self, db_session):
        generator = StockAlertGenerator(db_session)
        out = generator.check_stock("p-1", "Rice", 0, 5).notification

        low = generator.check_stock("p-1", "Rice", 3, 5)

        assert low.status == "alert_created"
        assert low.notification.kind == NotificationKind.LOW_STOCK.value
        assert [n.id for n in low.resolved] == [out.id]
        assert low.resolved[0].resolution_note == "Superseded by low_stock alert"
        active = NotificationService(db_session).list_active()
        assert [n.id for n in active] == [low.notification.id]

    def test_sufficient_without_alerts(self, db_session):
        outcome = StockAlertGenerator(db_session).check_stock("p-1", "Rice", 20, 5)
        assert outcome.status == "no_alert_needed"
        assert outcome.resolved == []

    def test_scan_and_sweep(self, db_session):
        product = make_product(db_session, stock=2, min_stock=5)
        make_product(db_session, sku="DAL-1KG", name="Toor Dal 1kg", stock=30)

        report = StockAlertGenerator(db_session).run()

        assert report.created == 1
        alert = NotificationService(db_session).list_active()[0]
        assert alert.product_id == str(product.id)
        assert alert.title == "Critical Stock Alert"

        product.stock = 25
        db_session.commit()
        report = StockAlertGenerator(db_session).run()

        assert report.resolved == 1
        assert NotificationService(db_session).list_active() == []

    def test_scan_is_idempotent(self, db_session, events):
        make_product(db_session, stock=0)
        StockAlertGenerator(db_session).run()
        count = len(events)

        report = StockAlertGenerator(db_session).run()

        assert report.created == 0
        assert report.unchanged == 1
        assert len(events) == count


class TestGstAlertGenerator:
    def test_overdue_invoice_then_paid(self, db_session):
        entry = make_tax_entry(db_session, invoice_no="INV-001", age_days=8)

        report = GstAlertGenerator(db_session).run()

        assert report.created == 1
        alert = NotificationService(db_session).list_active()[0]
        assert alert.kind == NotificationKind.GST_ALERT.value
        assert alert.title == "GST Payment Overdue!"
        assert alert.priority == "high"
        assert alert.color == "red"
        assert alert.days_since == 8
        assert alert.invoice_number == "INV-001"
        assert alert.tax_id == str(entry.id)
        assert alert.message == (
            "GST payment overdue for 8 days for invoice INV-001. Customer: Sharma Traders"
        )

        TaxEntryRepository(db_session).set_status(entry.id, "Paid")
        report = GstAlertGenerator(db_session).run()

        assert report.resolved == 1
        db_session.refresh(alert)
        assert alert.is_resolved is True
        assert alert.resolution_note == "GST payment marked as Paid"

    def test_due_soon(self, db_session):
        entry = make_tax_entry(db_session, age_days=4)
        candidate = GstAlertGenerator(db_session).build_candidate(entry)
        assert candidate.title == "GST Payment Due Soon"
        assert candidate.priority == "medium"
        assert candidate.color == "orange"
        assert candidate.message.startswith("GST payment due in 3 days")

    def test_recent_is_pending(self, db_session):
        entry = make_tax_entry(db_session, age_days=1)
        candidate = GstAlertGenerator(db_session).build_candidate(entry)
        assert candidate.title == "GST Payment Pending"
        assert candidate.color == "blue"

    def test_high_value_forces_high_priority(self, db_session):
        entry = make_tax_entry(db_session, age_days=1, total_tax="15000")
        candidate = GstAlertGenerator(db_session).build_candidate(entry)
        assert candidate.is_high_value is True
        assert candidate.priority == "high"

    def test_filed_entries_are_ignored(self, db_session):
        make_tax_entry(db_session, status="Filed")
        report = GstAlertGenerator(db_session).run()
        assert report.created == 0

    def test_mixed_status_is_stable_across_refreshes(self, db_session, events):
        make_tax_entry(db_session, status="Pending (unpaid)")

        runs = [GstAlertGenerator(db_session).run() for _ in range(3)]

        assert [(r.created, r.resolved) for r in runs] == [(1, 0), (0, 0), (0, 0)]
        assert db_session.query(Notification).count() == 1
        assert len(events) == 1

    def test_rerun_updates_day_count(self, db_session):
        entry = make_tax_entry(db_session, age_days=8)
        GstAlertGenerator(db_session).run()
        entry.date = utc_now() - timedelta(days=9)
        db_session.commit()

        report = GstAlertGenerator(db_session).run()

        assert report.updated == 1
        assert NotificationService(db_session).list_active()[0].days_since == 9


class TestPaymentAlertGenerator:
    def test_high_value_overdue_then_paid(self, db_session):
        make_order(db_session, order_id="ORD-1001", age_days=4, total="6000")

        report = PaymentAlertGenerator(db_session).run()

        assert report.created == 1
        alert = NotificationService(db_session).list_active()[0]
        assert alert.kind == NotificationKind.PAYMENT_ALERT.value
        assert alert.title == "High-Value Payment Overdue"
        assert alert.priority == "high"
        assert alert.color == "orange"
        assert alert.icon == "DollarSign"
        assert alert.order_id == "ORD-1001"
        assert alert.bill_number == "BILL-ORD-1001"
        assert alert.payment_mode == "UPI"
        assert alert.message == (
            "Payment overdue for 4 days. Customer: Asha Rao. Amount: ₹6,000.00"
        )

        OrderRepository(db_session).set_payment_status("ORD-1001", "Paid")
        report = PaymentAlertGenerator(db_session).run()

        assert report.resolved == 1
        db_session.refresh(alert)
        assert alert.is_resolved is True
        assert alert.resolution_note == "Payment marked as Paid"

    def test_severely_overdue(self, db_session):
        order = make_order(db_session, age_days=10, total="800")
        candidate = PaymentAlertGenerator(db_session).build_candidate(order)
        assert candidate.title == "Payment Severely Overdue!"
        assert candidate.priority == "high"
        assert candidate.color == "red"
        assert candidate.icon == "CreditCard"

    def test_regular_overdue_is_medium(self, db_session):
        order = make_order(db_session, age_days=4, total="800")
        candidate = PaymentAlertGenerator(db_session).build_candidate(order)
        assert candidate.title == "Payment Overdue"
        assert candidate.priority == "medium"

    def test_recent_is_pending(self, db_session):
        order = make_order(db_session, age_days=1, total="800")
        candidate = PaymentAlertGenerator(db_session).build_candidate(order)
        assert candidate.title == "Payment Pending"
        assert candidate.color == "blue"

    def test_unpaid_status_keeps_alert(self, db_session):
        make_order(db_session, status="Pending")
        PaymentAlertGenerator(db_session).run()

        OrderRepository(db_session).set_payment_status("ORD-1001", "Unpaid")
        report = PaymentAlertGenerator(db_session).run()

        assert report.resolved == 0
        active = NotificationService(db_session).list_active()
        assert [a.order_id for a in active] == ["ORD-1001"]

    def test_not_paid_order_is_scanned(self, db_session):
        make_order(db_session, status="Not Paid")
        report = PaymentAlertGenerator(db_session).run()
        assert (report.created, report.resolved) == (1, 0)

    def test_paid_orders_are_ignored(self, db_session):
        make_order(db_session, status="Paid")
        report = PaymentAlertGenerator(db_session).run()
        assert report.created == 0


class TestAlertFeedService:
    def test_refresh_runs_every_generator(self, db_session):
        make_product(db_session, stock=0)
        make_tax_entry(db_session)
        make_order(db_session)

        reports = AlertFeedService(db_session).refresh()

        assert [r.name for r in reports] == ["stock", "gst", "payment"]
        assert all(r.created == 1 for r in reports)
        assert db_session.query(Notification).count() == 3

    def test_failing_generator_is_isolated(self, db_session):
        make_product(db_session, stock=0)
        make_order(db_session)

        with patch.object(GstAlertGenerator, "scan", side_effect=RuntimeError("boom")):
            reports = AlertFeedService(db_session).refresh()

        by_name = {r.name: r for r in reports}
        assert by_name["gst"].error == "boom"
        assert by_name["stock"].created == 1
        assert by_name["payment"].created == 1

    def test_refresh_twice_is_idempotent(self, db_session, events):
        make_product(db_session, stock=0)
        make_tax_entry(db_session)
        make_order(db_session)
        AlertFeedService(db_session).refresh()
        count = len(events)

        reports = AlertFeedService(db_session).refresh()

        assert sum(r.created + r.updated for r in reports) == 0
        assert len(events) == count


class TestSettlementState:
    @pytest.mark.parametrize(
        "status,expected",
        [
            ("Pending", SettlementState.PENDING),
            ("OVERDUE", SettlementState.PENDING),
            ("Unpaid", SettlementState.PENDING),
            ("not paid", SettlementState.PENDING),
            ("Paid", SettlementState.SETTLED),
            ("Completed", SettlementState.SETTLED),
            ("paid-in-full", SettlementState.SETTLED),
            ("Cancelled", None),
            ("", None),
        ],
    )
    def test_payment_state(self, status, expected):
        assert Order(payment_status=status).payment_state == expected

    @pytest.mark.parametrize(
        "status,expected",
        [
            ("Draft", SettlementState.PENDING),
            ("Pending (unpaid)", SettlementState.PENDING),
            ("Not done", SettlementState.PENDING),
            ("Filed", SettlementState.SETTLED),
            ("Done", SettlementState.SETTLED),
            ("Active", None),
        ],
    )
    def test_filing_state(self, status, expected):
        assert TaxEntry(status=status).filing_state == expected


class TestDaysSince:
    @pytest.mark.parametrize("days", [0, 1, 7, 30])
    def test_whole_days(self, days):
        now = utc_now()
        assert days_since(now - timedelta(days=days, minutes=5), now) == days

    def test_future_is_zero(self):
        now = utc_now()
        assert days_since(now + timedelta(days=2), now) == 0
