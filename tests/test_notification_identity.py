"""Tests for notification identity hashing."""

import pytest

from shopdesk.models.notification import NotificationKind
from shopdesk.services.notification_identity import (
    IDENTITY_SCHEMAS,
    IdentityFieldsMissingError,
    derive_identity_hash,
    identity_fields,
    identity_string,
    validate_identity,
)


class TestDeriveIdentityHash:
    def test_hash_is_sha256_hex(self):
        value = derive_identity_hash(NotificationKind.LOW_STOCK, {"product_id": "p-1"})
        assert len(value) == 64
        assert all(c in "0123456789abcdef" for c in value)

    def test_extra_fields_do_not_change_hash(self):
        base = derive_identity_hash(NotificationKind.LOW_STOCK, {"product_id": "p-1"})
        noisy = derive_identity_hash(
            NotificationKind.LOW_STOCK,
            {"product_id": "p-1", "current_stock": 3, "title": "Low Stock Warning"},
        )
        assert base == noisy

    def test_field_order_does_not_change_hash(self):
        fields = {
            "product_id": "p-1",
            "order_id": "o-1",
            "tax_id": "t-1",
            "invoice_number": "INV-1",
            "customer_name": "Asha",
            "bill_number": "B-1",
            "gstin": "29ABCDE1234F1Z5",
        }
        reversed_fields = dict(reversed(list(fields.items())))
        assert derive_identity_hash(NotificationKind.SYSTEM_ALERT, fields) == derive_identity_hash(
            NotificationKind.SYSTEM_ALERT, reversed_fields
        )

    def test_kind_is_part_of_identity(self):
        fields = {"product_id": "p-1"}
        assert derive_identity_hash(NotificationKind.LOW_STOCK, fields) != derive_identity_hash(
            NotificationKind.OUT_OF_STOCK, fields
        )

    def test_different_keys_differ(self):
        assert derive_identity_hash(
            NotificationKind.PAYMENT_ALERT, {"order_id": "ORD-1"}
        ) != derive_identity_hash(NotificationKind.PAYMENT_ALERT, {"order_id": "ORD-2"})

    def test_normalizes_case_and_whitespace(self):
        assert derive_identity_hash(
            NotificationKind.GST_ALERT, {"tax_id": "  ABC "}
        ) == derive_identity_hash(NotificationKind.GST_ALERT, {"tax_id": "abc"})

    def test_missing_and_none_fields_hash_alike(self):
        assert derive_identity_hash(
            NotificationKind.SYSTEM_ALERT, {"product_id": None}
        ) == derive_identity_hash(NotificationKind.SYSTEM_ALERT, {})

    def test_accepts_kind_value_string(self):
        assert derive_identity_hash("low_stock", {"product_id": "p-1"}) == derive_identity_hash(
            NotificationKind.LOW_STOCK, {"product_id": "p-1"}
        )


class TestIdentityString:
    def test_format(self):
        assert (
            identity_string(NotificationKind.PAYMENT_ALERT, {"order_id": "ORD-9"})
            == "payment_alert|order_id=ord-9"
        )

    def test_every_kind_has_a_schema(self):
        for kind in NotificationKind:
            assert identity_fields(kind) == IDENTITY_SCHEMAS[kind]


class TestValidateIdentity:
    def test_passes_with_required_field(self):
        validate_identity(NotificationKind.GST_ALERT, {"tax_id": "t-1"})

    def test_missing_required_field_raises(self):
        with pytest.raises(IdentityFieldsMissingError) as exc_info:
            validate_identity(NotificationKind.LOW_STOCK, {"product_name": "Rice"})
        assert exc_info.value.missing == ["product_id"]
        assert "product_id" in str(exc_info.value)

    def test_blank_required_field_raises(self):
        with pytest.raises(IdentityFieldsMissingError):
            validate_identity(NotificationKind.PAYMENT_ALERT, {"order_id": "   "})

    def test_system_alert_needs_nothing(self):
        validate_identity(NotificationKind.SYSTEM_ALERT, {})
