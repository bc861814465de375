"""Identity keys for notifications.

Each notification kind declares up front which context fields make two
alerts "the same alert". The identity hash is a SHA-256 digest over the
kind and those fields in their declared order, so it does not depend on how
a caller orders or decorates its payload.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import Any

from shopdesk.models.notification import NotificationKind

IDENTITY_SEPARATOR = "|"

IDENTITY_SCHEMAS: dict[NotificationKind, tuple[str, ...]] = {
    NotificationKind.LOW_STOCK: ("product_id",),
    NotificationKind.OUT_OF_STOCK: ("product_id",),
    NotificationKind.GST_ALERT: ("tax_id",),
    NotificationKind.PAYMENT_ALERT: ("order_id",),
    NotificationKind.SYSTEM_ALERT: (
        "product_id",
        "order_id",
        "tax_id",
        "invoice_number",
        "customer_name",
        "bill_number",
        "gstin",
    ),
}

# Fields that must be non-empty before an alert of this kind is accepted.
REQUIRED_IDENTITY_FIELDS: dict[NotificationKind, tuple[str, ...]] = {
    NotificationKind.LOW_STOCK: ("product_id",),
    NotificationKind.OUT_OF_STOCK: ("product_id",),
    NotificationKind.GST_ALERT: ("tax_id",),
    NotificationKind.PAYMENT_ALERT: ("order_id",),
    NotificationKind.SYSTEM_ALERT: (),
}


class IdentityFieldsMissingError(ValueError):
    """Raised when a notification lacks a field its kind is keyed on."""

    def __init__(self, kind: NotificationKind, missing: list[str]):
        self.kind = kind
        self.missing = missing
        super().__init__(
            f"{kind.value} notifications require: {', '.join(missing)}"
        )


def _normalize(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def identity_fields(kind: NotificationKind | str) -> tuple[str, ...]:
    return IDENTITY_SCHEMAS[NotificationKind(kind)]


def validate_identity(kind: NotificationKind | str, fields: Mapping[str, Any]) -> None:
    kind = NotificationKind(kind)
    missing = [
        name for name in REQUIRED_IDENTITY_FIELDS[kind] if not _normalize(fields.get(name))
    ]
    if missing:
        raise IdentityFieldsMissingError(kind, missing)


def identity_string(kind: NotificationKind | str, fields: Mapping[str, Any]) -> str:
    kind = NotificationKind(kind)
    parts = [kind.value]
    parts.extend(f"{name}={_normalize(fields.get(name))}" for name in IDENTITY_SCHEMAS[kind])
    return IDENTITY_SEPARATOR.join(parts).lower()


def derive_identity_hash(kind: NotificationKind | str, fields: Mapping[str, Any]) -> str:
    """Return the 64-character hex identity hash for a notification.

    Fields outside the kind's identity schema are ignored; absent fields
    count as empty strings.
    """
    return hashlib.sha256(identity_string(kind, fields).encode("utf-8")).hexdigest()
