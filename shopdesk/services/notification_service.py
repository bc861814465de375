"""Service for deduplicated notification upserts and their lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopdesk.core.broadcast import BroadcastChannel, BroadcastEventKind, notification_channel
from shopdesk.core.config import settings
from shopdesk.models.notification import Notification, NotificationKind
from shopdesk.models.shared import utc_now
from shopdesk.repositories.notification_repository import NotificationRepository
from shopdesk.schemas.notification import NotificationCandidate, NotificationResponse
from shopdesk.services.notification_identity import derive_identity_hash, validate_identity

logger = logging.getLogger(__name__)

# Fields whose change turns a repeated alert into an update.
TRACKED_FIELDS = (
    "title",
    "message",
    "priority",
    "color",
    "icon",
    "current_stock",
    "min_stock",
    "amount",
    "days_since",
    "payment_mode",
    "customer_phone",
    "customer_name",
    "invoice_number",
    "bill_number",
    "product_name",
    "gstin",
    "is_high_value",
    "is_read",
    "is_resolved",
)

MANUAL_RESOLUTION_NOTE = "Manually resolved"
STALE_RESOLUTION_NOTE = "Superseded after retention window"


class ResolvedCandidateError(ValueError):
    """Raised when an already-resolved candidate has no unresolved notification to resolve."""

    def __init__(self, identity_hash: str):
        self.identity_hash = identity_hash
        super().__init__("No unresolved notification matches this resolved candidate")


class UpsertAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    RECOVERED = "recovered"


@dataclass
class UpsertResult:
    action: UpsertAction
    notification: Notification

    @property
    def changed(self) -> bool:
        return self.action in (UpsertAction.CREATED, UpsertAction.UPDATED)


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def serialize_notification(notification: Notification) -> dict[str, Any]:
    return NotificationResponse.model_validate(notification).model_dump(mode="json")


class NotificationService:
    """Creates, updates and resolves notifications, broadcasting each change."""

    def __init__(self, db: Session, channel: BroadcastChannel | None = None):
        self.db = db
        self.repo = NotificationRepository(db)
        self.channel = channel if channel is not None else notification_channel

    @property
    def retention_window(self) -> timedelta:
        return timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)

    def upsert(
        self,
        candidate: NotificationCandidate,
        source: str = "system",
        reset_timestamp: bool = False,
    ) -> UpsertResult:
        """Insert the candidate or fold it into the matching unresolved notification.

        Matching is by identity hash among unresolved notifications created
        within the retention window. Only fields set on the candidate are
        compared and applied; ``created_at`` is kept unless
        ``reset_timestamp`` is true.

        A candidate with ``is_resolved`` set resolves the matching
        notification and is broadcast as a resolution.

        Raises:
            IdentityFieldsMissingError: The candidate has no identity hash and
                lacks a field its kind is keyed on.
            ResolvedCandidateError: The candidate is already resolved and no
                unresolved notification matches it.
        """
        full_values = {
            key: _column_value(value)
            for key, value in candidate.model_dump(exclude={"identity_hash"}).items()
        }
        if candidate.identity_hash:
            identity_hash = candidate.identity_hash
        else:
            validate_identity(candidate.kind, full_values)
            identity_hash = derive_identity_hash(candidate.kind, full_values)

        now = utc_now()
        window_start = now - self.retention_window
        existing = self.repo.find_active_by_hash(identity_hash, since=window_start)

        if existing is None:
            if candidate.is_resolved:
                raise ResolvedCandidateError(identity_hash)
            return self._create(identity_hash, full_values, source, window_start)

        explicit = candidate.model_dump(exclude_unset=True, exclude={"identity_hash", "kind"})
        changes = {
            name: _column_value(explicit[name])
            for name in TRACKED_FIELDS
            if name in explicit and getattr(existing, name) != _column_value(explicit[name])
        }
        if not changes:
            logger.debug(
                "[%s] Skipped unchanged notification %s (%s)", source, existing.id, existing.title
            )
            return UpsertResult(UpsertAction.UNCHANGED, existing)

        changes["last_updated"] = now
        changes["updated_by"] = source
        if reset_timestamp:
            changes["created_at"] = now
        resolving = bool(changes.get("is_resolved"))
        if resolving:
            changes["is_read"] = True
            changes["resolved_at"] = now
            changes["resolution_note"] = f"Resolved by {source}"

        updated = self.repo.apply_update(existing, changes)
        logger.info(
            "[%s] Updated notification %s (%s): %s",
            source,
            updated.id,
            updated.title,
            ", ".join(sorted(k for k in changes if k not in ("last_updated", "updated_by"))),
        )
        event = BroadcastEventKind.RESOLVED if resolving else BroadcastEventKind.UPDATED
        self._publish(event, updated, source)
        return UpsertResult(UpsertAction.UPDATED, updated)

    def _create(
        self,
        identity_hash: str,
        values: dict[str, Any],
        source: str,
        window_start: datetime,
    ) -> UpsertResult:
        self._retire_stale(identity_hash, window_start, source)
        try:
            created = self.repo.insert(identity_hash=identity_hash, source=source, **values)
        except IntegrityError:
            # Another writer inserted the same identity between our read and write.
            self.db.rollback()
            winner = self.repo.find_active_by_hash(identity_hash)
            if winner is None:
                raise
            logger.warning(
                "[%s] Recovered concurrent insert for hash %s, using %s",
                source,
                identity_hash,
                winner.id,
            )
            return UpsertResult(UpsertAction.RECOVERED, winner)

        logger.info(
            "[%s] Created notification %s (%s, hash %s)",
            source,
            created.id,
            created.title,
            identity_hash,
        )
        self._publish(BroadcastEventKind.CREATED, created, source)
        return UpsertResult(UpsertAction.CREATED, created)

    def _retire_stale(self, identity_hash: str, window_start: datetime, source: str) -> None:
        """Resolve unresolved rows older than the window so the new row can take the hash."""
        for stale in self.repo.find_stale_active_by_hash(identity_hash, before=window_start):
            resolved = self.repo.resolve(stale, STALE_RESOLUTION_NOTE)
            logger.info("[%s] Retired stale notification %s", source, resolved.id)
            self._publish(BroadcastEventKind.RESOLVED, resolved, source)

    def _publish(
        self,
        kind: BroadcastEventKind,
        notification: Notification | dict[str, Any],
        source: str,
    ) -> None:
        payload = (
            notification
            if isinstance(notification, dict)
            else serialize_notification(notification)
        )
        self.channel.publish(
            kind,
            {
                "notification": payload,
                "action": kind.value,
                "source": source,
                "identity_hash": payload.get("identity_hash"),
            },
        )

    def get(self, notification_id: UUID) -> Notification | None:
        return self.repo.get_by_id(notification_id)

    def list_active(
        self,
        kind: NotificationKind | None = None,
        skip: int = 0,
        limit: int | None = None,
        order_by: str | None = None,
    ) -> list[Notification]:
        return self.repo.list_active(
            kinds=[kind] if kind is not None else None,
            skip=skip,
            limit=limit if limit is not None else settings.ACTIVE_FEED_LIMIT,
            order_by=order_by,
        )

    def mark_as_read(self, notification_id: UUID, source: str = "api") -> Notification | None:
        notification = self.repo.mark_as_read(notification_id)
        if notification is not None:
            self._publish(BroadcastEventKind.UPDATED, notification, source)
        return notification

    def mark_all_as_read(self, source: str = "api") -> int:
        notifications = self.repo.mark_all_as_read()
        for notification in notifications:
            self._publish(BroadcastEventKind.UPDATED, notification, source)
        return len(notifications)

    def resolve(
        self,
        notification_id: UUID,
        note: str | None = None,
        source: str = "api",
    ) -> Notification | None:
        notification = self.repo.get_by_id(notification_id)
        if notification is None or notification.is_resolved:
            return notification
        resolved = self.repo.resolve(notification, note or MANUAL_RESOLUTION_NOTE)
        logger.info("[%s] Resolved notification %s", source, resolved.id)
        self._publish(BroadcastEventKind.RESOLVED, resolved, source)
        return resolved

    def resolve_by_identity(
        self,
        kind: NotificationKind,
        fields: Mapping[str, Any],
        note: str,
        source: str = "system",
    ) -> list[Notification]:
        """Resolve every unresolved notification sharing this identity."""
        identity_hash = derive_identity_hash(kind, fields)
        resolved = self.repo.resolve_active_by_hash(identity_hash, note)
        for notification in resolved:
            self._publish(BroadcastEventKind.RESOLVED, notification, source)
        if resolved:
            logger.info(
                "[%s] Resolved %d %s notification(s): %s", source, len(resolved), kind.value, note
            )
        return resolved

    def delete(self, notification_id: UUID, source: str = "api") -> bool:
        notification = self.repo.get_by_id(notification_id)
        if notification is None:
            return False
        snapshot = serialize_notification(notification)
        self.repo.delete(notification)
        self._publish(BroadcastEventKind.DELETED, snapshot, source)
        return True

    def clear_resolved(self, before: datetime | None = None, source: str = "api") -> int:
        notifications = self.repo.list_resolved(before=before)
        snapshots = [serialize_notification(n) for n in notifications]
        count = self.repo.delete_many(notifications)
        for snapshot in snapshots:
            self._publish(BroadcastEventKind.DELETED, snapshot, source)
        return count

    def purge_expired(self) -> int:
        """Delete resolved notifications that have outlived the retention window."""
        count = self.clear_resolved(before=utc_now() - self.retention_window, source="retention")
        if count:
            logger.info("Purged %d expired notification(s)", count)
        return count

    def stats(self) -> dict[str, Any]:
        active = self.repo.count_active_by_kind()
        unread = self.repo.count_active_by_kind(unread_only=True)
        stock_kinds = (NotificationKind.LOW_STOCK.value, NotificationKind.OUT_OF_STOCK.value)
        total = sum(active.values())
        return {
            "unread_count": sum(unread.values()),
            "low_stock_count": sum(unread.get(k, 0) for k in stock_kinds),
            "gst_alert_count": unread.get(NotificationKind.GST_ALERT.value, 0),
            "payment_alert_count": unread.get(NotificationKind.PAYMENT_ALERT.value, 0),
            "total_notifications": total,
            "breakdown": {
                "stock": sum(active.get(k, 0) for k in stock_kinds),
                "gst": active.get(NotificationKind.GST_ALERT.value, 0),
                "payment": active.get(NotificationKind.PAYMENT_ALERT.value, 0),
                "system": active.get(NotificationKind.SYSTEM_ALERT.value, 0),
                "total": total,
            },
        }
