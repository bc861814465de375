"""Repository for Notification persistence."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from shopdesk.core.sorting import apply_order_by
from shopdesk.models.notification import Notification, NotificationKind
from shopdesk.models.shared import generate_uuid, utc_now

PRIORITY_RANK = case(
    {"high": 3, "medium": 2, "low": 1},
    value=Notification.priority,
    else_=0,
)


def _kind_values(kinds: Iterable[NotificationKind | str]) -> list[str]:
    return [k.value if isinstance(k, NotificationKind) else k for k in kinds]


class NotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def insert(self, *, identity_hash: str | None, source: str, **fields: Any) -> Notification:
        """Insert a new unresolved notification.

        Raises ``IntegrityError`` when an unresolved row with the same
        identity hash already exists; the session is left to the caller.
        """
        now = utc_now()
        notification = Notification(
            id=generate_uuid(),
            identity_hash=identity_hash,
            created_by=source,
            updated_by=source,
            **fields,
        )
        notification.is_resolved = False  # type: ignore[assignment]
        notification.resolved_at = None  # type: ignore[assignment]
        notification.created_at = now  # type: ignore[assignment]
        notification.last_updated = now  # type: ignore[assignment]
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_by_id(self, notification_id: UUID) -> Notification | None:
        return self.db.query(Notification).filter(Notification.id == notification_id).first()

    def find_active_by_hash(
        self, identity_hash: str, since: datetime | None = None
    ) -> Notification | None:
        """Most recent unresolved notification with this hash."""
        query = self.db.query(Notification).filter(
            Notification.identity_hash == identity_hash,
            Notification.is_resolved.is_(False),
        )
        if since is not None:
            query = query.filter(Notification.created_at >= since)
        return query.order_by(Notification.created_at.desc()).first()

    def find_stale_active_by_hash(
        self, identity_hash: str, before: datetime
    ) -> list[Notification]:
        return (
            self.db.query(Notification)
            .filter(
                Notification.identity_hash == identity_hash,
                Notification.is_resolved.is_(False),
                Notification.created_at < before,
            )
            .all()
        )

    def _active_query(
        self, kinds: Iterable[NotificationKind | str] | None = None
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Notification).filter(Notification.is_resolved.is_(False))
        if kinds is not None:
            query = query.filter(Notification.kind.in_(_kind_values(kinds)))
        return query

    def list_active(
        self,
        kinds: Iterable[NotificationKind | str] | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Notification]:
        query = apply_order_by(
            self._active_query(kinds),
            Notification,
            order_by,
            expressions={"priority": PRIORITY_RANK},
        )
        return query.offset(skip).limit(limit).all()

    def list_all(
        self,
        skip: int = 0,
        limit: int = 50,
        kind: NotificationKind | str | None = None,
        is_read: bool | None = None,
        is_resolved: bool | None = None,
        order_by: str | None = None,
    ) -> list[Notification]:
        query = self.db.query(Notification)
        if kind is not None:
            query = query.filter(Notification.kind == _kind_values([kind])[0])
        if is_read is not None:
            query = query.filter(Notification.is_read == is_read)
        if is_resolved is not None:
            query = query.filter(Notification.is_resolved == is_resolved)
        query = apply_order_by(
            query, Notification, order_by, expressions={"priority": PRIORITY_RANK}
        )
        return query.offset(skip).limit(limit).all()

    def count_unread(self) -> int:
        return self._active_query().filter(Notification.is_read.is_(False)).count()

    def count_active_by_kind(self, unread_only: bool = False) -> dict[str, int]:
        query = self.db.query(Notification.kind, func.count(Notification.id)).filter(
            Notification.is_resolved.is_(False)
        )
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        rows = query.group_by(Notification.kind).all()
        return {str(kind): int(count) for kind, count in rows}

    def active_context_values(
        self, kinds: Iterable[NotificationKind | str], column: str
    ) -> set[str]:
        """Distinct values of a context column across unresolved notifications."""
        attr = getattr(Notification, column)
        rows = (
            self._active_query(kinds)
            .filter(attr.isnot(None))
            .with_entities(attr)
            .distinct()
            .all()
        )
        return {str(row[0]) for row in rows}

    def apply_update(self, notification: Notification, changes: dict[str, Any]) -> Notification:
        for key, value in changes.items():
            setattr(notification, key, value)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_as_read(self, notification_id: UUID) -> Notification | None:
        notification = self.get_by_id(notification_id)
        if notification is None:
            return None
        return self.apply_update(notification, {"is_read": True, "last_updated": utc_now()})

    def mark_all_as_read(self) -> list[Notification]:
        notifications = self._active_query().filter(Notification.is_read.is_(False)).all()
        now = utc_now()
        for notification in notifications:
            notification.is_read = True  # type: ignore[assignment]
            notification.last_updated = now  # type: ignore[assignment]
        self.db.commit()
        return notifications

    def resolve(self, notification: Notification, note: str) -> Notification:
        now = utc_now()
        return self.apply_update(
            notification,
            {
                "is_resolved": True,
                "is_read": True,
                "resolution_note": note,
                "resolved_at": now,
                "last_updated": now,
            },
        )

    def resolve_active_by_hash(self, identity_hash: str, note: str) -> list[Notification]:
        notifications = (
            self.db.query(Notification)
            .filter(
                Notification.identity_hash == identity_hash,
                Notification.is_resolved.is_(False),
            )
            .all()
        )
        now = utc_now()
        for notification in notifications:
            notification.is_resolved = True  # type: ignore[assignment]
            notification.is_read = True  # type: ignore[assignment]
            notification.resolution_note = note  # type: ignore[assignment]
            notification.resolved_at = now  # type: ignore[assignment]
            notification.last_updated = now  # type: ignore[assignment]
        if notifications:
            self.db.commit()
        return notifications

    def delete(self, notification: Notification) -> None:
        self.db.delete(notification)
        self.db.commit()

    def list_resolved(self, before: datetime | None = None) -> list[Notification]:
        """Resolved notifications, optionally only those resolved before a cutoff."""
        query = self.db.query(Notification).filter(Notification.is_resolved.is_(True))
        if before is not None:
            query = query.filter(Notification.resolved_at < before)
        return query.all()

    def delete_many(self, notifications: list[Notification]) -> int:
        for notification in notifications:
            self.db.delete(notification)
        if notifications:
            self.db.commit()
        return len(notifications)
