"""Shared model utilities used across all models."""

import re
import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import String, TypeDecorator
from sqlalchemy.engine import Dialect


class UUIDType(TypeDecorator[uuid.UUID]):
    """Platform-independent UUID type.

    Uses String(36) for SQLite, native UUID for PostgreSQL.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(value))

    def process_result_value(self, value: Any, dialect: Dialect) -> uuid.UUID | None:
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


def generate_uuid() -> uuid.UUID:
    """Generate a new UUID."""
    return uuid.uuid4()


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SettlementState(str, Enum):
    PENDING = "pending"
    SETTLED = "settled"


NEGATING_WORDS = frozenset({"not", "no", "non"})

_WORD_RE = re.compile(r"[a-z]+")


def classify_status(
    status: str | None,
    pending_words: frozenset[str],
    settled_words: frozenset[str],
) -> SettlementState | None:
    """Classify free-form status text as pending, settled or neither.

    Whole words are matched. A pending word, or a settled word preceded by a
    negation ("not paid"), makes the status pending; pending always wins so a
    status is never both.
    """
    words = _WORD_RE.findall((status or "").lower())
    negated_settled = any(
        word in settled_words and i > 0 and words[i - 1] in NEGATING_WORDS
        for i, word in enumerate(words)
    )
    if negated_settled or any(word in pending_words for word in words):
        return SettlementState.PENDING
    if any(word in settled_words for word in words):
        return SettlementState.SETTLED
    return None
