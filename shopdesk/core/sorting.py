"""Shared sorting utilities for repository queries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from shopdesk.core.database import Base


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
    expressions: Mapping[str, Any] | None = None,
) -> Query:  # type: ignore[type-arg]
    """Apply ordering to a SQLAlchemy query.

    Args:
        query: The SQLAlchemy query to sort.
        model: The SQLAlchemy model class.
        order_by: Comma-separated sort keys in "field:direction" format
            (e.g. "priority:desc,created_at:desc"). Unknown fields are
            ignored. If nothing usable remains, the default ordering applies.
        default_field: Default column to sort by.
        default_direction: Default sort direction ("asc" or "desc").
        expressions: Optional named SQL expressions that may be sorted on in
            place of a plain column (e.g. a CASE ranking for enum strings).

    Returns:
        The query with ordering applied.
    """
    expressions = expressions or {}
    clauses = []

    for part in (order_by or "").split(","):
        part = part.strip()
        if not part:
            continue
        field, _, direction = part.partition(":")
        if direction not in ("asc", "desc"):
            direction = "asc" if not direction else default_direction

        if field in expressions:
            target = expressions[field]
        elif hasattr(model, field):
            target = getattr(model, field)
        else:
            continue
        clauses.append(asc(target) if direction == "asc" else desc(target))

    if not clauses:
        column = expressions.get(default_field, getattr(model, default_field))
        clauses.append(asc(column) if default_direction == "asc" else desc(column))

    return query.order_by(*clauses)
