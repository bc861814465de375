"""Notification API endpoints."""

import asyncio
import logging
from contextlib import suppress
from uuid import UUID

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
)
from pydantic import ValidationError
from sqlalchemy.orm import Session

from shopdesk.core.broadcast import QueueSubscriber, notification_channel
from shopdesk.core.config import settings
from shopdesk.core.database import get_db
from shopdesk.models.notification import STOCK_KINDS, Notification, NotificationKind
from shopdesk.repositories.notification_repository import NotificationRepository
from shopdesk.schemas.notification import (
    AlertRefreshResponse,
    ClearResolvedResponse,
    GeneratorReportResponse,
    MarkAllReadResponse,
    NotificationCountResponse,
    NotificationResponse,
    NotificationStatsResponse,
    NotificationSubmit,
    ResolveRequest,
    StockCheckRequest,
    StockCheckResponse,
    UpsertResponse,
)
from shopdesk.services.alert_generators import (
    AlertFeedService,
    GeneratorReport,
    StockAlertGenerator,
    StockCheckResult,
)
from shopdesk.services.notification_identity import IdentityFieldsMissingError
from shopdesk.services.notification_service import (
    NotificationService,
    ResolvedCandidateError,
    UpsertAction,
)

logger = logging.getLogger(__name__)

router = APIRouter()

UPSERT_MESSAGES = {
    UpsertAction.CREATED: "Notification created",
    UpsertAction.UPDATED: "Notification updated",
    UpsertAction.UNCHANGED: "No changes needed",
    UpsertAction.RECOVERED: "Notification already exists",
}

STOCK_MESSAGES = {
    "alert_created": "Stock alert created",
    "alert_updated": "Stock alert updated",
    "alert_unchanged": "Stock alert already exists",
    "alerts_resolved": "Stock is sufficient. Existing alerts resolved.",
    "no_alert_needed": "Stock is sufficient. No alerts needed.",
}


def _refresh_alerts(db: Session, response: Response | None = None) -> list[GeneratorReport]:
    reports = AlertFeedService(db).refresh()
    failed = [r.name for r in reports if r.error]
    if failed and response is not None:
        response.headers["X-Alert-Errors"] = ",".join(failed)
    return reports


def _stock_check_response(outcome: StockCheckResult) -> StockCheckResponse:
    return StockCheckResponse(
        status=outcome.status,
        action=outcome.action.value if outcome.action else None,
        notification=(
            NotificationResponse.model_validate(outcome.notification)
            if outcome.notification is not None
            else None
        ),
        resolved_count=len(outcome.resolved),
        stock_sufficient=outcome.stock_sufficient,
        message=STOCK_MESSAGES[outcome.status],
    )


@router.get(
    "/",
    response_model=list[NotificationResponse],
    summary="List active notifications",
)
async def list_notifications(
    response: Response,
    kind: NotificationKind | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=settings.ACTIVE_FEED_LIMIT, ge=1, le=500),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[Notification]:
    """Refresh generated alerts, then list unresolved notifications newest first."""
    _refresh_alerts(db, response)
    service = NotificationService(db)
    return service.list_active(kind=kind, skip=skip, limit=limit, order_by=order_by)


@router.post(
    "/",
    response_model=UpsertResponse,
    summary="Submit a notification",
    responses={
        400: {
            "description": (
                "Missing identity fields for this kind, or a resolved notification"
                " with no unresolved match"
            )
        }
    },
)
async def submit_notification(
    data: NotificationSubmit,
    db: Session = Depends(get_db),
) -> UpsertResponse:
    """Create or update a notification from an external source.

    Setting ``is_resolved`` resolves the matching unresolved notification;
    it cannot create one.
    """
    service = NotificationService(db)
    try:
        result = service.upsert(
            data.notification, source=data.source, reset_timestamp=data.reset_timestamp
        )
    except (IdentityFieldsMissingError, ResolvedCandidateError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return UpsertResponse(
        action=result.action.value,
        notification=NotificationResponse.model_validate(result.notification),
        message=UPSERT_MESSAGES[result.action],
    )


@router.get(
    "/stock_alerts",
    response_model=list[NotificationResponse],
    summary="List active stock alerts",
)
async def list_stock_alerts(
    db: Session = Depends(get_db),
) -> list[Notification]:
    repo = NotificationRepository(db)
    return repo.list_active(
        kinds=STOCK_KINDS,
        limit=settings.ACTIVE_FEED_LIMIT,
        order_by="priority:desc,created_at:desc",
    )


@router.get(
    "/stats",
    response_model=NotificationStatsResponse,
    summary="Get notification statistics",
)
async def get_stats(
    response: Response,
    db: Session = Depends(get_db),
) -> NotificationStatsResponse:
    """Refresh generated alerts, then count active notifications by kind."""
    _refresh_alerts(db, response)
    return NotificationStatsResponse(**NotificationService(db).stats())


@router.get(
    "/unread_count",
    response_model=NotificationCountResponse,
    summary="Get unread notification count",
)
async def get_unread_count(
    db: Session = Depends(get_db),
) -> NotificationCountResponse:
    repo = NotificationRepository(db)
    return NotificationCountResponse(unread_count=repo.count_unread())


@router.get(
    "/history",
    response_model=list[NotificationResponse],
    summary="List all notifications including resolved",
)
async def list_history(
    kind: NotificationKind | None = None,
    is_read: bool | None = None,
    is_resolved: bool | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[Notification]:
    repo = NotificationRepository(db)
    return repo.list_all(
        skip=skip,
        limit=limit,
        kind=kind,
        is_read=is_read,
        is_resolved=is_resolved,
        order_by=order_by,
    )


@router.post(
    "/check_stock",
    response_model=StockCheckResponse,
    summary="Check a product's stock level",
)
async def check_stock(
    data: StockCheckRequest,
    db: Session = Depends(get_db),
) -> StockCheckResponse:
    """Raise, refresh or resolve the stock alert for a reported stock level."""
    generator = StockAlertGenerator(db)
    outcome = generator.check_stock(
        data.product_id, data.product_name, data.current_stock, data.min_stock
    )
    return _stock_check_response(outcome)


@router.post(
    "/refresh",
    response_model=AlertRefreshResponse,
    summary="Run alert generators",
)
async def refresh_alerts(
    db: Session = Depends(get_db),
) -> AlertRefreshResponse:
    reports = _refresh_alerts(db)
    return AlertRefreshResponse(
        reports=[GeneratorReportResponse(**vars(report)) for report in reports]
    )


@router.post(
    "/read_all",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications as read",
)
async def mark_all_as_read(
    db: Session = Depends(get_db),
) -> MarkAllReadResponse:
    service = NotificationService(db)
    return MarkAllReadResponse(updated_count=service.mark_all_as_read())


@router.delete(
    "/resolved",
    response_model=ClearResolvedResponse,
    summary="Clear resolved notifications",
)
async def clear_resolved(
    db: Session = Depends(get_db),
) -> ClearResolvedResponse:
    service = NotificationService(db)
    return ClearResolvedResponse(deleted_count=service.clear_resolved())


@router.websocket("/ws")
async def notification_stream(
    websocket: WebSocket,
    db: Session = Depends(get_db),
) -> None:
    """Push notification events; accept ``stock_changed`` reports from clients."""
    await websocket.accept()
    subscriber = QueueSubscriber(asyncio.get_running_loop(), settings.BROADCAST_QUEUE_SIZE)
    unsubscribe = notification_channel.subscribe(subscriber)

    async def forward_events() -> None:
        while True:
            event = await subscriber.get()
            await websocket.send_json(event.to_message())

    sender = asyncio.create_task(forward_events())
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"event": "error", "data": {"detail": "Invalid JSON"}})
                continue
            if not isinstance(message, dict) or message.get("event") != "stock_changed":
                await websocket.send_json(
                    {"event": "error", "data": {"detail": "Unsupported event"}}
                )
                continue
            try:
                data = StockCheckRequest.model_validate(message.get("data") or {})
            except ValidationError as e:
                errors = e.errors(include_url=False, include_context=False, include_input=False)
                await websocket.send_json({"event": "error", "data": {"detail": errors}})
                continue
            outcome = StockAlertGenerator(db).check_stock(
                data.product_id, data.product_name, data.current_stock, data.min_stock
            )
            await websocket.send_json(
                {
                    "event": "stock_checked",
                    "data": _stock_check_response(outcome).model_dump(mode="json"),
                }
            )
    except WebSocketDisconnect:
        logger.debug("Notification stream client disconnected")
    finally:
        unsubscribe()
        sender.cancel()
        with suppress(asyncio.CancelledError):
            await sender


@router.get(
    "/{notification_id}",
    response_model=NotificationResponse,
    summary="Get notification",
    responses={404: {"description": "Notification not found"}},
)
async def get_notification(
    notification_id: UUID,
    db: Session = Depends(get_db),
) -> Notification:
    notification = NotificationService(db).get(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark a notification as read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_as_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
) -> Notification:
    notification = NotificationService(db).mark_as_read(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.post(
    "/{notification_id}/resolve",
    response_model=NotificationResponse,
    summary="Resolve a notification",
    responses={404: {"description": "Notification not found"}},
)
async def resolve_notification(
    notification_id: UUID,
    data: ResolveRequest | None = None,
    db: Session = Depends(get_db),
) -> Notification:
    """Resolve a notification; it leaves the active feed but stays in history."""
    note = data.resolution_note if data else None
    notification = NotificationService(db).resolve(notification_id, note)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.delete(
    "/{notification_id}",
    status_code=204,
    summary="Delete a notification",
    responses={404: {"description": "Notification not found"}},
)
async def delete_notification(
    notification_id: UUID,
    db: Session = Depends(get_db),
) -> None:
    if not NotificationService(db).delete(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
