import logging
from typing import Any

from arq import cron

from shopdesk.core.database import SessionLocal
from shopdesk.services.alert_generators import AlertFeedService
from shopdesk.services.notification_service import NotificationService
from shopdesk.tasks import redis_settings

logger = logging.getLogger(__name__)


async def refresh_alerts_task(ctx: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Background task: run every alert generator so the feed stays current
    even when nobody is reading it.

    Runs every 15 minutes. Returns each generator's report keyed by name.
    """
    db = SessionLocal()
    try:
        reports = AlertFeedService(db).refresh()
        for report in reports:
            if report.error:
                logger.warning("Alert generator %s failed: %s", report.name, report.error)
            elif report.created or report.updated or report.resolved:
                logger.info(
                    "Alert generator %s: %d created, %d updated, %d resolved",
                    report.name,
                    report.created,
                    report.updated,
                    report.resolved,
                )
        return {report.name: vars(report) for report in reports}
    finally:
        db.close()


async def purge_resolved_notifications_task(ctx: dict[str, Any]) -> int:
    """Background task: delete resolved notifications older than the retention window.

    Runs daily.
    """
    db = SessionLocal()
    try:
        return NotificationService(db).purge_expired()
    finally:
        db.close()


class WorkerSettings:
    functions = [
        refresh_alerts_task,
        purge_resolved_notifications_task,
    ]
    cron_jobs = [
        cron(refresh_alerts_task, minute={0, 15, 30, 45}),
        cron(purge_resolved_notifications_task, hour=2, minute=0),  # daily at 02:00
    ]
    redis_settings = redis_settings
