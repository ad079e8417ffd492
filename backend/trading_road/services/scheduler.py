"""
Scheduled jobs
Uses APScheduler to run the daily housekeeping job
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import delete

from trading_road.core.config import settings
from trading_road.db.session import SessionLocal
from trading_road.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

# Process-wide scheduler
scheduler: Optional[AsyncIOScheduler] = None


async def purge_old_audit_logs(retention_days: Optional[int] = None) -> int:
    """Delete audit logs older than the retention window; returns the number removed"""
    if retention_days is None:
        retention_days = settings.AUDIT_LOG_RETENTION_DAYS
    if retention_days <= 0:
        return 0

    cutoff = datetime.utcnow() - timedelta(days=retention_days)
    try:
        async with SessionLocal() as db:
            result = await db.execute(delete(AuditLog).where(AuditLog.created_at < cutoff))
            await db.commit()
            removed = result.rowcount or 0
        logger.info(f"🧹 Housekeeping removed {removed} audit logs older than {retention_days} days")
        return removed
    except Exception as e:
        logger.error(f"❌ Housekeeping failed: {str(e)}")
        return 0


def init_scheduler():
    """Create and start the scheduler"""
    global scheduler

    if not settings.HOUSEKEEPING_ENABLED or settings.AUDIT_LOG_RETENTION_DAYS <= 0:
        logger.info("🧹 Housekeeping disabled")
        return

    scheduler = AsyncIOScheduler()

    # Daily, 03:00 by default
    scheduler.add_job(
        purge_old_audit_logs,
        trigger=CronTrigger(
            hour=settings.HOUSEKEEPING_HOUR,
            minute=settings.HOUSEKEEPING_MINUTE
        ),
        id="audit_log_housekeeping",
        name="Audit log retention",
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"⏰ Scheduler started - housekeeping daily at {settings.HOUSEKEEPING_HOUR:02d}:{settings.HOUSEKEEPING_MINUTE:02d}")


def shutdown_scheduler():
    """Stop the scheduler"""
    global scheduler
    if scheduler:
        scheduler.shutdown()
        scheduler = None
        logger.info("⏰ Scheduler stopped")
