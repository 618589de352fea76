"""Background task scheduler for periodic dashboard reloads."""

import logging
from datetime import UTC, datetime, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tombo.config import get_settings
from tombo.services.loader import DashboardLoader
from tombo.state import store

logger = logging.getLogger(__name__)
settings = get_settings()

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None


async def reload_dashboard_job() -> None:
    """Background job to reload the dashboard snapshot from Supabase."""
    logger.info("Starting scheduled dashboard reload")
    try:
        snapshot = await store.reload(DashboardLoader())
        logger.info(f"Dashboard reload complete: {snapshot.status.value}")
    except Exception as e:
        logger.error(f"Dashboard reload failed: {e}", exc_info=True)


def setup_scheduler() -> AsyncIOScheduler | None:
    """Set up and start the reload scheduler, if reloads are enabled."""
    global scheduler

    interval = settings.refresh_interval_minutes
    if interval <= 0:
        logger.info("Periodic dashboard reload disabled")
        return None

    scheduler = AsyncIOScheduler()

    # The lifespan already performed the first load
    scheduler.add_job(
        reload_dashboard_job,
        trigger=IntervalTrigger(minutes=interval),
        next_run_time=datetime.now(UTC) + timedelta(minutes=interval),
        id="reload_dashboard",
        name="Reload dashboard data from Supabase",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(f"Scheduler started (reload every {interval} min)")

    return scheduler


def shutdown_scheduler() -> None:
    """Shut down the scheduler gracefully."""
    global scheduler

    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
        scheduler = None
