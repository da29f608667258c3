# core/scheduler.py
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.cache import get_context_cache
from core.config import settings
from core.logging_config import logger


_scheduler: Optional[BackgroundScheduler] = None


def prune_context_cache() -> int:
    """Drop expired context cache entries. Returns how many were removed."""
    try:
        removed = get_context_cache().cleanup_expired()
        if removed:
            logger.info(f"[SCHEDULER] Pruned {removed} expired context cache entries")
        return removed
    except Exception as e:
        logger.error(f"[SCHEDULER] Context cache prune failed: {e}", exc_info=True)
        return 0


def start_scheduler() -> BackgroundScheduler:
    """
    Initialize the APScheduler background process.
    Runs the cache prune job every CACHE_PRUNE_INTERVAL_SECONDS.
    """
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        return _scheduler

    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        prune_context_cache,
        trigger=IntervalTrigger(seconds=settings.CACHE_PRUNE_INTERVAL_SECONDS),
        id="context_cache_prune",
        replace_existing=True,
    )

    scheduler.start()
    _scheduler = scheduler
    logger.info(
        f"⏰ Scheduler started. Context cache prune every {settings.CACHE_PRUNE_INTERVAL_SECONDS}s."
    )
    return scheduler


def shutdown_scheduler():
    global _scheduler
    if _scheduler is None:
        return
    if _scheduler.running:
        _scheduler.shutdown(wait=False)
    _scheduler = None
    logger.info("⏰ Scheduler stopped.")
