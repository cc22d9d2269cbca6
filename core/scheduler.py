from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import logging

from core.config import settings
from core.logging import LOGGER_NAME
from core.time_utils import get_current_time

logger = logging.getLogger(LOGGER_NAME)

scheduler = AsyncIOScheduler()

async def sweep_expired_tokens(token_service):
    """
    Deletes expired refresh tokens.
    Never raises: a failed run is logged and the next interval tries again.
    """
    try:
        await token_service.sweep_expired()
    except Exception as e:
        logger.error("Token sweep failed", extra={"error": str(e)})

async def warm_active_caches(cache_warmer):
    """Pre-loads habits and streaks for users active in the last window."""
    try:
        await cache_warmer.warm_active_users()
    except Exception as e:
        logger.error("Cache warming failed", extra={"error": str(e)})

def start_scheduler(token_service, cache_warmer=None, target=None):
    """
    Registers the background jobs and starts the scheduler.

    Each job also runs once right away (next_run_time=now), then on its
    interval. Jobs only share the database and cache backends with requests.
    """
    target = target or scheduler
    now = get_current_time()

    target.add_job(
        sweep_expired_tokens,
        IntervalTrigger(minutes=settings.TOKEN_SWEEP_INTERVAL_MINUTES),
        args=[token_service],
        id="sweep_expired_tokens",
        next_run_time=now,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    if cache_warmer is not None and settings.CACHE_WARMING_ENABLED:
        target.add_job(
            warm_active_caches,
            IntervalTrigger(minutes=settings.CACHE_WARM_INTERVAL_MINUTES),
            args=[cache_warmer],
            id="warm_active_caches",
            next_run_time=now,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    target.start()
    logger.info("Scheduler started", extra={"jobs": [job.id for job in target.get_jobs()]})
    return target

def stop_scheduler(target=None):
    target = target or scheduler
    if target.running:
        target.shutdown(wait=False)
