"""
app/scheduler/jobs.py

APScheduler-based background scheduler.

Schedule
--------
  rate_limit_sweep: every ``RATE_LIMIT_SWEEP_MINUTES`` minutes (default 5)

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_rate_limit_settings
from app.security.rate_limiter import RateLimitCache

logger = logging.getLogger(__name__)


def sweep_rate_limits(rate_limiter: RateLimitCache) -> int:
    """
    Evict expired rate-limit windows. Never raises into the scheduler thread.
    """

    try:
        evicted = rate_limiter.sweep()
    except Exception:  # noqa: BLE001
        logger.exception("Scheduler: rate_limit_sweep failed")
        return 0
    if evicted:
        logger.info("Scheduler: rate_limit_sweep evicted=%d remaining=%d", evicted, len(rate_limiter))
    return evicted


def build_scheduler(rate_limiter: RateLimitCache, sweep_minutes: int | None = None) -> BackgroundScheduler:
    """
    Build and register all periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    interval = sweep_minutes or get_rate_limit_settings().sweep_minutes
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        sweep_rate_limits,
        trigger="interval",
        minutes=interval,
        args=[rate_limiter],
        id="rate_limit_sweep",
        name="Rate-limit window sweep",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )

    return scheduler
