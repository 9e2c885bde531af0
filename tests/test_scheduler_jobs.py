from __future__ import annotations

from datetime import timedelta

from app.scheduler.jobs import build_scheduler, sweep_rate_limits
from app.security.rate_limiter import RateLimitCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 500.0

    def __call__(self) -> float:
        return self.now


class ExplodingLimiter(RateLimitCache):
    def sweep(self) -> int:
        raise RuntimeError("boom")


def test_sweep_rate_limits_returns_evicted_count() -> None:
    clock = FakeClock()
    limiter = RateLimitCache(max_attempts=2, window_seconds=10, clock=clock)
    limiter.check("a")
    limiter.check("b")
    clock.now += 11

    assert sweep_rate_limits(limiter) == 2
    assert len(limiter) == 0


def test_sweep_rate_limits_swallows_errors() -> None:
    limiter = ExplodingLimiter(max_attempts=1, window_seconds=10)
    assert sweep_rate_limits(limiter) == 0


def test_build_scheduler_registers_sweep_job() -> None:
    limiter = RateLimitCache(max_attempts=1, window_seconds=10)
    scheduler = build_scheduler(limiter, sweep_minutes=7)

    job = scheduler.get_job("rate_limit_sweep")
    assert job is not None
    assert job.trigger.interval == timedelta(minutes=7)
    assert job.args == (limiter,)
    assert not scheduler.running
