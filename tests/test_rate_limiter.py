from __future__ import annotations

import unittest

from app.security.rate_limiter import RateLimitCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestRateLimitCache(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = RateLimitCache(max_attempts=3, window_seconds=60, clock=self.clock)

    def test_allows_up_to_max_attempts_then_blocks(self) -> None:
        results = [self.cache.check("owner-1") for _ in range(4)]
        self.assertEqual(results, [True, True, True, False])

    def test_keys_are_counted_independently(self) -> None:
        for _ in range(3):
            self.cache.check("owner-1")

        self.assertFalse(self.cache.check("owner-1"))
        self.assertTrue(self.cache.check("owner-2"))

    def test_window_resets_after_expiry(self) -> None:
        for _ in range(3):
            self.cache.check("owner-1")
        self.clock.advance(60)
        self.assertFalse(self.cache.check("owner-1"))

        self.clock.advance(1)
        self.assertTrue(self.cache.check("owner-1"))

    def test_remaining_counts_down(self) -> None:
        self.assertEqual(self.cache.remaining("owner-1"), 3)
        self.cache.check("owner-1")
        self.assertEqual(self.cache.remaining("owner-1"), 2)

    def test_reset_clears_a_key(self) -> None:
        for _ in range(3):
            self.cache.check("owner-1")
        self.cache.reset("owner-1")
        self.assertTrue(self.cache.check("owner-1"))

    def test_sweep_evicts_only_expired_windows(self) -> None:
        self.cache.check("old")
        self.clock.advance(45)
        self.cache.check("new")
        self.clock.advance(30)

        evicted = self.cache.sweep()

        self.assertEqual(evicted, 1)
        self.assertEqual(len(self.cache), 1)
        self.assertEqual(self.cache.remaining("new"), 2)


if __name__ == "__main__":
    unittest.main()
