"""Retry policy with exponential backoff and an injectable clock."""

import logging
import time

from config.defaults import DEFAULTS

logger = logging.getLogger(__name__)


class RetryPolicy:
    """Bounded retries with exponential backoff.

    Args:
        max_attempts: Total calls allowed, including the first one.
        base: Delay in seconds before the second call; doubled afterwards.
        cap: Upper bound on any single delay.
        sleep: Callable used to wait. Tests pass a fake clock.
    """

    def __init__(self, max_attempts=None, base=None, cap=None, sleep=None):
        self.max_attempts = max(1, max_attempts or DEFAULTS["max_task_attempts"])
        self.base = DEFAULTS["backoff_base"] if base is None else base
        self.cap = DEFAULTS["backoff_cap"] if cap is None else cap
        self.sleep = sleep or time.sleep

    def backoff(self, attempt):
        """Delay to wait after the given (1-based) failed attempt."""
        return min(self.base * (2 ** (attempt - 1)), self.cap)

    def call(self, fn, retry_on=(Exception,), on_retry=None):
        """Call fn() until it succeeds, retrying only on the given exception types.

        Returns fn's result. Re-raises the last retryable error once
        max_attempts calls have failed; other exceptions propagate at once.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn()
            except retry_on as e:
                if attempt >= self.max_attempts:
                    raise
                delay = self.backoff(attempt)
                logger.warning("Retryable failure (attempt %d/%d), waiting %.1fs: %s",
                               attempt, self.max_attempts, delay, e)
                if on_retry:
                    on_retry(attempt, e)
                self.sleep(delay)
