"""
Retry policy for whole repost invocations.

Gateways never retry. A retry re-runs the complete workflow, which starts
from a freshly cloned working copy, so no attempt resumes from partial state.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass

from prrepost.exceptions import RateLimitedError
from prrepost.logging import get_logger
from prrepost.types.outcomes import Failed, RepostOutcome

logger = get_logger()


@dataclass
class RetryConfig:
    """Configuration for invocation-level retries."""

    max_retries: int = 0
    backoff_factor: float = 2.0
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


def should_retry(outcome: RepostOutcome, attempt: int, config: RetryConfig) -> bool:
    """
    Determine if an invocation should be re-run.

    Only failures caused by retryable errors (network, 5xx, rate limits) are
    retried. Conflicts, auth errors and workflow aborts never are.
    """
    if attempt >= config.max_retries:
        return False
    return isinstance(outcome, Failed) and outcome.retryable


def get_backoff_time(attempt: int, config: RetryConfig, retry_after: int | None = None) -> float:
    """
    Calculate backoff time before the next attempt.

    Uses exponential backoff with jitter, respecting a rate-limit
    Retry-After value if present.

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration
        retry_after: Seconds requested by the server (if any)

    Returns:
        Time to wait in seconds
    """
    if retry_after is not None and config.respect_retry_after:
        return float(retry_after)

    base_wait = config.backoff_factor ** attempt

    jitter_range = base_wait * config.jitter
    jitter = random.uniform(-jitter_range, jitter_range)
    wait_time = base_wait + jitter

    return min(wait_time, config.max_backoff)


def run_with_retry(
    invocation: Callable[[], RepostOutcome],
    config: RetryConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> RepostOutcome:
    """
    Run ``invocation`` and re-run it while it fails with a retryable error.

    Returns:
        The outcome of the last attempt
    """
    attempt = 0
    while True:
        outcome = invocation()
        if not should_retry(outcome, attempt, config):
            return outcome

        assert isinstance(outcome, Failed)
        retry_after = outcome.error.retry_after if isinstance(outcome.error, RateLimitedError) else None
        wait_time = get_backoff_time(attempt, config, retry_after)
        logger.warning(
            "Attempt %d failed (%s); retrying in %.1fs", attempt + 1, outcome.reason, wait_time,
        )
        sleep(wait_time)
        attempt += 1
