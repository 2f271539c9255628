"""Inter-request delay escalation driven by rate-limit signals."""
from good_first_repos.domain.models import ResponseStatus


BACKOFF_EXPONENT = 1.2
MIN_BACKOFF_DELAY = 1.1
# GitHub's GraphQL rate limit window; waiting longer never helps
MAX_BACKOFF_DELAY = 3600.0


def next_delay(delay: float, status: ResponseStatus) -> float:
    """Return the delay to wait before the next page request.

    Only a rate-limited response raises the delay to ``max(delay ** 1.2, 1.1)``;
    it never decays within a crawl. The floor keeps the delay growing even when
    it starts below 1.

    Unlike the bare formula, the result is capped at MAX_BACKOFF_DELAY, so
    once the cap is reached further rate limits no longer increase the delay.
    Without the cap a long run of rate limits overflows the float. A delay
    already above the cap is returned unchanged.

    Args:
        delay: Current delay in seconds
        status: Classification of the last page request

    Returns:
        The new delay in seconds
    """
    if status is not ResponseStatus.RATE_LIMITED:
        return delay
    if delay >= MAX_BACKOFF_DELAY:
        return delay
    return min(max(delay ** BACKOFF_EXPONENT, MIN_BACKOFF_DELAY), MAX_BACKOFF_DELAY)
