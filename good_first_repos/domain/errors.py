"""Exceptions raised by the crawler and its collaborators."""
from typing import Optional

from good_first_repos.domain.models import ResponseStatus


class CrawlerError(Exception):
    """Base class for all crawler errors."""
    pass


class ConfigurationError(CrawlerError):
    """Raised when settings, credentials or the languages file are unusable.

    Fatal: aborts the whole run before any crawl starts.
    """
    pass


class MalformedRecordError(CrawlerError):
    """Raised when a search record lacks a required sub-object."""
    pass


class PageError(CrawlerError):
    """A single page request failed; the crawl retries on its next attempt."""

    @property
    def status(self) -> ResponseStatus:
        return ResponseStatus.FAILED


class TransportFailure(PageError):
    """The request never produced an HTTP response (network, timeout)."""
    pass


class NonSuccessStatus(PageError):
    """The API answered with a non-success HTTP status."""

    def __init__(self, code: Optional[int], message: str = ""):
        super().__init__(message or f"Non-success status: {code}")
        self.code = code


class RateLimited(NonSuccessStatus):
    """The API refused the request because the rate limit was exceeded."""

    def __init__(self, code: Optional[int] = 403, message: str = ""):
        super().__init__(code, message or "Rate limit exceeded")

    @property
    def status(self) -> ResponseStatus:
        return ResponseStatus.RATE_LIMITED


class MalformedPayload(PageError):
    """The response body could not be parsed as a GraphQL envelope."""
    pass


class NoData(PageError):
    """The GraphQL envelope carried no data section."""
    pass
