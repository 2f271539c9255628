"""Crawler service driving one language's cursor-based paging loop."""
import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, Tuple
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_none
)
from good_first_repos.config import CrawlSettings
from good_first_repos.domain.backoff import next_delay
from good_first_repos.domain.errors import PageError
from good_first_repos.domain.github_interface import IPageSource
from good_first_repos.domain.models import (
    CrawlOutcome,
    CrawlResult,
    Repository,
    ResponseStatus,
    Subject
)
from good_first_repos.domain.normalizer import normalize


logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class CrawlState:
    """Progress of one subject's crawl; every attempt returns a new state."""
    search_term: str
    delay: float
    repositories: Tuple[Repository, ...] = ()
    cursor: Optional[str] = None
    has_more_pages: bool = True
    errors_encountered: int = 0


class CrawlerService:
    """Application service for crawling one language's repositories.

    Each attempt waits the current backoff delay, requests one page and
    normalizes its records. Attempts are counted against the retry budget
    whether they succeed or not; running out of budget ends the crawl with
    whatever was collected.
    """

    def __init__(
        self,
        page_source: IPageSource,
        settings: CrawlSettings,
        sleep: Sleep = asyncio.sleep
    ):
        """Initialize crawler service.

        Args:
            page_source: Page request implementation
            settings: Shared read-only crawl settings
            sleep: Coroutine used to wait between requests
        """
        self._page_source = page_source
        self._settings = settings
        self._sleep = sleep

    def _needs_more(self, state: CrawlState) -> bool:
        return (
            state.has_more_pages
            and len(state.repositories) < self._settings.num_repositories
        )

    async def _attempt(self, state: CrawlState) -> CrawlState:
        """Request one page and fold its records into a new state."""
        await self._sleep(state.delay)

        try:
            page = await self._page_source.fetch_page(
                state.search_term,
                self._settings.page_size,
                state.cursor
            )
        except PageError as e:
            delay = next_delay(state.delay, e.status)
            if e.status is ResponseStatus.RATE_LIMITED:
                logger.warning(
                    f"[{state.search_term}] Rate limited, backing off "
                    f"from {state.delay:.2f}s to {delay:.2f}s"
                )
            else:
                logger.warning(f"[{state.search_term}] Page request failed: {e}")
            return replace(
                state,
                delay=delay,
                errors_encountered=state.errors_encountered + 1
            )

        if page.rate_limited:
            logger.warning(f"[{state.search_term}] Rate limit budget used up: {page.rate_limit}")

        repositories = [
            repository
            for repository in (
                normalize(record, self._settings.min_issues, self._settings.labels)
                for record in page.records
            )
            if repository is not None
        ]
        logger.info(
            f"[{state.search_term}] Kept {len(repositories)} of {len(page.records)} results"
        )
        return replace(
            state,
            delay=next_delay(state.delay, ResponseStatus.OK),
            repositories=state.repositories + tuple(repositories),
            cursor=page.end_cursor,
            has_more_pages=page.end_cursor is not None and page.has_next_page
        )

    async def crawl(self, subject: Subject) -> CrawlResult:
        """Crawl one subject until enough repositories are collected.

        Never raises for page or record failures; an exhausted retry budget
        yields a partial, possibly empty, result.

        Args:
            subject: Language to crawl

        Returns:
            CrawlResult with the subject holding its collected repositories
        """
        state = CrawlState(
            search_term=subject.search_term,
            delay=self._settings.base_delay
        )
        attempts = 0

        logger.info(f"Starting crawl for {subject.name} ({subject.search_term})")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.num_retries),
            wait=wait_none(),
            retry=retry_if_result(self._needs_more),
            retry_error_callback=_last_state
        )
        async for attempt in retrying:
            with attempt:
                state = await self._attempt(state)
            attempts = attempt.retry_state.attempt_number
            if not attempt.retry_state.outcome.failed:
                attempt.retry_state.set_result(state)

        if len(state.repositories) >= self._settings.num_repositories:
            outcome = CrawlOutcome.SUCCEEDED
        else:
            outcome = CrawlOutcome.EXHAUSTED

        logger.info(
            f"Finished crawl for {subject.name}: {outcome.value} after {attempts} "
            f"attempts with {len(state.repositories)} repositories"
        )

        return CrawlResult(
            subject=subject.with_repositories(state.repositories),
            outcome=outcome,
            attempts=attempts,
            errors_encountered=state.errors_encountered
        )


def _last_state(retry_state: RetryCallState) -> CrawlState:
    """Return the partial state instead of raising once the budget is spent."""
    return retry_state.outcome.result()
