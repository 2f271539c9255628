"""Concurrent fan-out of one crawl per language, with ordered fan-in."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, Tuple, TypeVar

from good_first_repos.application.crawler_service import CrawlerService
from good_first_repos.domain.literal import to_literal
from good_first_repos.domain.models import CrawlResult, Subject


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _fan_out(
    subjects: Sequence[Subject],
    worker: Callable[[Subject], Awaitable[T]]
) -> List[Tuple[str, T]]:
    """Run one task per subject and collect every result from a queue.

    Each task puts exactly one item. The first task error is re-raised once
    the remaining tasks are cancelled and have finished.
    """
    queue: asyncio.Queue = asyncio.Queue()

    async def run(subject: Subject) -> None:
        try:
            item = (subject.name, await worker(subject), None)
        except Exception as e:
            item = (subject.name, None, e)
        await queue.put(item)

    tasks = [asyncio.create_task(run(subject)) for subject in subjects]
    results = []
    try:
        for _ in tasks:
            name, result, error = await queue.get()
            if error is not None:
                logger.error(f"Crawl for {name} failed: {error}")
                raise error
            results.append((name, result))
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    return sorted(results, key=lambda item: item[0])


class Dispatcher:
    """Runs every language's crawl concurrently.

    Crawls share nothing mutable: each owns its own state and the page source
    holds only the read-only token. Results are ordered by language name,
    independent of completion order.
    """

    def __init__(self, crawler: CrawlerService):
        """Initialize dispatcher.

        Args:
            crawler: Crawler service shared by every language's task
        """
        self._crawler = crawler

    async def run_all_results(self, subjects: Sequence[Subject]) -> List[CrawlResult]:
        """Crawl every subject and return the crawl results sorted by name.

        Args:
            subjects: Languages to crawl

        Returns:
            One CrawlResult per subject, with its outcome and attempt count
        """
        logger.info(f"Dispatching {len(subjects)} crawls")
        results = await _fan_out(subjects, self._crawler.crawl)
        return [result for _, result in results]

    async def run_all(self, subjects: Sequence[Subject]) -> List[Subject]:
        """Crawl every subject and return them sorted by name."""
        return [result.subject for result in await self.run_all_results(subjects)]

    async def run_all_literals(self, subjects: Sequence[Subject]) -> List[str]:
        """Crawl every subject, rendering each one inside its own task.

        Returns:
            Rendered subjects, sorted by name
        """
        async def crawl_and_render(subject: Subject) -> str:
            result = await self._crawler.crawl(subject)
            return to_literal(result.subject)

        results = await _fan_out(subjects, crawl_and_render)
        return [literal for _, literal in results]
