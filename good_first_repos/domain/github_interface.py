"""GitHub search interface (port) for fetching pages of raw results.

This is the anti-corruption layer that shields the domain from GitHub API specifics.
"""
from abc import ABC, abstractmethod
from typing import Optional
from good_first_repos.domain.models import Page


class IPageSource(ABC):
    """Abstract interface for one paginated search request."""

    @abstractmethod
    async def fetch_page(
        self,
        search_term: str,
        page_size: int,
        cursor: Optional[str] = None
    ) -> Page:
        """Fetch one page of repository search results.

        Args:
            search_term: Language to search for
            page_size: Number of results to request
            cursor: End cursor of the previous page, None for the first page

        Returns:
            The page's raw records, end cursor and rate limit status

        Raises:
            PageError: When the request failed; subclasses classify why
        """
        pass
