"""Domain models representing core business entities."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


@dataclass(frozen=True)
class Topic:
    """A repository topic and its GitHub URL."""
    name: str
    url: str


@dataclass(frozen=True)
class Label:
    """Tally of one beginner-friendly label over a repository's issues."""
    name: str
    count: int
    color: str


@dataclass(frozen=True)
class Repository:
    """Immutable domain entity representing a GitHub repository.

    Created once by the record normalizer from a raw search result and
    owned by the Subject that collected it.
    """
    name_with_owner: str
    url: str
    description: str
    homepage_url: str
    avatar_url: str
    num_forks: int
    num_issues: int
    num_pull_requests: int
    num_stars: int
    topics: Tuple[Topic, ...] = ()
    labels: Tuple[Label, ...] = ()
    languages: Tuple[str, ...] = ()
    # Reserved: per-issue label sets, never populated by the crawler
    issues: Tuple[Tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class Subject:
    """A crawl unit: one language and the repositories collected for it."""
    name: str
    search_term: str
    repositories: Tuple[Repository, ...] = ()

    def with_repositories(self, repositories: Iterable[Repository]) -> 'Subject':
        """Returns a new Subject instance holding the collected repositories."""
        return Subject(
            name=self.name,
            search_term=self.search_term,
            repositories=tuple(repositories)
        )


@dataclass(frozen=True)
class RateLimit:
    """GitHub GraphQL rate limit status reported alongside a page."""
    remaining: int
    cost: int = 1
    reset_at: Optional[datetime] = None


@dataclass(frozen=True)
class Page:
    """One page of raw search results."""
    records: Tuple[Optional[Dict[str, Any]], ...]
    end_cursor: Optional[str]
    rate_limit: Optional[RateLimit] = None
    repository_count: int = 0
    has_next_page: bool = True

    @property
    def rate_limited(self) -> bool:
        """True when the API reports no remaining request budget."""
        return self.rate_limit is not None and self.rate_limit.remaining <= 0


class ResponseStatus(Enum):
    """Classification of a page request's outcome."""
    OK = "ok"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


class CrawlOutcome(Enum):
    """Terminal state of a subject's crawl."""
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class CrawlResult:
    """A finished crawl: the committed subject and how the crawl ended."""
    subject: Subject
    outcome: CrawlOutcome
    attempts: int
    errors_encountered: int = 0
