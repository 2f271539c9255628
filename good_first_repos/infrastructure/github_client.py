"""GitHub GraphQL search client returning pages of raw repository records."""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import aiohttp
from gql import gql, Client
from gql.transport.aiohttp import AIOHTTPTransport
from gql.transport.exceptions import (
    TransportError,
    TransportProtocolError,
    TransportQueryError,
    TransportServerError
)
from good_first_repos.domain.errors import (
    MalformedPayload,
    NoData,
    NonSuccessStatus,
    RateLimited,
    TransportFailure
)
from good_first_repos.domain.github_interface import IPageSource
from good_first_repos.domain.labels import LABELS
from good_first_repos.domain.models import Page, RateLimit


logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com/graphql"
RATE_LIMIT_STATUS = 403


class GitHubSearchClient(IPageSource):
    """GitHub GraphQL search client.

    Implements the IPageSource port. Every request opens its own session so
    concurrent crawls never share a connection; only the token is shared.
    """

    # GraphQL query to fetch repositories together with their labelled issues
    REPOSITORY_QUERY = gql("""
        query SearchRepositories(
            $query: String!
            $numResults: Int!
            $cursor: String
            $labels: [String!]
            $numLanguages: Int!
            $avatarSize: Int!
        ) {
            search(query: $query, type: REPOSITORY, first: $numResults, after: $cursor) {
                repositoryCount
                pageInfo {
                    hasNextPage
                    endCursor
                }
                nodes {
                    __typename
                    ... on Repository {
                        nameWithOwner
                        url
                        description
                        homepageUrl
                        owner {
                            __typename
                            ... on User {
                                avatarUrl(size: $avatarSize)
                            }
                            ... on Organization {
                                avatarUrl(size: $avatarSize)
                            }
                        }
                        forkCount
                        stargazers {
                            totalCount
                        }
                        pullRequests(states: OPEN) {
                            totalCount
                        }
                        issues(first: 100, states: OPEN, labels: $labels) {
                            totalCount
                            nodes {
                                labels(first: 20) {
                                    nodes {
                                        name
                                        color
                                    }
                                }
                            }
                        }
                        repositoryTopics(first: 10) {
                            nodes {
                                url
                                topic {
                                    name
                                }
                            }
                        }
                        languages(first: $numLanguages, orderBy: {field: SIZE, direction: DESC}) {
                            nodes {
                                name
                            }
                        }
                    }
                }
            }
            rateLimit {
                cost
                remaining
                resetAt
            }
        }
    """)

    def __init__(
        self,
        access_token: str,
        labels: Sequence[str] = LABELS,
        min_stars: int = 500,
        num_languages: int = 10,
        avatar_size: int = 64,
        timeout: int = 30
    ):
        """Initialize GitHub client.

        Args:
            access_token: GitHub personal access token
            labels: Issue labels whose issues are fetched with each repository
            min_stars: Minimum star count of searched repositories
            num_languages: Number of languages fetched per repository
            avatar_size: Pixel size of the owner avatar URL
            timeout: Request timeout in seconds
        """
        self._access_token = access_token
        self._labels = list(labels)
        self._min_stars = min_stars
        self._num_languages = num_languages
        self._avatar_size = avatar_size
        self._timeout = timeout

    def build_search_query(self, search_term: str) -> str:
        """Return the search string for one language."""
        return f"language:{search_term} stars:>={self._min_stars} is:public archived:false"

    def build_variables(
        self,
        search_term: str,
        page_size: int,
        cursor: Optional[str]
    ) -> Dict[str, Any]:
        """Return the GraphQL variables for one page request."""
        return {
            "query": self.build_search_query(search_term),
            "numResults": page_size,
            "cursor": cursor,
            "labels": self._labels,
            "numLanguages": self._num_languages,
            "avatarSize": self._avatar_size,
        }

    def _new_client(self) -> Client:
        """Create a fresh GraphQL client with its own aiohttp transport."""
        headers = {"Authorization": f"Bearer {self._access_token}"}
        transport = AIOHTTPTransport(
            url=GITHUB_API_URL,
            headers=headers,
            timeout=self._timeout
        )
        return Client(transport=transport, fetch_schema_from_transport=False)

    async def _execute_query(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Execute the search query, classifying every failure.

        Raises:
            RateLimited: On HTTP 403 or a RATE_LIMITED GraphQL error
            NonSuccessStatus: On any other HTTP error status
            NoData: When the response carries errors and no data
            MalformedPayload: When the response is not a GraphQL envelope
            TransportFailure: When no response was received
        """
        try:
            async with self._new_client() as session:
                return await session.execute(
                    self.REPOSITORY_QUERY,
                    variable_values=variables
                )
        except TransportServerError as e:
            logger.error(f"GitHub responded with status {e.code}: {e}")
            if e.code == RATE_LIMIT_STATUS:
                raise RateLimited(e.code, str(e)) from e
            raise NonSuccessStatus(e.code, str(e)) from e
        except TransportQueryError as e:
            if _is_rate_limit_error(e):
                logger.error(f"GitHub rate limit exceeded: {e}")
                raise RateLimited(message=str(e)) from e
            if e.data is None:
                logger.error(f"GraphQL query failed without data: {e}")
                raise NoData(str(e)) from e
            # Partial results: GitHub nulls the failing nodes and keeps the rest
            logger.warning(f"GraphQL query returned partial data: {e}")
            return e.data
        except TransportProtocolError as e:
            logger.error(f"Malformed GraphQL response: {e}")
            raise MalformedPayload(str(e)) from e
        except (TransportError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error executing GraphQL query: {e!r}")
            raise TransportFailure(str(e) or repr(e)) from e

    async def fetch_page(
        self,
        search_term: str,
        page_size: int,
        cursor: Optional[str] = None
    ) -> Page:
        """Fetch one page of search results for a language."""
        result = await self._execute_query(
            self.build_variables(search_term, page_size, cursor)
        )
        page = parse_page(result)
        logger.info(
            f"[{search_term}] num repositories: {page.repository_count}, "
            f"rate limit: {page.rate_limit}"
        )
        return page


def _is_rate_limit_error(error: TransportQueryError) -> bool:
    for item in error.errors or []:
        if isinstance(item, dict) and item.get("type") == "RATE_LIMITED":
            return True
    return "rate limit" in str(error).lower()


def _parse_rate_limit(data: Optional[Dict[str, Any]]) -> Optional[RateLimit]:
    if not data:
        return None
    reset_at = None
    reset_at_str = data.get("resetAt")
    if reset_at_str:
        reset_at = datetime.fromisoformat(reset_at_str.replace("Z", "+00:00"))
    return RateLimit(
        remaining=data.get("remaining", 0),
        cost=data.get("cost", 1),
        reset_at=reset_at
    )


def parse_page(data: Optional[Dict[str, Any]]) -> Page:
    """Convert the query's data section into a Page.

    Raises:
        NoData: When the data section is absent
        MalformedPayload: When the search connection is missing
    """
    if data is None:
        raise NoData("No data found.")

    search = data.get("search")
    if not isinstance(search, dict):
        raise MalformedPayload("Response data has no search connection")

    page_info = search.get("pageInfo") or {}
    end_cursor = page_info.get("endCursor")
    return Page(
        records=tuple(search.get("nodes") or ()),
        end_cursor=end_cursor,
        has_next_page=bool(page_info.get("hasNextPage", end_cursor is not None)),
        rate_limit=_parse_rate_limit(data.get("rateLimit")),
        repository_count=search.get("repositoryCount", 0)
    )
