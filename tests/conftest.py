"""Shared fixtures: raw GraphQL search records and in-memory page sources."""
from typing import List, Optional, Union

import pytest

from good_first_repos.config import CrawlSettings
from good_first_repos.domain.errors import PageError
from good_first_repos.domain.github_interface import IPageSource
from good_first_repos.domain.models import Page


def build_record(
    name_with_owner: str = "octo/repo",
    total_issues: int = 12,
    issue_labels: Optional[List[List[dict]]] = None,
    description: Optional[str] = "A repository",
    owner_type: str = "Organization",
) -> dict:
    """Build one repository search node shaped like the GraphQL response."""
    if issue_labels is None:
        issue_labels = [[{"name": "good first issue", "color": "7057ff"}]]
    return {
        "__typename": "Repository",
        "nameWithOwner": name_with_owner,
        "url": f"https://github.com/{name_with_owner}",
        "description": description,
        "homepageUrl": None,
        "owner": {
            "__typename": owner_type,
            "avatarUrl": "https://avatars.githubusercontent.com/u/1?s=64",
        },
        "forkCount": 7,
        "stargazers": {"totalCount": 900},
        "pullRequests": {"totalCount": 3},
        "issues": {
            "totalCount": total_issues,
            "nodes": [{"labels": {"nodes": labels}} for labels in issue_labels],
        },
        "repositoryTopics": {
            "nodes": [{"url": "https://github.com/topics/cli", "topic": {"name": "cli"}}],
        },
        "languages": {"nodes": [{"name": "Python"}, {"name": "Shell"}]},
    }


class FakePageSource(IPageSource):
    """Replays scripted pages or errors, recording every call."""

    def __init__(self, responses: List[Union[Page, PageError]], repeat_last: bool = True):
        self._responses = list(responses)
        self._repeat_last = repeat_last
        self.calls = []

    async def fetch_page(self, search_term, page_size, cursor=None):
        self.calls.append((search_term, page_size, cursor))
        if len(self._responses) > 1 or not self._repeat_last:
            response = self._responses.pop(0)
        else:
            response = self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def settings():
    return CrawlSettings(
        page_size=15,
        min_issues=10,
        num_repositories=20,
        num_retries=100,
        base_delay=10.0,
    )


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
