"""Conversion of raw GraphQL search records into Repository entities.

This is the anti-corruption layer between GitHub's response shape and the
domain: every field access on a raw record happens here.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from good_first_repos.domain.errors import MalformedRecordError
from good_first_repos.domain.labels import LABELS, aggregate_labels
from good_first_repos.domain.models import Repository, Topic


logger = logging.getLogger(__name__)


def _required(container: Optional[Dict[str, Any]], key: str) -> Any:
    """Fetch a field that must be present and non-null."""
    if not isinstance(container, dict):
        raise MalformedRecordError(f"Expected an object holding '{key}', got {container!r}")
    value = container.get(key)
    if value is None:
        raise MalformedRecordError(f"Missing required field '{key}'")
    return value


def _nodes(connection: Optional[Dict[str, Any]]) -> List[Any]:
    """Return a connection's nodes, treating a null node list as empty."""
    if not isinstance(connection, dict):
        raise MalformedRecordError(f"Expected a connection object, got {connection!r}")
    return connection.get("nodes") or []


def _total_count(record: Dict[str, Any], key: str) -> int:
    value = _required(_required(record, key), "totalCount")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(f"Invalid totalCount for '{key}': {value!r}") from e


def _avatar_url(owner: Dict[str, Any]) -> str:
    # User and Organization both expose avatarUrl
    return _required(owner, "avatarUrl")


def _issue_labels(record: Dict[str, Any]) -> List[List[Dict[str, str]]]:
    return [
        [label for label in _nodes(_required(issue, "labels")) if label is not None]
        for issue in _nodes(_required(record, "issues"))
        if issue is not None
    ]


def _topics(record: Dict[str, Any]) -> List[Topic]:
    topics = []
    for node in _nodes(_required(record, "repositoryTopics")):
        if node is None:
            continue
        topics.append(Topic(
            name=_required(_required(node, "topic"), "name"),
            url=_required(node, "url")
        ))
    return topics


def _languages(record: Dict[str, Any]) -> List[str]:
    languages = record.get("languages")
    if languages is None:
        return []
    return [_required(node, "name") for node in _nodes(languages) if node is not None]


def parse_repository(
    record: Dict[str, Any],
    vocabulary: Sequence[str] = LABELS
) -> Repository:
    """Build a Repository from a repository-typed search record.

    Raises:
        MalformedRecordError: When a required field or sub-object is missing
    """
    try:
        return Repository(
            name_with_owner=_required(record, "nameWithOwner"),
            url=_required(record, "url"),
            description=_required(record, "description"),
            homepage_url=record.get("homepageUrl") or "",
            avatar_url=_avatar_url(_required(record, "owner")),
            num_forks=int(_required(record, "forkCount")),
            num_issues=_total_count(record, "issues"),
            num_pull_requests=_total_count(record, "pullRequests"),
            num_stars=_total_count(record, "stargazers"),
            topics=tuple(_topics(record)),
            labels=aggregate_labels(_issue_labels(record), vocabulary),
            languages=tuple(_languages(record)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedRecordError(f"Unexpected record shape: {e}") from e


def normalize(
    record: Optional[Dict[str, Any]],
    min_issues: int,
    vocabulary: Sequence[str] = LABELS
) -> Optional[Repository]:
    """Convert one raw search result into a Repository, or reject it.

    Rejected records are logged and dropped; this never raises for a bad
    record so the rest of the page is still processed.

    Args:
        record: One node of the search connection, possibly null
        min_issues: Minimum number of matching issues a repository needs
        vocabulary: Label names to tally

    Returns:
        The Repository, or None when the record was rejected
    """
    if record is None:
        logger.warning("Search result is empty.")
        return None

    if record.get("__typename") != "Repository":
        logger.warning(f"Search result is not a Repository: {record.get('__typename')}")
        return None

    name = record.get("nameWithOwner", "<unknown>")
    try:
        num_issues = _total_count(record, "issues")
        if num_issues < min_issues:
            logger.info(f"Not enough issues in {name}: {num_issues} < {min_issues}")
            return None
        return parse_repository(record, vocabulary)
    except MalformedRecordError as e:
        logger.warning(f"Dropping malformed search result {name}: {e}")
        return None
