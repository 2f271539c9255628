"""Tests for search record normalization."""
import logging

import pytest

from conftest import build_record
from good_first_repos.domain.errors import MalformedRecordError
from good_first_repos.domain.models import Label, Topic
from good_first_repos.domain.normalizer import normalize, parse_repository


def test_well_formed_record():
    """Test converting a repository search node into a Repository."""
    repo = normalize(build_record(), min_issues=10)

    assert repo is not None
    assert repo.name_with_owner == "octo/repo"
    assert repo.url == "https://github.com/octo/repo"
    assert repo.description == "A repository"
    assert repo.homepage_url == ""
    assert repo.avatar_url == "https://avatars.githubusercontent.com/u/1?s=64"
    assert repo.num_forks == 7
    assert repo.num_issues == 12
    assert repo.num_pull_requests == 3
    assert repo.num_stars == 900
    assert repo.topics == (Topic(name="cli", url="https://github.com/topics/cli"),)
    assert repo.labels == (Label(name="good first issue", count=1, color="7057ff"),)
    assert repo.languages == ("Python", "Shell")
    assert repo.issues == ()


@pytest.mark.parametrize("owner_type", ["User", "Organization"])
def test_avatar_from_either_owner_type(owner_type):
    repo = normalize(build_record(owner_type=owner_type), min_issues=10)

    assert repo.avatar_url == "https://avatars.githubusercontent.com/u/1?s=64"


def test_empty_result_is_rejected(caplog):
    with caplog.at_level(logging.INFO):
        assert normalize(None, min_issues=10) is None

    assert any(r.levelno == logging.WARNING and "empty" in r.message for r in caplog.records)


def test_non_repository_is_rejected(caplog):
    with caplog.at_level(logging.INFO):
        assert normalize({"__typename": "User", "login": "octocat"}, min_issues=10) is None

    assert any(r.levelno == logging.WARNING and "not a Repository" in r.message for r in caplog.records)


def test_missing_typename_is_rejected():
    assert normalize({}, min_issues=10) is None


def test_below_issue_threshold_is_rejected(caplog):
    with caplog.at_level(logging.INFO):
        assert normalize(build_record(total_issues=9), min_issues=10) is None

    rejections = [r for r in caplog.records if "Not enough issues" in r.message]
    assert len(rejections) == 1
    assert rejections[0].levelno == logging.INFO


def test_issue_threshold_is_inclusive():
    assert normalize(build_record(total_issues=10), min_issues=10) is not None


def test_missing_description_is_dropped():
    assert normalize(build_record(description=None), min_issues=10) is None


def test_missing_labels_container_is_dropped():
    record = build_record()
    record["issues"]["nodes"][0]["labels"] = None

    assert normalize(record, min_issues=10) is None


def test_missing_issues_is_dropped():
    record = build_record()
    del record["issues"]

    assert normalize(record, min_issues=10) is None


def test_parse_repository_raises_on_malformed_record():
    record = build_record()
    record["stargazers"] = None

    with pytest.raises(MalformedRecordError):
        parse_repository(record)


def test_null_nodes_are_skipped():
    record = build_record()
    record["languages"]["nodes"].append(None)
    record["repositoryTopics"]["nodes"].append(None)
    record["issues"]["nodes"].append(None)

    repo = normalize(record, min_issues=10)

    assert repo.languages == ("Python", "Shell")
    assert len(repo.topics) == 1


def test_labels_tallied_against_vocabulary():
    record = build_record(issue_labels=[
        [{"name": "help wanted", "color": "008672"}, {"name": "bug", "color": "d73a4a"}],
        [{"name": "help wanted", "color": "00ff00"}, {"name": "good first issue", "color": "7057ff"}],
    ])

    repo = normalize(record, min_issues=10)

    assert repo.labels == (
        Label(name="help wanted", count=2, color="00ff00"),
        Label(name="good first issue", count=1, color="7057ff"),
    )


def test_custom_vocabulary():
    record = build_record(issue_labels=[[{"name": "bug", "color": "d73a4a"}]])

    repo = normalize(record, min_issues=10, vocabulary=("bug",))

    assert repo.labels == (Label(name="bug", count=1, color="d73a4a"),)
