"""Tests for configuration loading."""
import json
from pathlib import Path

import pytest

from good_first_repos.config import (
    DEFAULT_OUTPUT_FILE,
    CrawlSettings,
    load_config,
    load_crawl_settings,
    load_subjects
)
from good_first_repos.domain.errors import ConfigurationError
from good_first_repos.domain.labels import LABELS
from good_first_repos.domain.models import Subject


def test_defaults():
    settings = load_crawl_settings({})

    assert settings == CrawlSettings()
    assert settings.page_size == 15
    assert settings.min_issues == 10
    assert settings.num_repositories == 20
    assert settings.num_retries == 100
    assert settings.base_delay == 10.0
    assert settings.labels == LABELS


def test_overrides():
    settings = load_crawl_settings({"PAGE_SIZE": "30", "BASE_DELAY": "0.5", "NUM_RETRIES": ""})

    assert settings.page_size == 30
    assert settings.base_delay == 0.5
    assert settings.num_retries == 100


@pytest.mark.parametrize("env", [
    {"PAGE_SIZE": "many"},
    {"NUM_RETRIES": "0"},
    {"BASE_DELAY": "-1"},
])
def test_invalid_settings(env):
    with pytest.raises(ConfigurationError):
        load_crawl_settings(env)


def test_missing_token():
    with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
        load_config({})


def test_load_config():
    config = load_config({"GITHUB_TOKEN": "secret", "LOG_LEVEL": "debug", "OUTPUT_FILE": "out/data.js"})

    assert config.github_token == "secret"
    assert config.log_level == "DEBUG"
    assert config.output_file == Path("out/data.js")
    assert config.languages_file == Path("languages.json")
    assert load_config({"GITHUB_TOKEN": "secret"}).output_file == Path(DEFAULT_OUTPUT_FILE)


def test_unknown_log_level():
    with pytest.raises(ConfigurationError, match="LOG_LEVEL"):
        load_config({"GITHUB_TOKEN": "secret", "LOG_LEVEL": "LOUD"})


def test_load_subjects(tmp_path):
    path = tmp_path / "languages.json"
    path.write_text(json.dumps([
        {"name": "C++", "search_term": "cpp"},
        {"name": "Python"},
    ]))

    assert load_subjects(path) == [
        Subject(name="C++", search_term="cpp"),
        Subject(name="Python", search_term="Python"),
    ]


def test_missing_languages_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_subjects(tmp_path / "missing.json")


@pytest.mark.parametrize("contents", [
    "not json",
    '{"name": "Python"}',
    '[{"search_term": "python"}]',
    '[{"name": "Python", "search_term": 3}]',
])
def test_invalid_languages_file(tmp_path, contents):
    path = tmp_path / "languages.json"
    path.write_text(contents)

    with pytest.raises(ConfigurationError):
        load_subjects(path)
