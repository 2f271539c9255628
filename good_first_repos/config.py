"""Run configuration: crawl settings from the environment, subjects from JSON."""
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple, TypeVar, Union

from good_first_repos.domain.errors import ConfigurationError
from good_first_repos.domain.labels import LABELS
from good_first_repos.domain.models import Subject


T = TypeVar("T")

DEFAULT_LANGUAGES_FILE = "languages.json"
DEFAULT_OUTPUT_FILE = "frontend/src/generated/data.js"


@dataclass(frozen=True)
class CrawlSettings:
    """Constants shared read-only by every crawl."""
    page_size: int = 15
    min_issues: int = 10
    num_repositories: int = 20
    num_retries: int = 100
    base_delay: float = 10.0
    num_languages: int = 10
    avatar_size: int = 64
    min_stars: int = 500
    labels: Tuple[str, ...] = LABELS


@dataclass(frozen=True)
class AppConfig:
    """Everything the entry point needs to run a crawl."""
    github_token: str
    languages_file: Path
    output_file: Path
    log_level: str
    crawl: CrawlSettings


def _env_value(
    environ: Mapping[str, str],
    name: str,
    default: T,
    convert: Callable[[str], T],
    minimum: Union[int, float]
) -> T:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = convert(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")
    return value


def load_crawl_settings(environ: Optional[Mapping[str, str]] = None) -> CrawlSettings:
    """Build crawl settings from environment variables, falling back to defaults."""
    env = os.environ if environ is None else environ
    defaults = CrawlSettings()
    return CrawlSettings(
        page_size=_env_value(env, "PAGE_SIZE", defaults.page_size, int, 1),
        min_issues=_env_value(env, "MIN_ISSUES", defaults.min_issues, int, 0),
        num_repositories=_env_value(env, "NUM_REPOSITORIES", defaults.num_repositories, int, 1),
        num_retries=_env_value(env, "NUM_RETRIES", defaults.num_retries, int, 1),
        base_delay=_env_value(env, "BASE_DELAY", defaults.base_delay, float, 0),
        num_languages=_env_value(env, "NUM_LANGUAGES", defaults.num_languages, int, 1),
        avatar_size=_env_value(env, "AVATAR_SIZE", defaults.avatar_size, int, 1),
        min_stars=_env_value(env, "MIN_STARS", defaults.min_stars, int, 0),
    )


def _log_level(environ: Mapping[str, str]) -> str:
    level = (environ.get("LOG_LEVEL") or "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"LOG_LEVEL must be a logging level name, got {level!r}")
    return level


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build the application configuration.

    Raises:
        ConfigurationError: When GITHUB_TOKEN is missing, LOG_LEVEL is unknown
            or a setting is invalid
    """
    env = os.environ if environ is None else environ
    github_token = env.get("GITHUB_TOKEN")
    if not github_token:
        raise ConfigurationError("GITHUB_TOKEN environment variable is required")

    return AppConfig(
        github_token=github_token,
        languages_file=Path(env.get("LANGUAGES_FILE") or DEFAULT_LANGUAGES_FILE),
        output_file=Path(env.get("OUTPUT_FILE") or DEFAULT_OUTPUT_FILE),
        log_level=_log_level(env),
        crawl=load_crawl_settings(env),
    )


def load_subjects(path: Union[str, Path]) -> List[Subject]:
    """Read the languages to crawl.

    The file holds a JSON array of ``{"name": ..., "search_term": ...}``
    objects; ``search_term`` defaults to ``name``.

    Raises:
        ConfigurationError: When the file is unreadable or malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            entries = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read languages file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Languages file {path} is not valid JSON: {e}") from e

    if not isinstance(entries, list):
        raise ConfigurationError(f"Languages file {path} must contain a JSON array")

    subjects = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str) or not entry["name"]:
            raise ConfigurationError(f"Entry {index} in {path} needs a non-empty 'name'")
        search_term = entry.get("search_term") or entry["name"]
        if not isinstance(search_term, str):
            raise ConfigurationError(f"Entry {index} in {path} has a non-string 'search_term'")
        subjects.append(Subject(name=entry["name"], search_term=search_term))
    return subjects
