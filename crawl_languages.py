"""Main entry point for the beginner-friendly repository crawler.

Crawls every language in the languages file and writes the results as a
JavaScript module for the frontend.
"""
import asyncio
import sys
import logging
from dotenv import load_dotenv
from good_first_repos.application.crawler_service import CrawlerService
from good_first_repos.application.dispatcher import Dispatcher
from good_first_repos.config import load_config, load_subjects
from good_first_repos.domain.errors import ConfigurationError
from good_first_repos.domain.literal import to_literal, to_module
from good_first_repos.infrastructure.file_sink import FileArtifactSink
from good_first_repos.infrastructure.github_client import GitHubSearchClient

# Load environment variables from .env or env file
load_dotenv('.env') or load_dotenv('env')


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main() -> int:
    """Execute the crawling operation and return the process exit status."""
    try:
        config = load_config()
        logging.getLogger().setLevel(config.log_level)
        subjects = load_subjects(config.languages_file)
        sink = FileArtifactSink(config.output_file)
        sink.ensure_writable()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    settings = config.crawl
    logger.info(
        f"Starting crawl of {len(subjects)} languages for "
        f"{settings.num_repositories} repositories each"
    )

    github_client = GitHubSearchClient(
        config.github_token,
        labels=settings.labels,
        min_stars=settings.min_stars,
        num_languages=settings.num_languages,
        avatar_size=settings.avatar_size
    )
    dispatcher = Dispatcher(CrawlerService(github_client, settings))

    try:
        results = await dispatcher.run_all_results(subjects)
        sink.write(to_module(to_literal(result.subject) for result in results))
    except Exception as e:
        logger.error(f"Crawl failed: {e}", exc_info=True)
        return 1

    logger.info("=" * 50)
    logger.info("Crawl Metrics:")
    for result in results:
        logger.info(
            f"  {result.subject.name}: {len(result.subject.repositories)} repositories, "
            f"{result.outcome.value} after {result.attempts} attempts, "
            f"{result.errors_encountered} errors"
        )
    logger.info(f"Wrote {len(results)} languages to {sink.path}")
    logger.info("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
