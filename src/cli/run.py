import argparse
import asyncio
from datetime import datetime
import logging
import sys
import time
from typing import List, Optional

from core.schemas import CreateDigestJobData
from ingestion.search import HttpSearchService
from services.cache import RedisCache
from services.config import Config, load_config
from services.database import DigestStore
from services.llm import LLMClient
from services.logging import setup_logging
from services.scheduler import next_run_time
from workflows.create_digest import CreateDigestJob

logger = logging.getLogger(__name__)


async def run_once(config: Config, user_ids: List[str]) -> int:
    """
    Run the digest job for every user. Returns the number of failed runs.
    """
    start_time = time.perf_counter()

    # ----------------------------
    # Initialize shared services
    # ----------------------------
    llm = LLMClient(
        base_url=config.OLLAMA_BASE_URL,
        model=config.OLLAMA_MODEL,
        temperature=config.OLLAMA_TEMPERATURE,
    )
    search = HttpSearchService(config.SEARCH_API_URL, api_key=config.SEARCH_API_KEY)
    cache = RedisCache(config.REDIS_URL)
    store = DigestStore(config.DATABASE_PATH)

    job = CreateDigestJob(
        definition_url=config.PROMPT_FILE_URL,
        search=search,
        llm=llm,
        cache=cache,
        store=store,
        speech_options=config.speech_options(),
    )

    failures = 0
    try:
        for user_id in user_ids:
            try:
                logger.info(f"Running {job.name} for user {user_id}")
                await job.run(CreateDigestJobData(user_id=user_id))
            except Exception as e:
                failures += 1
                logger.exception(f"Digest job failed: user={user_id}: {e}")
    finally:
        await search.close()
        await cache.close()

    end_time = time.perf_counter()
    logger.info(f"Digest run completed ({failures} failed). Total time: {end_time - start_time}")
    return failures


async def run_scheduled(config: Config, user_ids: List[str]) -> None:
    while True:
        run_at = next_run_time(hour=config.DIGEST_HOUR)
        delay = (run_at - datetime.now()).total_seconds()
        logger.info(f"Next digest run at {run_at.isoformat()}")
        await asyncio.sleep(max(delay, 0))
        await run_once(config, user_ids)


async def check(config: Config) -> bool:
    llm = LLMClient(base_url=config.OLLAMA_BASE_URL, model=config.OLLAMA_MODEL)
    healthy = await llm.health_check()
    logger.info(f"LLM health check: {'ok' if healthy else 'failed'}")
    return healthy


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build personalized library digests")
    parser.add_argument(
        "--user-id",
        dest="user_ids",
        action="append",
        help="User to build a digest for (repeatable, defaults to DIGEST_USER_IDS)",
    )
    parser.add_argument("--config", help="Path to config.yml")
    parser.add_argument("--schedule", action="store_true", help="Run daily at DIGEST_HOUR")
    parser.add_argument("--check", action="store_true", help="Check the LLM server and exit")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)
    setup_logging(config.LOG_LEVEL)

    if args.check:
        return 0 if await check(config) else 1

    user_ids = args.user_ids or config.DIGEST_USER_IDS
    if not user_ids:
        logger.error("No users given: pass --user-id or set DIGEST_USER_IDS")
        return 2

    if args.schedule:
        await run_scheduled(config, user_ids)
        return 0

    failures = await run_once(config, user_ids)
    return 1 if failures else 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
