"""
User profile resolution: a free-text description of a user's reading
preferences, generated once by the LLM and then served from the cache.
"""
import logging
from typing import List

from langchain_core.prompts import PromptTemplate

from core.schemas import DigestDefinition, LibraryItem
from ingestion.base import SearchService
from ingestion.library import get_preferences_list
from services.cache import KeyValueCache
from services.llm import LLMClient

logger = logging.getLogger(__name__)


def profile_key(user_id: str) -> str:
    return f"userProfile:{user_id}"


async def create_user_profile(
    preferences: List[LibraryItem],
    definition: DigestDefinition,
    llm: LLMClient,
) -> str:
    """
    Ask the LLM to describe the user based on the titles they engaged with.
    """
    template = PromptTemplate.from_template(
        definition.zero_shot.user_preferences_profile_prompt
    )
    prompt = template.format(
        titles="\n".join(f"* {item.title}" for item in preferences),
    )
    return await llm.complete(prompt)


async def find_or_create_user_profile(
    user_id: str,
    definition: DigestDefinition,
    search: SearchService,
    llm: LLMClient,
    cache: KeyValueCache,
) -> str:
    """
    Return the cached profile, or build and cache one.

    Concurrent misses for the same user are not coalesced; the last write wins.
    """
    key = profile_key(user_id)
    existing = await cache.get(key)
    if existing:
        logger.info(f"Using cached profile for user {user_id}")
        return existing

    preferences = await get_preferences_list(user_id, definition, search)
    logger.info(f"Building profile for user {user_id} from {len(preferences)} items")
    profile = await create_user_profile(preferences, definition, llm)

    # No expiry: the profile is reused until removed externally
    await cache.set(key, profile)

    return profile
