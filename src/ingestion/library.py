"""
Selector-driven retrieval of preference and candidate items.
"""
import asyncio
import logging
from typing import List, Sequence

from core.schemas import LibraryItem, Selector, DigestDefinition
from ingestion.base import SearchService
from processing.deduplicator import dedupe_by_id
from services.converters import html_to_markdown

logger = logging.getLogger(__name__)


async def _run_selectors(
    search: SearchService,
    selectors: Sequence[Selector],
    user_id: str,
    include_content: bool,
) -> List[LibraryItem]:
    """
    Run every selector concurrently, then flatten in selector order and dedupe.
    A failing selector fails the whole retrieval.
    """
    results = await asyncio.gather(*[
        search.search(
            query=selector.query,
            size=selector.count,
            include_content=include_content,
            user_id=user_id,
        )
        for selector in selectors
    ])

    flattened = [item for items in results for item in items]
    unique = dedupe_by_id(flattened)
    logger.info(f"Selectors returned {len(flattened)} items, {len(unique)} unique")
    return unique


async def get_preferences_list(
    user_id: str,
    definition: DigestDefinition,
    search: SearchService,
) -> List[LibraryItem]:
    """Items the user already read or highlighted."""
    return await _run_selectors(
        search,
        definition.preference_selectors,
        user_id,
        include_content=False,
    )


async def get_candidates_list(
    user_id: str,
    definition: DigestDefinition,
    search: SearchService,
) -> List[LibraryItem]:
    """Items that may go into the digest, with content converted to markdown."""
    candidates = await _run_selectors(
        search,
        definition.candidate_selectors,
        user_id,
        include_content=True,
    )

    return [
        item.model_copy(update={"readable_content": html_to_markdown(item.readable_content)})
        for item in candidates
    ]
