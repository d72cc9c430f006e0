import json
import logging
from typing import Any, Dict, List, Optional, Set

from langchain_core.prompts import PromptTemplate

from core.entities import RankedItem
from core.schemas import DigestDefinition, LibraryItem
from services.llm import LLMClient

logger = logging.getLogger(__name__)


def _match_candidate(
    entry: Dict[str, Any],
    candidates: List[LibraryItem],
) -> Optional[LibraryItem]:
    """
    Resolve a ranking entry to a candidate by index, item id, or title.
    An exact title match wins over an index that points elsewhere.
    """
    index = entry.get("index")
    if isinstance(index, int) and 0 <= index < len(candidates):
        indexed = candidates[index]
        title = entry.get("title")
        if not title or indexed.title == title:
            return indexed
        for candidate in candidates:
            if candidate.title == title:
                logger.warning(
                    f"Ranking index {index} ({indexed.title!r}) disagrees with title {title!r}; using title"
                )
                return candidate
        return indexed

    library_item = entry.get("libraryItem")
    if isinstance(library_item, dict):
        item_id = library_item.get("id")
        for candidate in candidates:
            if item_id is not None and candidate.id == str(item_id):
                return candidate
        if "title" not in entry:
            entry = {**entry, "title": library_item.get("title")}

    title = entry.get("title")
    if title:
        for candidate in candidates:
            if candidate.title == title:
                return candidate

    return None


async def rank_candidates(
    candidates: List[LibraryItem],
    user_profile: str,
    definition: DigestDefinition,
    llm: LLMClient,
) -> List[RankedItem]:
    """
    Rank candidate titles against the user profile in a SINGLE LLM call.

    The LLM returns a JSON array in rank order, one object per item with a
    `topic`. The order is kept as returned.

    Raises:
        ValueError: if the response is not a JSON array
    """
    template = PromptTemplate.from_template(definition.zero_shot.rank_prompt)
    prompt = template.format(
        userProfile=user_profile,
        titles=json.dumps([item.title for item in candidates]),
    )

    logger.info(f"Ranking {len(candidates)} candidates")
    parsed = await llm.complete_json(prompt)

    if not isinstance(parsed, list):
        raise ValueError(f"Expected a JSON array of ranked items, got {type(parsed).__name__}")

    ranked: List[RankedItem] = []
    ranked_ids: Set[str] = set()
    for entry in parsed:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping non-object ranking entry: {entry!r}")
            continue

        item = _match_candidate(entry, candidates)
        if item is None:
            logger.warning(f"Ranking entry matches no candidate: {entry}")
            continue

        if item.id in ranked_ids:
            logger.warning(f"Skipping repeated ranking entry for {item.title!r}")
            continue
        ranked_ids.add(item.id)

        ranked.append(
            RankedItem(
                topic=str(entry.get("topic", "")),
                library_item=item,
                summary=str(entry.get("summary") or ""),
            )
        )

    logger.info(f"Ranking complete: {len(ranked)} items")
    return ranked
