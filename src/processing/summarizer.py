import logging
from typing import List

from langchain_core.prompts import PromptTemplate

from core.entities import RankedItem
from core.schemas import DigestDefinition
from services.llm import LLMClient

logger = logging.getLogger(__name__)


async def summarize_items(
    ranked_items: List[RankedItem],
    definition: DigestDefinition,
    llm: LLMClient,
) -> List[RankedItem]:
    """
    Summarize all items in one batch and write each summary onto its item.
    Responses are assigned by position.
    """
    template = PromptTemplate.from_template(definition.summary_prompt)
    prompts = [
        template.format(
            title=item.library_item.title,
            author=item.library_item.author or "",
            content=item.library_item.readable_content,  # markdown
        )
        for item in ranked_items
    ]

    summaries = await llm.complete_batch(prompts)
    if len(summaries) != len(ranked_items):
        raise ValueError(
            f"Expected {len(ranked_items)} summaries, got {len(summaries)}"
        )

    for item, summary in zip(ranked_items, summaries):
        item.summary = summary

    logger.info(f"Summarized {len(ranked_items)} items")
    return ranked_items
