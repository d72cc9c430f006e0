import logging
from typing import List

from core.entities import RankedItem

logger = logging.getLogger(__name__)

MIN_SUMMARY_LENGTH = 100
TITLE_PREFIX = "Library digest: "


def filter_summaries(summaries: List[RankedItem]) -> List[RankedItem]:
    """Drop summaries of 100 characters or fewer."""
    # TODO: replace the length gate with an LLM QA pass over each summary
    kept = [item for item in summaries if len(item.summary) > MIN_SUMMARY_LENGTH]
    dropped = len(summaries) - len(kept)
    if dropped:
        logger.info(f"Dropped {dropped} short summaries")
    return kept


def generate_title(selections: List[RankedItem]) -> str:
    return TITLE_PREFIX + ",".join(item.library_item.title for item in selections)
