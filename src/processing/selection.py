import logging
from collections import defaultdict
from typing import Dict, List

from core.entities import RankedItem

logger = logging.getLogger(__name__)


def choose_ranked_selections(
    ranked_candidates: List[RankedItem],
    max_items: int = 5,
    max_per_topic: int = 2,
) -> List[RankedItem]:
    """
    Pick the top items with some topic diversity, then group them by topic.

    Items are taken in rank order while no topic exceeds `max_per_topic`
    (a topic's count grows even for skipped items). The result is grouped
    by topic in first-seen order, so same-topic items sit together even
    when that breaks strict rank order.
    """
    selected: List[RankedItem] = []
    ranked_topics: List[str] = []
    topic_count: Dict[str, int] = defaultdict(int)

    for item in ranked_candidates:
        if len(selected) >= max_items:
            break

        topic_count[item.topic] += 1

        if topic_count[item.topic] <= max_per_topic:
            selected.append(item)
            if item.topic not in ranked_topics:
                ranked_topics.append(item.topic)

    logger.info(f"Ranked topics: {ranked_topics}")

    final_selections: List[RankedItem] = []
    for topic in ranked_topics:
        final_selections.extend(item for item in selected if item.topic == topic)

    logger.info(
        "Final selections: "
        + ", ".join(f"[{item.topic}] {item.library_item.title}" for item in final_selections)
    )
    return final_selections
