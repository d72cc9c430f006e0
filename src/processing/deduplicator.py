from typing import Iterable, List, Set

from core.schemas import LibraryItem


def dedupe_by_id(items: Iterable[LibraryItem]) -> List[LibraryItem]:
    """
    Keep the first occurrence of each item id, preserving order.
    """
    seen: Set[str] = set()
    unique: List[LibraryItem] = []

    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)

    return unique
