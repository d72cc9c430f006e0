"""
Base classes for library retrieval
"""
from abc import ABC, abstractmethod
from typing import List

from core.schemas import LibraryItem


class SearchService(ABC):
    """
    Base interface for the library search service.
    """

    @abstractmethod
    async def search(
        self,
        query: str,
        size: int,
        include_content: bool,
        user_id: str,
    ) -> List[LibraryItem]:
        """
        Return up to `size` library items of `user_id` matching `query`.
        Must raise exceptions on failure (handled upstream).
        """
        raise NotImplementedError
