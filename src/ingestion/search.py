"""
HTTP client for the library search service
"""
import logging
from typing import List, Optional

import httpx

from core.schemas import LibraryItem
from ingestion.base import SearchService

logger = logging.getLogger(__name__)


class HttpSearchService(SearchService):
    """
    Calls `POST {base_url}/search` and reads `libraryItems` from the response.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip('/')
        headers = {"User-Agent": "LibraryDigest/1.0"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.headers = headers
        self.client = client or httpx.AsyncClient(timeout=30)

    async def search(
        self,
        query: str,
        size: int,
        include_content: bool,
        user_id: str,
    ) -> List[LibraryItem]:
        resp = await self.client.post(
            f"{self.base_url}/search",
            headers=self.headers,
            json={
                "userId": user_id,
                "query": query,
                "size": size,
                "includeContent": include_content,
            },
        )
        resp.raise_for_status()

        items = [
            LibraryItem.model_validate(data)
            for data in resp.json().get("libraryItems", [])
        ]
        logger.debug(f"Search '{query}' returned {len(items)} items")
        return items

    async def close(self) -> None:
        await self.client.aclose()
