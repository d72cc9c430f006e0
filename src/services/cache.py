"""
Key-value cache used for per-user profiles.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class KeyValueCache(ABC):
    """
    Minimal string cache interface.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value with no expiry."""
        raise NotImplementedError


class RedisCache(KeyValueCache):
    def __init__(self, url: str):
        self.url = url
        self.client = redis.Redis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.client.set(key, value)
        logger.debug(f"Cached {key} ({len(value)} chars)")

    async def close(self) -> None:
        await self.client.aclose()
