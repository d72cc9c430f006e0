import json
import aiosqlite
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional
import logging

from core.entities import Digest

logger = logging.getLogger(__name__)


class DigestStore:
    """
    Persists the current digest for each user in SQLite.
    Writing a digest replaces the previous one for that user.
    """

    def __init__(self, path: str):
        self.path = path
        self._initialized = False

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = await aiosqlite.connect(self.path)
        await conn.execute("PRAGMA journal_mode=WAL;")
        await conn.execute("PRAGMA foreign_keys=ON;")
        try:
            yield conn
        finally:
            await conn.close()

    async def fetchone(self, query: str, params: tuple = ()):
        async with self.connect() as conn:
            cursor = await conn.execute(query, params)
            return await cursor.fetchone()

    async def init_tables(self) -> None:
        """Initialize database tables for digest storage."""
        if self._initialized:
            return
        async with self.connect() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS digests (
                    user_id TEXT PRIMARY KEY,
                    digest_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    job_state TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            await conn.commit()
            logger.info("Database tables initialized")
        self._initialized = True

    async def write_digest(self, user_id: str, digest: Digest) -> None:
        """Record the digest for a user, replacing any earlier one."""
        await self.init_tables()
        async with self.connect() as conn:
            await conn.execute(
                """
                INSERT OR REPLACE INTO digests
                (user_id, digest_id, title, job_state, payload, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    digest.id,
                    digest.title,
                    digest.job_state,
                    json.dumps(digest.to_dict()),
                    datetime.utcnow().isoformat(),
                )
            )
            await conn.commit()
        logger.info(f"Wrote digest {digest.id} for user {user_id}")

    async def get_digest(self, user_id: str) -> Optional[Digest]:
        """Return the current digest for a user, if any."""
        await self.init_tables()
        row = await self.fetchone(
            "SELECT payload FROM digests WHERE user_id = ?",
            (user_id,)
        )
        if row is None:
            return None
        return Digest.from_dict(json.loads(row[0]))
