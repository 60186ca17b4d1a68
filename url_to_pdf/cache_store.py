"""
Local PDF cache store.

Persists generated PDFs in a SQLite file keyed by (url, page size) so that
repeated conversions can skip the render service. The store is a plain map:
put overwrites, and nothing in the application deletes entries.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import aiosqlite

from url_to_pdf.errors import StoreReadError, StoreUnavailable, StoreWriteError

logger = logging.getLogger(__name__)


class PageSize(str, Enum):
    """Paper sizes accepted by the render service."""
    A4 = "a4"
    LETTER = "letter"
    CUSTOM = "custom"


def generate_cache_key(url: str, page_size: Union[PageSize, str]) -> str:
    """
    Build the cache key for a (url, page size) pair.

    Valid URLs cannot contain an unescaped pipe, so joining on "|" keeps
    distinct pairs from colliding.
    """
    return f"{url}|{PageSize(page_size).value}"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CacheEntry:
    """One cached PDF."""
    url: str
    page_size: PageSize
    payload: bytes
    created_at: int = field(default_factory=_now_ms)
    cache_key: str = ""

    def __post_init__(self):
        self.page_size = PageSize(self.page_size)
        if not self.cache_key:
            self.cache_key = generate_cache_key(self.url, self.page_size)


class PdfCacheStoreInterface(ABC):
    """
    Abstract interface for the PDF cache.

    Implementations must make open() idempotent and safe to call from
    concurrent conversions, return None from get() on absence, and treat
    put() as a full-entry upsert.
    """

    @abstractmethod
    async def open(self) -> "PdfCacheStoreInterface":
        """Initialize the underlying store. Raises StoreUnavailable."""
        pass

    @abstractmethod
    async def get(self, cache_key: str) -> Optional[CacheEntry]:
        """Look up an entry. Raises StoreReadError on I/O failure."""
        pass

    @abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Upsert an entry. Raises StoreWriteError on I/O failure."""
        pass


class PdfCacheStore(PdfCacheStoreInterface):
    """
    SQLite-backed PDF cache using aiosqlite.

    Schema: a single ``pdfs`` table keyed by ``cache_key`` with a
    non-unique index on ``created_at``.
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        """
        Initialize the store.

        Args:
            db_path: Path of the SQLite file (created on first open)
        """
        self.db_path = Path(db_path)
        self._db: Optional[aiosqlite.Connection] = None
        self._open_lock = asyncio.Lock()

    async def open(self) -> "PdfCacheStore":
        """Open the connection and create the schema on first use."""
        if self._db is not None:
            return self

        async with self._open_lock:
            # Another caller may have finished while we waited
            if self._db is not None:
                return self

            db = None
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                db = await aiosqlite.connect(self.db_path)
                await db.execute("""
                    CREATE TABLE IF NOT EXISTS pdfs (
                        cache_key TEXT PRIMARY KEY,
                        url TEXT NOT NULL,
                        page_size TEXT NOT NULL,
                        payload BLOB NOT NULL,
                        created_at INTEGER NOT NULL
                    )
                """)
                await db.execute(
                    "CREATE INDEX IF NOT EXISTS idx_pdfs_created_at ON pdfs(created_at)"
                )
                await db.commit()
            except (aiosqlite.Error, OSError) as e:
                if db is not None:
                    await db.close()
                logger.error(f"PDF cache unavailable at {self.db_path}: {e}")
                raise StoreUnavailable(f"Failed to open PDF cache: {e}", cause=e)

            self._db = db
            logger.info(f"PDF cache opened at {self.db_path}")
        return self

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> "PdfCacheStore":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def get(self, cache_key: str) -> Optional[CacheEntry]:
        """Return the entry stored under cache_key, or None."""
        await self.open()
        try:
            async with self._db.execute(
                "SELECT cache_key, url, page_size, payload, created_at "
                "FROM pdfs WHERE cache_key = ?",
                (cache_key,),
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreReadError(f"Failed to get PDF from cache: {e}", cause=e)

        if row is None:
            return None

        try:
            return CacheEntry(
                cache_key=row[0],
                url=row[1],
                page_size=PageSize(row[2]),
                payload=bytes(row[3]),
                created_at=row[4],
            )
        except (ValueError, TypeError) as e:
            raise StoreReadError(f"Corrupt PDF cache row for {cache_key[:100]}: {e}", cause=e)

    async def put(self, entry: CacheEntry) -> None:
        """Insert or fully replace the entry for entry.cache_key."""
        await self.open()
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO pdfs "
                "(cache_key, url, page_size, payload, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    entry.cache_key,
                    entry.url,
                    entry.page_size.value,
                    entry.payload,
                    entry.created_at,
                ),
            )
            await self._db.commit()
        except aiosqlite.Error as e:
            raise StoreWriteError(f"Failed to save PDF to cache: {e}", cause=e)

        logger.debug(f"Cached {len(entry.payload)} bytes for {entry.cache_key[:100]}")
