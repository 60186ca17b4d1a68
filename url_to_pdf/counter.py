"""
Display-only conversion counter.

Stored as one row in a small key-value table next to the PDF cache. The
count is cosmetic: read and write failures are logged and never reach the
conversion flow.
"""

import logging
from pathlib import Path
from typing import Union

import aiosqlite

logger = logging.getLogger(__name__)

COUNTER_KEY = "conversionCount"


class ConversionCounter:
    """Running count of successful conversions."""

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path)

    async def _connect(self) -> aiosqlite.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        db = await aiosqlite.connect(self.db_path)
        try:
            await db.execute(
                "CREATE TABLE IF NOT EXISTS settings (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
        except aiosqlite.Error:
            await db.close()
            raise
        return db

    @staticmethod
    async def _read(db: aiosqlite.Connection) -> int:
        async with db.execute(
            "SELECT value FROM settings WHERE key = ?", (COUNTER_KEY,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return 0
        try:
            return int(row[0])
        except ValueError:
            logger.warning(f"Ignoring non-numeric conversion count: {row[0]!r}")
            return 0

    async def get(self) -> int:
        """Current count; 0 when absent or unreadable."""
        try:
            db = await self._connect()
            try:
                return await self._read(db)
            finally:
                await db.close()
        except (aiosqlite.Error, OSError) as e:
            logger.warning(f"Could not read conversion count: {e}")
            return 0

    async def increment(self) -> int:
        """Add one to the count and return the new value."""
        try:
            db = await self._connect()
            try:
                new_count = await self._read(db) + 1
                await db.execute(
                    "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                    (COUNTER_KEY, str(new_count)),
                )
                await db.commit()
                return new_count
            finally:
                await db.close()
        except (aiosqlite.Error, OSError) as e:
            logger.warning(f"Could not update conversion count: {e}")
            return 0
