"""Persisted log of lesson results.

The log is an ordered, append-only JSON array of LessonResult records stored
under one fixed key, capped at the newest ``limit`` entries. A value that
cannot be read back is treated as an empty log.
"""

import asyncio
import logging
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from adaptive_lessons.config import settings
from adaptive_lessons.db.database import SCHEMA, connect
from adaptive_lessons.exceptions import StorageReadFailure
from adaptive_lessons.models.performance import LessonResult

logger = logging.getLogger(__name__)

_LOG_ADAPTER = TypeAdapter(list[LessonResult])


class PerformanceStore(Protocol):
    async def get_results(self) -> list[LessonResult]:
        ...

    async def append_result(self, result: LessonResult) -> int:
        """Append one result and return the new log length."""
        ...


def decode_log(raw: str | bytes | None) -> list[LessonResult]:
    if not raw:
        return []
    try:
        return _LOG_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise StorageReadFailure(
            f"Stored performance log is unreadable ({exc.error_count()} errors)"
        ) from exc


def encode_log(results: list[LessonResult]) -> str:
    return _LOG_ADAPTER.dump_json(results, by_alias=True).decode("utf-8")


def append_capped(results: list[LessonResult], result: LessonResult, limit: int) -> list[LessonResult]:
    """Append and drop the oldest entries beyond the cap."""
    updated = [*results, result]
    return updated[-limit:]


def _decode_or_empty(raw: str | None, key: str) -> list[LessonResult]:
    try:
        return decode_log(raw)
    except StorageReadFailure as exc:
        logger.warning("%s under key %r; treating it as empty", exc, key)
        return []


class InMemoryPerformanceStore:
    """Store backed by a JSON string held in memory (tests, local tooling)."""

    def __init__(self, results: list[LessonResult] | None = None, *, limit: int | None = None,
                 key: str | None = None):
        self.key = key or settings.performance_log_key
        self.limit = limit or settings.performance_log_limit
        self.raw: str | None = encode_log(results) if results else None
        self._lock = asyncio.Lock()

    async def get_results(self) -> list[LessonResult]:
        return _decode_or_empty(self.raw, self.key)

    async def append_result(self, result: LessonResult) -> int:
        async with self._lock:
            updated = append_capped(await self.get_results(), result, self.limit)
            self.raw = encode_log(updated)
            return len(updated)


class SQLitePerformanceStore:
    """Store backed by the key_value_store table."""

    def __init__(self, database_path: str | None = None, *, limit: int | None = None,
                 key: str | None = None):
        self.database_path = database_path or settings.database_path
        self.key = key or settings.performance_log_key
        self.limit = limit or settings.performance_log_limit
        self._lock = asyncio.Lock()

    async def _read_raw(self, db) -> str | None:
        cursor = await db.execute("SELECT value FROM key_value_store WHERE key = ?", (self.key,))
        row = await cursor.fetchone()
        return row["value"] if row else None

    async def get_results(self) -> list[LessonResult]:
        db = await connect(self.database_path)
        try:
            await db.executescript(SCHEMA)
            raw = await self._read_raw(db)
        finally:
            await db.close()
        return _decode_or_empty(raw, self.key)

    async def append_result(self, result: LessonResult) -> int:
        async with self._lock:
            db = await connect(self.database_path)
            try:
                await db.executescript(SCHEMA)
                # Serialize concurrent writers across processes too
                await db.execute("BEGIN IMMEDIATE")
                try:
                    existing = _decode_or_empty(await self._read_raw(db), self.key)
                    updated = append_capped(existing, result, self.limit)
                    await db.execute(
                        """INSERT INTO key_value_store (key, value, updated_at)
                           VALUES (?, ?, CURRENT_TIMESTAMP)
                           ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                          updated_at = CURRENT_TIMESTAMP""",
                        (self.key, encode_log(updated)),
                    )
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise
            finally:
                await db.close()

        logger.debug("Appended result %s; log now holds %d entries", result.lesson_id, len(updated))
        return len(updated)


def get_performance_store() -> PerformanceStore:
    """FastAPI dependency returning the configured store."""
    return SQLitePerformanceStore()
