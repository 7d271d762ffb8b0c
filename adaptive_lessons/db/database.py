"""SQLite access via aiosqlite.

The service keeps a single key/value table; the lesson-result log lives in
it as one JSON value under a fixed key.
"""

import logging
from pathlib import Path

import aiosqlite

from adaptive_lessons.config import settings

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS key_value_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


async def connect(database_path: str | None = None) -> aiosqlite.Connection:
    db = await aiosqlite.connect(database_path or settings.database_path)
    db.row_factory = aiosqlite.Row
    return db


async def init_db(database_path: str | None = None):
    path = database_path or settings.database_path
    if path != ":memory:":
        # Ensure parent directory exists (for Docker volume mounts)
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    logger.info("Using SQLite backend: %s", path)

    db = await connect(path)
    try:
        await db.executescript(SCHEMA)
        await db.commit()
    finally:
        await db.close()
