"""
TrustLedger - Async SQLite queries over accepted submissions.

The gate only ever reads the ledger. Rows are written by the host
pipeline once a submission has been moderated (see ``record``).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

import aiosqlite

from humangate.errors import StoreUnavailable

from .models import Identity

logger = logging.getLogger(__name__)


class SubmissionStatus:
    """Submission status constants."""
    APPROVED = "approved"
    PENDING = "pending"
    SPAM = "spam"


class TrustLookup(Protocol):
    """Read-only query the engine needs; raises StoreUnavailable on failure."""

    async def lookup(self, identity: Identity) -> bool:
        ...


class TrustLedger:
    """
    Async SQLite access to the submissions table.

    Reads: lookup/exists take no lock
    Writes: record/initialize serialize on an asyncio.Lock
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._lock = asyncio.Lock()
        self._connect_lock = asyncio.Lock()
        self._connection: Optional[aiosqlite.Connection] = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create a shared connection."""
        async with self._connect_lock:
            if self._connection is None:
                self._connection = await aiosqlite.connect(str(self.db_path))
                self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Create schema if not exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._lock:
            conn = await self._get_connection()
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS submissions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    contact TEXT NOT NULL,
                    url TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            await conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_submissions_identity "
                "ON submissions(name, contact, url, status)"
            )
            await conn.commit()
            logger.info(f"Initialized trust ledger at {self.db_path}")

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def lookup(self, identity: Identity) -> bool:
        """
        Check whether this exact (name, contact, url) was approved before.

        Raises:
            StoreUnavailable: If the database cannot be opened or queried.
        """
        try:
            conn = await self._get_connection()
            cursor = await conn.execute(
                """
                SELECT 1 FROM submissions
                WHERE name = ? AND contact = ? AND url = ? AND status = ?
                LIMIT 1
            """,
                (identity.name, identity.contact, identity.url or "", SubmissionStatus.APPROVED),
            )
            row = await cursor.fetchone()
            await cursor.close()
        except (aiosqlite.Error, OSError) as e:
            raise StoreUnavailable(f"Trust ledger query failed: {e}") from e
        return row is not None

    async def exists(self, identity: Identity) -> bool:
        """Alias of lookup() for host pipelines."""
        return await self.lookup(identity)

    async def record(
        self, identity: Identity, status: str = SubmissionStatus.APPROVED
    ) -> None:
        """Record a moderated submission (host side, never called by the engine)."""
        try:
            async with self._lock:
                conn = await self._get_connection()
                await conn.execute(
                    """
                    INSERT INTO submissions (name, contact, url, status, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """,
                    (
                        identity.name,
                        identity.contact,
                        identity.url or "",
                        status,
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
                await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            raise StoreUnavailable(f"Trust ledger write failed: {e}") from e
