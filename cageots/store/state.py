"""SQLite record of saved bills, keyed by the deduplication fields."""
import aiosqlite
import logging
from pathlib import Path
from datetime import datetime
from typing import Any, Optional, Sequence

from cageots.config import DEDUP_KEYS, STATE_DB
from cageots.parse.models import InvoiceRecord

logger = logging.getLogger(__name__)


def make_dedup_key(record: InvoiceRecord, keys: Sequence[str] = DEDUP_KEYS) -> str:
    """Stable text form of the record's dedup fields, in policy order."""
    parts = []
    for value in record.dedup_key(keys):
        if isinstance(value, datetime):
            parts.append(value.isoformat())
        elif isinstance(value, float):
            parts.append(f"{value:.2f}")
        else:
            parts.append(str(value))
    return "|".join(parts)


class BillStateDB:
    """SQLite database of bills already imported."""

    def __init__(self, db_path: Path = STATE_DB):
        self.db_path = db_path

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS bills (
                    dedup_key TEXT PRIMARY KEY,
                    vendor_ref TEXT NOT NULL,
                    date TEXT NOT NULL,
                    amount REAL NOT NULL,
                    filename TEXT NOT NULL,
                    file_path TEXT,
                    source_account TEXT,
                    saved_at TIMESTAMP
                )
                """
            )
            await db.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_bills_account ON bills(source_account)
                """
            )
            await db.commit()
            logger.info(f"State database initialized at {self.db_path}")

    async def has_bill(self, dedup_key: str) -> bool:
        """Check if a bill with the same dedup key was saved."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT 1 FROM bills WHERE dedup_key = ?",
                (dedup_key,),
            )
            row = await cursor.fetchone()
            return row is not None

    async def mark_saved(
        self,
        dedup_key: str,
        record: InvoiceRecord,
        file_path: Optional[Path],
        source_account: str,
    ) -> None:
        """Record a bill as saved."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT OR REPLACE INTO bills
                    (dedup_key, vendor_ref, date, amount, filename, file_path, source_account, saved_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, datetime('now'))
                """,
                (
                    dedup_key,
                    record.vendor_ref,
                    record.date.isoformat(),
                    record.amount,
                    record.filename,
                    str(file_path) if file_path else None,
                    source_account,
                ),
            )
            await db.commit()

    async def list_bills(self, limit: int = 100) -> list[dict[str, Any]]:
        """Most recent bills first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT vendor_ref, date, amount, filename, file_path, source_account, saved_at
                FROM bills ORDER BY date DESC LIMIT ?
                """,
                (limit,),
            )
            return [dict(row) for row in await cursor.fetchall()]

    async def get_stats(self) -> dict:
        """Number of bills per source account."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT source_account, COUNT(*) FROM bills
                GROUP BY source_account
                """
            )
            return {row[0]: row[1] for row in await cursor.fetchall()}
