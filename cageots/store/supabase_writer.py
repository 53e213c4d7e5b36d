"""Supabase mirror of saved bills, upserted on the dedup key."""
import asyncio
import logging
from supabase import create_client, Client
from tenacity import retry, stop_after_attempt, wait_exponential

from cageots.config import config
from cageots.parse.models import InvoiceRecord, SavePolicy

logger = logging.getLogger(__name__)


class SupabaseBillWriter:
    """Writes bill rows to Supabase."""

    def __init__(self):
        if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE:
            raise ValueError("Supabase configuration missing")
        self.client: Client = create_client(
            config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE
        )
        self.table = config.SUPABASE_TABLE

    async def upsert_bill(self, dedup_key: str, record: InvoiceRecord, policy: SavePolicy) -> None:
        """Upsert one bill (runs in thread pool since Supabase is sync)."""
        data = self._record_to_dict(dedup_key, record, policy)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._upsert_sync, data)
            logger.debug(f"Upserted bill {record.vendor_ref} to Supabase")
        except Exception as e:
            logger.error(f"Supabase upsert error: {e}")
            raise

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _upsert_sync(self, data: dict) -> None:
        """Synchronous upsert (called from thread pool)."""
        (
            self.client.table(self.table)
            .upsert(data, on_conflict="dedup_key")
            .execute()
        )

    def _record_to_dict(self, dedup_key: str, record: InvoiceRecord, policy: SavePolicy) -> dict:
        return {
            "dedup_key": dedup_key,
            "vendor_ref": record.vendor_ref,
            "date": record.date.isoformat(),
            "amount": record.amount,
            "currency": record.currency,
            "vendor": record.vendor,
            "filename": record.filename,
            "file_url": record.file_url,
            "metadata": record.metadata.model_dump(mode="json", by_alias=True),
            "identifiers": policy.identifiers,
            "source_account": policy.source_account,
        }
