"""Save invoice records: dedup, download, write, remember."""
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from cageots.parse.models import InvoiceRecord, SavePolicy
from cageots.store.files import BillFiles
from cageots.store.state import BillStateDB, make_dedup_key
from cageots.store.supabase_writer import SupabaseBillWriter

logger = logging.getLogger(__name__)


class Downloader(Protocol):
    async def download(self, url: str) -> bytes: ...


@dataclass
class SaveResult:
    saved: list[str] = field(default_factory=list)
    duplicates: int = 0
    without_file: int = 0


class BillSaver:
    """Stores invoices the bill store does not know yet.

    Storage and download failures propagate to the caller unchanged.
    """

    def __init__(
        self,
        downloader: Downloader,
        state_db: BillStateDB,
        files: BillFiles,
        writer: Optional[SupabaseBillWriter] = None,
    ):
        self.downloader = downloader
        self.state_db = state_db
        self.files = files
        self.writer = writer

    async def save_bills(self, records: list[InvoiceRecord], policy: SavePolicy) -> SaveResult:
        """Save every new record, in page order."""
        result = SaveResult()
        await self.state_db.initialize()

        for record in records:
            dedup_key = make_dedup_key(record, policy.keys)
            if await self.state_db.has_bill(dedup_key):
                result.duplicates += 1
                logger.debug(f"Bill {dedup_key} already saved")
                continue

            file_path = None
            if record.file_url:
                content = await self.downloader.download(record.file_url)
                file_path = await self.files.write_file(record, content)
            else:
                result.without_file += 1
                logger.warning(f"Order {record.vendor_ref} has no invoice link, saving metadata only")

            await self.files.write_metadata(record, policy)
            if self.writer:
                await self.writer.upsert_bill(dedup_key, record, policy)
            # Marked last: a bill is known only once every write succeeded
            await self.state_db.mark_saved(dedup_key, record, file_path, policy.source_account)

            result.saved.append(record.filename)
            logger.info(f"Saved {record.filename}")

        logger.info(f"{len(result.saved)} new bills saved, {result.duplicates} already known")
        return result
