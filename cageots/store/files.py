"""Invoice files and their metadata sidecars on disk."""
import logging
from pathlib import Path
from typing import Any

import aiofiles
import orjson

from cageots.config import FILES_DIR
from cageots.parse.models import InvoiceRecord, SavePolicy

logger = logging.getLogger(__name__)


class BillFiles:
    """Writes <filename> and <filename>.json under one directory."""

    def __init__(self, files_dir: Path = FILES_DIR):
        self.files_dir = files_dir
        self.files_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, record: InvoiceRecord) -> Path:
        if Path(record.filename).name != record.filename:
            raise ValueError(f"File name {record.filename!r} is not a plain name")
        return self.files_dir / record.filename

    async def write_file(self, record: InvoiceRecord, content: bytes) -> Path:
        """Write the invoice binary."""
        path = self.path_for(record)
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)
        logger.debug(f"Wrote {len(content)} bytes to {path}")
        return path

    async def write_metadata(self, record: InvoiceRecord, policy: SavePolicy) -> Path:
        """Write the bill description next to the file."""
        path = self.path_for(record).with_name(f"{record.filename}.json")
        document: dict[str, Any] = record.to_bill()
        document["identifiers"] = policy.identifiers
        document["sourceAccount"] = policy.source_account
        async with aiofiles.open(path, "wb") as f:
            await f.write(orjson.dumps(document, option=orjson.OPT_INDENT_2))
        return path
