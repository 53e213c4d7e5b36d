"""DEV / dry-run storage: save extraction outputs to data/dev/ for inspection."""
import gzip
import json
import logging
from pathlib import Path
from typing import Any, Optional
import orjson

from cageots.config import DATA_DIR
from cageots.parse.models import InvoiceRecord
from cageots.parse.redact import redact_json

logger = logging.getLogger(__name__)

DEV_DIR = DATA_DIR / "dev"


class DevStorage:
    """Stores what a run would have saved, without touching the bill store."""

    def __init__(self, dev_dir: Path = DEV_DIR):
        self.dev_dir = dev_dir
        self.dev_dir.mkdir(parents=True, exist_ok=True)

    def save_run_data(
        self,
        run_id: str,
        summary: dict[str, Any],
        records: list[InvoiceRecord],
        html_content: Optional[str] = None,
        store_html: bool = False,
    ) -> Path:
        """Save all data for a single run."""
        run_dir = self.dev_dir / run_id
        run_dir.mkdir(exist_ok=True)

        summary_path = run_dir / "summary.json"
        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump(redact_json(summary), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved summary to {summary_path}")

        extracted = redact_json([record.to_bill() for record in records])
        extracted_path = run_dir / "extracted.json"
        with open(extracted_path, "wb") as f:
            f.write(orjson.dumps(extracted, option=orjson.OPT_INDENT_2))
        logger.info(f"Saved {len(records)} records to {extracted_path}")

        if store_html and html_content:
            html_path = run_dir / "order_history.html.gz"
            with gzip.open(html_path, "wt", encoding="utf-8") as f:
                f.write(html_content)
            logger.debug(f"Saved HTML to {html_path}")

        return run_dir
