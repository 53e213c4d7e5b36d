"""Main job runner: authenticate, fetch, extract, save."""
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import httpx

from cageots.config import config
from cageots.fetch.client import FetchClient
from cageots.jobs.metrics import Metrics
from cageots.jobs.metrics_exporter import METRICS_FILE, MetricsExporter
from cageots.parse.documents import extract_documents
from cageots.parse.models import SavePolicy
from cageots.store.dev_storage import DEV_DIR, DevStorage
from cageots.store.files import BillFiles
from cageots.store.saver import BillSaver
from cageots.store.state import BillStateDB
from cageots.store.supabase_writer import SupabaseBillWriter

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    run_id: str
    outcome: str
    counters: dict = field(default_factory=dict)
    saved: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class KonnectorRunner:
    """Runs one import. The HTTP session lives only for the duration of run()."""

    def __init__(
        self,
        login: str,
        password: str,
        accepted_statuses: Optional[Iterable[str]] = None,
        identifiers: Optional[Iterable[str]] = None,
        dry_run: bool = False,
        dev_mode: bool = False,
        store_html: bool = False,
        base_url: Optional[str] = None,
        state_db: Optional[BillStateDB] = None,
        files: Optional[BillFiles] = None,
        writer: Optional[SupabaseBillWriter] = None,
        dev_dir: Path = DEV_DIR,
        metrics_file: Path = METRICS_FILE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.login = login
        self.password = password
        self.accepted_statuses = tuple(accepted_statuses or config.ACCEPTED_STATUSES)
        self.policy = SavePolicy(
            identifiers=list(identifiers or config.BANK_IDENTIFIERS),
            sourceAccount=login,
        )
        self.dry_run = dry_run
        self.dev_mode = dev_mode
        self.store_html = store_html
        self.base_url = base_url or config.BASE_URL
        self.transport = transport

        self.run_id = str(uuid.uuid4())
        logger.info(f"Run ID: {self.run_id}")

        self.state_db = state_db
        self.files = files
        self.writer = writer
        self.dev_storage = DevStorage(dev_dir) if (dev_mode or dry_run) else None
        self.metrics = Metrics()
        self.metrics_exporter = MetricsExporter(self.run_id, metrics_file)

    def _build_writer(self) -> Optional[SupabaseBillWriter]:
        if self.writer or self.dry_run or not config.supabase_enabled():
            return self.writer
        return SupabaseBillWriter()

    async def run(self) -> RunSummary:
        """Run the import. Auth and transport errors abort before anything is saved."""
        if config.COZY_PARAMETERS:
            logger.debug("Found COZY_PARAMETERS")

        outcome = "failed"
        saved: list[str] = []
        errors: list[str] = []
        try:
            async with FetchClient(base_url=self.base_url, transport=self.transport) as client:
                logger.info("Authenticating ...")
                await client.login(self.login, self.password)

                logger.info("Fetching the list of documents")
                html_content = await client.fetch_order_history()

                logger.info("Parsing list of documents")
                report = extract_documents(html_content, self.accepted_statuses, self.base_url)
                self.metrics.increment("rows", report.rows)
                self.metrics.increment("records", len(report.records))
                self.metrics.increment("rejected_status", report.rejected_status)
                self.metrics.increment("invalid", report.invalid)
                errors = report.errors

                if not report.records:
                    logger.warning(
                        f"No invoice found after login ({report.rows} orders on the page, "
                        f"accepted statuses: {', '.join(self.accepted_statuses)})"
                    )
                    outcome = "empty"

                if self.dev_storage:
                    self.dev_storage.save_run_data(
                        self.run_id,
                        summary={**self.metrics.get_summary(), "errors": errors},
                        records=report.records,
                        html_content=html_content,
                        store_html=self.store_html,
                    )

                if self.dry_run:
                    logger.info("DRY-RUN mode: nothing saved")
                    if report.records:
                        outcome = "dry_run"
                elif report.records:
                    logger.info("Saving data")
                    saver = BillSaver(
                        downloader=client,
                        state_db=self.state_db or BillStateDB(),
                        files=self.files or BillFiles(),
                        writer=self._build_writer(),
                    )
                    result = await saver.save_bills(report.records, self.policy)
                    self.metrics.increment("saved", len(result.saved))
                    self.metrics.increment("duplicates", result.duplicates)
                    self.metrics.increment("without_file", result.without_file)
                    saved = result.saved
                    outcome = "ok"
        finally:
            await self._final_report(outcome)

        return RunSummary(
            run_id=self.run_id,
            outcome=outcome,
            counters=self.metrics.get_summary(),
            saved=saved,
            errors=errors,
        )

    async def _final_report(self, outcome: str) -> None:
        """Log and export the final report."""
        logger.info("=" * 60)
        logger.info("FINAL REPORT")
        logger.info(f"Run ID: {self.run_id}")
        logger.info(f"Outcome: {outcome}")
        self.metrics.report()
        logger.info("=" * 60)
        await self.metrics_exporter.export_metrics(outcome, self.metrics.get_summary())
