"""Turn the order history page into invoice records."""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from cageots.config import ACCEPTED_STATUSES
from cageots.errors import ExtractionFieldError
from cageots.fetch.endpoints import absolute_url
from cageots.parse.models import InvoiceRecord, RawOrderRow
from cageots.parse.normalize import build_metadata, format_filename, normalize_date, parse_amount
from cageots.parse.orders import extract_order_rows

logger = logging.getLogger(__name__)


@dataclass
class ExtractionReport:
    """Records plus what was left out and why."""

    records: list[InvoiceRecord] = field(default_factory=list)
    rows: int = 0
    rejected_status: int = 0
    invalid: int = 0
    errors: list[str] = field(default_factory=list)


def is_accepted(row: RawOrderRow, accepted_statuses: Iterable[str]) -> bool:
    """Exact, case-sensitive status match."""
    return row.order_status is not None and row.order_status in tuple(accepted_statuses)


def build_record(row: RawOrderRow, base_url: Optional[str] = None) -> InvoiceRecord:
    """Normalize one accepted row. Raises ExtractionFieldError."""
    date = normalize_date(row.date)
    amount = parse_amount(row.amount)
    # The reference ends up in a file name
    if any(sep in row.vendor_ref for sep in ("/", "\\")):
        raise ExtractionFieldError("vendorRef", row.vendor_ref, "path separator")
    file_url = None
    if row.file_url:
        try:
            file_url = absolute_url(row.file_url, base_url)
        except ValueError as e:
            raise ExtractionFieldError("fileUrl", row.file_url, str(e)) from e
    return InvoiceRecord(
        date=date,
        amount=amount,
        vendorRef=row.vendor_ref,
        fileUrl=file_url,
        filename=format_filename(date, amount, row.vendor_ref),
        orderStatus=row.order_status,
        metadata=build_metadata(date),
    )


def extract_documents(
    html_content: str | None,
    accepted_statuses: Iterable[str] = ACCEPTED_STATUSES,
    base_url: Optional[str] = None,
) -> ExtractionReport:
    """Extract, filter and normalize every order of the page."""
    accepted = tuple(accepted_statuses)
    report = ExtractionReport()

    rows = extract_order_rows(html_content)
    report.rows = len(rows)

    for row in rows:
        # Cancelled or failed orders have no invoice
        if not is_accepted(row, accepted):
            report.rejected_status += 1
            logger.debug(f"Order {row.vendor_ref} skipped, status {row.order_status!r}")
            continue
        try:
            report.records.append(build_record(row, base_url))
        except ExtractionFieldError as e:
            report.invalid += 1
            report.errors.append(f"{row.vendor_ref}: {e}")
            logger.warning(f"Order {row.vendor_ref} skipped: {e}")

    logger.info(
        f"Parsed {report.rows} orders: {len(report.records)} invoices, "
        f"{report.rejected_status} without invoice, {report.invalid} invalid"
    )
    return report


def parse_documents(
    html_content: str | None,
    accepted_statuses: Iterable[str] = ACCEPTED_STATUSES,
    base_url: Optional[str] = None,
) -> list[InvoiceRecord]:
    """Invoice records found in the order history page. Empty when there is no order table."""
    return extract_documents(html_content, accepted_statuses, base_url).records
