"""Normalization of order fields into invoice values."""
import re
from datetime import datetime

from cageots.config import VENDOR
from cageots.errors import ExtractionFieldError
from cageots.parse.models import InvoiceMetadata

FILENAME_TEMPLATE = "{date}_les_ptits_cageots_facture_{amount:.2f}EUR_{vendor_ref}.pdf"

# (start, end) of each component in YYYYMMDDHHMMSS
_DATE_SLICES = ((0, 4), (4, 6), (6, 8), (8, 10), (10, 12), (12, 14))

# Plain decimal, no exponent, separators or special values
_DECIMAL = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)", re.ASCII)


def normalize_date(raw: str) -> datetime:
    """
    Parse a YYYYMMDD[HH[MM[SS]]] string positionally into a naive datetime.

    Missing time components default to midnight. Digits after the 14th are
    ignored. The month is 1-based both in the source and in datetime.
    """
    value = (raw or "").strip()
    if len(value) < 8:
        raise ExtractionFieldError("date", raw, "fewer than 8 digits")

    parts = []
    for start, end in _DATE_SLICES:
        chunk = value[start:end]
        if not chunk:
            parts.append(0)
            continue
        if not (chunk.isascii() and chunk.isdigit()):
            raise ExtractionFieldError("date", raw, "non-digit characters")
        parts.append(int(chunk))

    try:
        return datetime(*parts)
    except ValueError as e:
        raise ExtractionFieldError("date", raw, str(e)) from e


def parse_amount(raw: str) -> float:
    """Parse a bare decimal string such as "86.15"."""
    value = (raw or "").strip()
    if not _DECIMAL.fullmatch(value):
        raise ExtractionFieldError("amount", raw, "not a decimal number")
    return float(value)


def format_date(value: datetime) -> str:
    """Day granularity ISO date."""
    return value.strftime("%Y-%m-%d")


def format_filename(date: datetime, amount: float, vendor_ref: str) -> str:
    """
    Build the stored file name, for example
    2021-01-01_les_ptits_cageots_facture_99.99EUR_ABCDEFJHI.pdf
    """
    return FILENAME_TEMPLATE.format(
        date=format_date(date),
        amount=amount,
        vendor_ref=vendor_ref,
    )


def build_metadata(date: datetime) -> InvoiceMetadata:
    """Classification payload attached to every invoice."""
    issue_date = format_date(date)
    return InvoiceMetadata(
        datetime=issue_date,
        contentAuthor=VENDOR,
        issueDate=issue_date,
    )
