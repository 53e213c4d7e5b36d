"""Extract raw order rows from the order history page."""
import logging
from typing import Optional

from selectolax.parser import HTMLParser, Node

from cageots.parse.models import RawOrderRow

logger = logging.getLogger(__name__)

# <table id="order-list" class="table table-bordered footab"><tbody><tr>...
ROW_SELECTOR = "table#order-list tbody tr"

# field -> (cell selector, attribute or None for text)
FIELD_SELECTORS: dict[str, tuple[str, Optional[str]]] = {
    # <td data-value="20211021231457" class="history_date bold">
    "date": ("td.history_date", "data-value"),
    # <td class="history_price" data-value="86.15">
    "amount": ("td.history_price", "data-value"),
    # <td class="history_link bold"><a>DDVMDIJTQ</a></td>
    "vendorRef": ("td.history_link a", None),
    # <td class="history_state"><span>Commande traitée</span></td>
    "orderStatus": ("td.history_state span", None),
    # <td class="history_invoice"><a href="...controller=pdf-invoice&id_order=129403">
    "fileUrl": ("td.history_invoice a", "href"),
}

REQUIRED_FIELDS = ("date", "amount", "vendorRef")


def _read_field(row: Node, selector: str, attr: Optional[str]) -> Optional[str]:
    node = row.css_first(selector)
    if node is None:
        return None
    if attr:
        value = node.attributes.get(attr)
    else:
        value = node.text(strip=True)
    if value is None:
        return None
    value = value.strip()
    return value or None


def extract_row(row: Node) -> dict[str, Optional[str]]:
    """Read every known field of a row by class, not by cell position."""
    return {
        field: _read_field(row, selector, attr)
        for field, (selector, attr) in FIELD_SELECTORS.items()
    }


def extract_order_rows(html_content: str | None) -> list[RawOrderRow]:
    """
    Extract all order rows from the order history page.
    Rows without a date, an amount or a reference are dropped.
    """
    if not html_content:
        return []

    parser = HTMLParser(html_content)
    rows = []
    for index, node in enumerate(parser.css(ROW_SELECTOR)):
        fields = extract_row(node)
        missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            logger.debug(f"Order row {index} dropped, missing {', '.join(missing)}")
            continue
        rows.append(RawOrderRow(**fields))

    logger.debug(f"Extracted {len(rows)} order rows")
    return rows
