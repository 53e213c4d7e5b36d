"""Data models for scraped orders and the invoices built from them."""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from cageots.config import DEDUP_KEYS, DEFAULT_BANK_IDENTIFIERS, VENDOR


class RawOrderRow(BaseModel):
    """One row of the order history table, as found in the page."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: str = Field(..., description="YYYYMMDDHHMMSS, possibly shorter")
    amount: str = Field(..., description="Bare decimal string")
    vendor_ref: str = Field(..., alias="vendorRef", description="Order reference")
    order_status: Optional[str] = Field(default=None, alias="orderStatus")
    file_url: Optional[str] = Field(default=None, alias="fileUrl")


class Classification(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = "food_invoice"
    purpose: str = "invoice"
    source_category: str = Field(default="shopping", alias="sourceCategory")


class InvoiceMetadata(BaseModel):
    """Cataloging attributes passed through untouched to the bill store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    carbon_copy: bool = Field(default=True, alias="carbonCopy")
    classification: Classification = Field(default_factory=Classification)
    datetime_value: str = Field(..., alias="datetime")
    datetime_label: str = Field(default="issueDate", alias="datetimeLabel")
    content_author: str = Field(default=VENDOR, alias="contentAuthor")
    issue_date: str = Field(..., alias="issueDate")


class InvoiceRecord(BaseModel):
    """Canonical invoice handed to the bill store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: datetime
    amount: float
    vendor_ref: str = Field(..., alias="vendorRef")
    currency: str = "EUR"
    vendor: str = VENDOR
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    filename: str
    order_status: str = Field(..., alias="orderStatus")
    metadata: InvoiceMetadata

    def dedup_key(self, keys: tuple[str, ...] | list[str] = DEDUP_KEYS) -> tuple[Any, ...]:
        """Values of the named fields, by alias or field name."""
        dumped = self.model_dump(by_alias=True)
        values = []
        for key in keys:
            if key in dumped:
                values.append(dumped[key])
            elif key in type(self).model_fields:
                values.append(getattr(self, key))
            else:
                raise KeyError(f"Unknown dedup key: {key}")
        return tuple(values)

    def to_bill(self) -> dict[str, Any]:
        """JSON-ready dict with the camelCase names used by the bill store."""
        return self.model_dump(mode="json", by_alias=True)


class SavePolicy(BaseModel):
    """How the bill store should link and deduplicate invoices."""

    identifiers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BANK_IDENTIFIERS),
        description="Words found in the bank operation label of a matching payment",
    )
    source_account: str = Field(..., alias="sourceAccount")
    keys: list[str] = Field(default_factory=lambda: list(DEDUP_KEYS))

    model_config = ConfigDict(populate_by_name=True)
