"""
Receipt Models: parsed record and parse outcome
Using Pydantic for validation, immutability and serialization

ParseOutcome is a closed, discriminated union over three cases:
  Success         - every expected field was found
  PartialSuccess  - usable record, plus warnings for missing fields
  Failure         - blank input or nothing usable extracted

Consumers branch on the case (match / isinstance); there is no base class
to fall back on.
"""

import datetime as dt
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Dict, Literal, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

from confidence_scorer import score


# ─── Regions (produced by the external image-region classifier) ──────────────

class RegionType(str, Enum):
    """Coarse receipt zone label."""
    HEADER = "header"
    ITEMS = "items"
    TOTALS = "totals"
    FOOTER = "footer"
    UNKNOWN = "unknown"


class ClassifiedLineRegion(BaseModel):
    """A zone tag for part of the receipt image. Geometry is never consumed."""
    model_config = ConfigDict(frozen=True)

    region_type: RegionType = Field(..., description="Zone label")
    confidence: Optional[float] = Field(None, description="Classifier confidence (0-1)", ge=0, le=1)


# ─── Receipt record ──────────────────────────────────────────────────────────

class ReceiptLineItem(BaseModel):
    """One purchased line."""
    model_config = ConfigDict(frozen=True)

    name: str                         = Field(..., min_length=1, description="Item name")
    quantity: Optional[float]         = Field(None, gt=0, description="Quantity, when printed")
    unit: Optional[str]               = Field(None, description="Unit label (lb, kg, oz, ea)")
    unit_price: Optional[float]       = Field(None, description="Price per unit, when printed")
    price: float                      = Field(..., description="Amount charged for the line")
    taxable: bool                     = Field(True, description="Informational only")


# Read-only view over the validated copy; dumps back to a plain dict
TaxMapping = Annotated[
    Dict[str, float],
    AfterValidator(lambda value: MappingProxyType(value)),
    PlainSerializer(lambda value: dict(value), return_type=Dict[str, float]),
]


class ReceiptRecord(BaseModel):
    """Structured receipt, built once per parse and never mutated."""
    model_config = ConfigDict(frozen=True)

    store_name: Optional[str]         = None
    store_address: Optional[str]      = None
    store_phone: Optional[str]        = None
    date: Optional[dt.date]           = None
    time: Optional[dt.time]           = None
    items: Tuple[ReceiptLineItem, ...] = ()
    subtotal: Optional[float]         = None
    tax: Optional[float]              = Field(None, description="Sum of all tax lines")
    taxes: TaxMapping                 = Field(default_factory=dict, validate_default=True,
                                                description="Tax type → amount")
    total: Optional[float]            = None
    payment_method: Optional[str]     = None
    transaction_id: Optional[str]     = None
    cashier: Optional[str]            = None
    raw_text: str                     = Field("", description="Unmodified OCR input, for audit")

    @property
    def is_valid(self) -> bool:
        """Minimum bar for downstream use: a store name, a total, or items."""
        return self.store_name is not None or self.total is not None or len(self.items) > 0

    @property
    def confidence(self) -> float:
        return score(self)


# ─── Parse outcome ───────────────────────────────────────────────────────────

class Success(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    record: ReceiptRecord


class PartialSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["partial_success"] = "partial_success"
    record: ReceiptRecord
    warnings: Tuple[str, ...] = Field(..., min_length=1)


class Failure(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    reason: str


ParseOutcome = Annotated[
    Union[Success, PartialSuccess, Failure],
    Field(discriminator="status"),
]


def outcome_record(outcome: ParseOutcome) -> Optional[ReceiptRecord]:
    """The record carried by an outcome, or None for a Failure."""
    if isinstance(outcome, (Success, PartialSuccess)):
        return outcome.record
    if isinstance(outcome, Failure):
        return None
    raise TypeError(f"Unknown parse outcome: {outcome!r}")
