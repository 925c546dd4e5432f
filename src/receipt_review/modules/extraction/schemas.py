from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import Field

from receipt_review.core.coercion import (
    MISSING,
    CoercionResult,
    as_decimal,
    as_mapping,
    as_str,
    take,
)
from receipt_review.core.schemas import FrozenWireModel, WireModel

DEFAULT_CURRENCY = "USD"


class Location(FrozenWireModel):
    city: str | None = None
    state: str | None = None
    country: str | None = None


class LineItem(FrozenWireModel):
    description: str = ""
    amount: Decimal = Field(default=Decimal("0.00"), ge=0)


class ExtractedData(FrozenWireModel):
    """Canonical receipt payload, as produced by the reconciler."""

    merchant: str | None = None
    amount_total: Decimal | None = None
    amount_tax: Decimal | None = None
    currency: str = DEFAULT_CURRENCY
    items: list[LineItem] = Field(default_factory=list)
    date: str | None = None
    location: Location | None = None
    payment_method: str | None = None
    category: str | None = None
    invoice_number: str | None = None


class RawLineItem(WireModel):
    description: str = ""
    # Negative and non-finite amounts survive coercion; the reconciler zeroes them.
    amount: Decimal | None = Field(default=None, allow_inf_nan=True)


class RawExtraction(WireModel):
    """Extraction source output after type checks, before normalization."""

    merchant: str | None = None
    amount_total: Decimal | None = None
    amount_tax: Decimal | None = None
    currency: str | None = None
    items: list[RawLineItem] = Field(default_factory=list)
    date: str | None = None
    location: Location | None = None
    payment_method: str | None = None
    category: str | None = None
    invoice_number: str | None = None


_STRING_FIELDS = {
    "merchant": "merchant",
    "currency": "currency",
    "date": "date",
    "paymentMethod": "payment_method",
    "category": "category",
    "invoiceNumber": "invoice_number",
}
_AMOUNT_FIELDS = {"amountTotal": "amount_total", "amountTax": "amount_tax"}


def coerce_extraction(payload: Any) -> CoercionResult[RawExtraction]:
    """
    Type-check an extraction payload field by field.

    Wrong-typed fields are treated as unknown and listed in ``dropped``; a payload
    that is not an object at all yields an empty extraction.
    """
    data = as_mapping(payload)
    if data is None:
        return CoercionResult(RawExtraction(), ["<root>"] if payload is not None else [])

    dropped: list[str] = []
    fields: dict[str, Any] = {}

    for key, attr in _STRING_FIELDS.items():
        value = take(data, key, as_str, dropped)
        if value is not MISSING:
            fields[attr] = value

    for key, attr in _AMOUNT_FIELDS.items():
        value = take(data, key, as_decimal, dropped)
        if value is not MISSING:
            fields[attr] = value

    items = data.get("items")
    if isinstance(items, list):
        fields["items"] = _coerce_items(items, dropped)
    elif items is not None:
        dropped.append("items")

    location = data.get("location")
    if isinstance(location, Mapping):
        fields["location"] = _coerce_location(location, dropped)
    elif location is not None:
        dropped.append("location")

    return CoercionResult(RawExtraction(**fields), dropped)


def _coerce_items(items: list[Any], dropped: list[str]) -> list[RawLineItem]:
    out: list[RawLineItem] = []
    for idx, item in enumerate(items):
        if not isinstance(item, Mapping):
            dropped.append(f"items[{idx}]")
            continue
        description = item.get("description")
        if not isinstance(description, str):
            if description is not None:
                dropped.append(f"items[{idx}].description")
            description = ""
        amount = as_decimal(item.get("amount"), allow_non_finite=True)
        if amount is None and item.get("amount") is not None:
            dropped.append(f"items[{idx}].amount")
        out.append(RawLineItem(description=description, amount=amount))
    return out


def _coerce_location(location: Mapping[str, Any], dropped: list[str]) -> Location:
    parts: dict[str, str] = {}
    for key in ("city", "state", "country"):
        value = take(location, key, as_str, dropped, prefix="location.")
        if isinstance(value, str):
            parts[key] = value
    return Location(**parts)
