from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal

from receipt_review.core.config import DEFAULT_CATEGORY_KEYWORDS, DEFAULT_MERCHANT_ALIASES
from receipt_review.core.schemas import round2
from receipt_review.modules.extraction.categories import guess_category
from receipt_review.modules.extraction.normalize import normalize_currency, normalize_merchant
from receipt_review.modules.extraction.schemas import ExtractedData, LineItem, RawExtraction

ZERO = Decimal("0")


def reconcile_extraction(
    raw: RawExtraction,
    *,
    merchant_aliases: Mapping[str, str] = DEFAULT_MERCHANT_ALIASES,
    category_keywords: Mapping[str, Sequence[str]] = DEFAULT_CATEGORY_KEYWORDS,
) -> ExtractedData:
    """
    Build the canonical extraction from a type-checked raw one.

    When line items are present their rounded sum replaces ``amount_total``,
    whatever total the source reported. A missing category is guessed from the
    normalized merchant name.
    """
    merchant = normalize_merchant(raw.merchant, merchant_aliases)
    items = [
        LineItem(description=item.description, amount=_item_amount(item.amount))
        for item in raw.items
    ]

    amount_total = raw.amount_total
    if items:
        amount_total = round2(sum((item.amount for item in items), ZERO))

    category = raw.category
    if not category and merchant:
        category = guess_category(merchant, category_keywords)

    return ExtractedData(
        merchant=merchant,
        amount_total=amount_total,
        amount_tax=raw.amount_tax,
        currency=normalize_currency(raw.currency),
        items=items,
        date=raw.date,
        location=raw.location,
        payment_method=raw.payment_method,
        category=category,
        invoice_number=raw.invoice_number,
    )


def _item_amount(amount: Decimal | None) -> Decimal:
    if amount is None or not amount.is_finite() or amount < ZERO:
        return ZERO
    return amount
