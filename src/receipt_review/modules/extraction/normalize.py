from __future__ import annotations

from collections.abc import Mapping

from receipt_review.core.config import DEFAULT_MERCHANT_ALIASES
from receipt_review.modules.extraction.schemas import DEFAULT_CURRENCY


def normalize_merchant(
    raw: str | None, aliases: Mapping[str, str] = DEFAULT_MERCHANT_ALIASES
) -> str | None:
    """Trim a merchant name and map known aliases (keyed by upper-case name)."""
    if not raw:
        return None
    trimmed = raw.strip()
    if not trimmed:
        return None
    return aliases.get(trimmed.upper(), trimmed)


def normalize_currency(raw: str | None) -> str:
    # Any non-empty code is accepted; there is no ISO-4217 check here.
    if not raw:
        return DEFAULT_CURRENCY
    return raw.upper()
