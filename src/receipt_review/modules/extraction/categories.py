from __future__ import annotations

from collections.abc import Mapping, Sequence

from receipt_review.core.config import DEFAULT_CATEGORY_KEYWORDS


def guess_category(
    merchant: str, keywords: Mapping[str, Sequence[str]] = DEFAULT_CATEGORY_KEYWORDS
) -> str | None:
    """Return the first category (in mapping order) with a keyword inside the merchant name."""
    lower = merchant.lower()
    for category, tokens in keywords.items():
        if any(token in lower for token in tokens):
            return category
    return None
