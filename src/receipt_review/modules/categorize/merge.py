from __future__ import annotations

from datetime import datetime
from typing import Any

from receipt_review.modules.categorize.suggestion import AISuggestion
from receipt_review.modules.drafts import lifecycle
from receipt_review.modules.drafts.schemas import ExpenseDraft

_DIRECT_FIELDS = (
    "business_category",
    "gl_account",
    "employee_id",
    "functional_team_code",
    "trip_id",
)


def merge_suggestion(
    draft: ExpenseDraft, suggestion: AISuggestion, *, now: datetime | None = None
) -> ExpenseDraft:
    """
    Fold a validated suggestion into ``draft``.

    Fields the suggestion did not supply are left alone. The category only
    replaces ``extraction.category``; the rest of the extraction is untouched.
    The result is always ``proposed``.
    """
    provided = suggestion.model_fields_set
    update: dict[str, Any] = {}

    if "category" in provided and suggestion.category:
        update["extraction"] = draft.extraction.model_copy(
            update={"category": suggestion.category}
        )

    for name in _DIRECT_FIELDS:
        if name in provided:
            update[name] = getattr(suggestion, name)

    if "confidence" in provided:
        update["ai_confidence"] = suggestion.confidence
    if "notes" in provided:
        update["ai_labels"] = list(suggestion.notes) or None
    if "split_allocations" in provided:
        update["ai_allocations"] = list(suggestion.split_allocations) or None

    return lifecycle.propose(draft, update, now=now)
