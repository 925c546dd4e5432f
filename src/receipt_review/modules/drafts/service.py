from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from receipt_review.core.config import settings
from receipt_review.core.logging import bind_draft, get_logger, log_event, unbind_draft
from receipt_review.modules.drafts import lifecycle
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.drafts.schemas import DraftEdit, DraftUpdateIn, ExpenseDraft
from receipt_review.modules.drafts.store import DraftStore
from receipt_review.modules.extraction.reconcile import reconcile_extraction
from receipt_review.modules.extraction.schemas import coerce_extraction

logger = get_logger(__name__)


def get_draft(session: Session, *, draft_id: uuid.UUID) -> ExpenseDraft:
    return DraftStore(session).get(draft_id)


def list_drafts(
    session: Session, *, employee_id: str | None = None, status: DraftStatus | None = None
) -> list[ExpenseDraft]:
    return DraftStore(session).query(employee_id=employee_id, status=status)


def update_draft(session: Session, *, draft_id: uuid.UUID, edit: DraftUpdateIn) -> ExpenseDraft:
    """
    Apply a manual edit. The submitted extraction goes through the same coercion
    and reconciliation as a fresh one, so line items still decide the total.
    """
    token = bind_draft(draft_id)
    try:
        store = DraftStore(session)
        draft = store.get(draft_id)

        coerced = coerce_extraction(edit.extraction)
        if coerced.dropped:
            log_event(logger, "coercion.dropped", payload="draft_edit", dropped=coerced.dropped)
        extraction = reconcile_extraction(
            coerced.value,
            merchant_aliases=settings.merchant_aliases,
            category_keywords=settings.category_keywords,
        )

        assigned = {
            name: getattr(edit, name)
            for name in ("employee_id", "functional_team_code", "trip_id", "ai_labels")
            if name in edit.model_fields_set
        }
        updated = store.save(
            lifecycle.apply_edit(draft, DraftEdit(extraction=extraction, **assigned))
        )
        log_event(logger, "draft.edited", fields=sorted(assigned), status=updated.status.value)
        return updated
    finally:
        unbind_draft(token)


def submit_draft(session: Session, *, draft_id: uuid.UUID) -> tuple[ExpenseDraft, bool]:
    store = DraftStore(session)
    draft, changed = lifecycle.submit(store.get(draft_id))
    if changed:
        draft = store.save(draft)
    else:
        log_event(logger, "draft.submit.noop", draft_id=str(draft_id))
    return draft, changed
