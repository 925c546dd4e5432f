"""
Draft status transitions.

Every function takes a draft value and returns a new one; nothing here touches
the database. Callers are expected to serialize read-modify-write cycles per
draft (the store enforces this with a version check).

    creation            -> needs-info
    policy evaluation   -> valid | flagged   (always overwrites, even submitted)
    AI suggestion merge -> proposed          (see categorize.merge)
    submit              -> submitted         (idempotent)
    manual edit         -> status unchanged
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime

from receipt_review.core.models import utcnow
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.drafts.schemas import DraftEdit, ExpenseDraft
from receipt_review.modules.extraction.schemas import ExtractedData
from receipt_review.modules.policy.engine import status_from
from receipt_review.modules.policy.schemas import PolicyFinding

INITIAL_STATUS = DraftStatus.NEEDS_INFO

_EDITABLE_ASSIGNMENT_FIELDS = ("employee_id", "functional_team_code", "trip_id", "ai_labels")


def new_draft(
    *,
    draft_id: uuid.UUID,
    receipt_id: uuid.UUID,
    extraction: ExtractedData,
    created_at: datetime,
) -> ExpenseDraft:
    return ExpenseDraft(
        id=draft_id,
        receipt_id=receipt_id,
        extraction=extraction,
        validation=[],
        status=INITIAL_STATUS,
        created_at=created_at,
        updated_at=created_at,
    )


def apply_policy(
    draft: ExpenseDraft, findings: Sequence[PolicyFinding], *, now: datetime | None = None
) -> ExpenseDraft:
    # Policy evaluation is authoritative whenever it runs, including on submitted drafts.
    return draft.model_copy(
        update={
            "validation": list(findings),
            "status": status_from(findings),
            "updated_at": now or utcnow(),
        }
    )


def apply_edit(draft: ExpenseDraft, edit: DraftEdit, *, now: datetime | None = None) -> ExpenseDraft:
    update: dict = {"extraction": edit.extraction, "updated_at": now or utcnow()}
    for name in _EDITABLE_ASSIGNMENT_FIELDS:
        if name in edit.model_fields_set:
            update[name] = getattr(edit, name)
    return draft.model_copy(update=update)


def submit(draft: ExpenseDraft, *, now: datetime | None = None) -> tuple[ExpenseDraft, bool]:
    """Returns the submitted draft and whether anything changed."""
    if draft.status == DraftStatus.SUBMITTED:
        return draft, False
    return draft.model_copy(
        update={"status": DraftStatus.SUBMITTED, "updated_at": now or utcnow()}
    ), True


def propose(draft: ExpenseDraft, update: dict, *, now: datetime | None = None) -> ExpenseDraft:
    """Apply AI-sourced field updates and move the draft to ``proposed``."""
    return draft.model_copy(
        update={**update, "status": DraftStatus.PROPOSED, "updated_at": now or utcnow()}
    )
