from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from receipt_review.core.db import db_session
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.drafts.schemas import DraftSubmitOut, DraftUpdateIn, ExpenseDraft
from receipt_review.modules.drafts.service import (
    get_draft,
    list_drafts,
    submit_draft,
    update_draft,
)

router = APIRouter(tags=["drafts"])


@router.get("/drafts", response_model=list[ExpenseDraft])
def list_drafts_endpoint(
    employee_id: str | None = None,
    status: DraftStatus | None = None,
    session: Session = Depends(db_session),
) -> list[ExpenseDraft]:
    return list_drafts(session, employee_id=employee_id, status=status)


@router.get("/drafts/{draft_id}", response_model=ExpenseDraft)
def get_draft_endpoint(draft_id: uuid.UUID, session: Session = Depends(db_session)) -> ExpenseDraft:
    return get_draft(session, draft_id=draft_id)


@router.patch("/drafts/{draft_id}", response_model=ExpenseDraft)
def update_draft_endpoint(
    draft_id: uuid.UUID, payload: DraftUpdateIn, session: Session = Depends(db_session)
) -> ExpenseDraft:
    return update_draft(session, draft_id=draft_id, edit=payload)


@router.post("/drafts/{draft_id}/submit", response_model=DraftSubmitOut)
def submit_draft_endpoint(
    draft_id: uuid.UUID, session: Session = Depends(db_session)
) -> DraftSubmitOut:
    draft, changed = submit_draft(session, draft_id=draft_id)
    return DraftSubmitOut(status=draft.status, changed=changed)
