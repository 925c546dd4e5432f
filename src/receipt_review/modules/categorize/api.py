from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from receipt_review.core.db import db_session
from receipt_review.modules.categorize.schemas import CategorizeOut
from receipt_review.modules.categorize.service import categorize_draft

router = APIRouter(tags=["categorize"])


@router.post("/drafts/{draft_id}/categorize", response_model=CategorizeOut)
def categorize_draft_endpoint(
    draft_id: uuid.UUID, session: Session = Depends(db_session)
) -> CategorizeOut:
    draft, _ = categorize_draft(session, draft_id=draft_id)
    return CategorizeOut(
        status=draft.status,
        category=draft.extraction.category,
        business_category=draft.business_category,
        gl_account=draft.gl_account,
        employee_id=draft.employee_id,
        functional_team_code=draft.functional_team_code,
        trip_id=draft.trip_id,
        confidence=draft.ai_confidence,
        notes=draft.ai_labels or [],
        split_allocations=draft.ai_allocations or [],
    )
