from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from receipt_review.core.db import db_session
from receipt_review.modules.policy.rules import list_rule_rows, upsert_rule
from receipt_review.modules.policy.schemas import PolicyEvaluationOut, PolicyRuleIn
from receipt_review.modules.policy.service import evaluate_draft

router = APIRouter(tags=["policy"])


@router.post("/drafts/{draft_id}/policy", response_model=PolicyEvaluationOut)
def evaluate_draft_endpoint(
    draft_id: uuid.UUID, session: Session = Depends(db_session)
) -> PolicyEvaluationOut:
    draft, findings = evaluate_draft(session, draft_id=draft_id)
    return PolicyEvaluationOut(status=draft.status, findings=findings)


@router.get("/policy/rules", response_model=list[PolicyRuleIn])
def list_rules_endpoint(session: Session = Depends(db_session)) -> list[PolicyRuleIn]:
    return [
        PolicyRuleIn(code=r.code, rule=r.rule_json or {}, position=r.position, active=r.active)
        for r in list_rule_rows(session)
    ]


@router.put("/policy/rules", response_model=PolicyRuleIn)
def upsert_rule_endpoint(
    payload: PolicyRuleIn, session: Session = Depends(db_session)
) -> PolicyRuleIn:
    row = upsert_rule(
        session,
        code=payload.code,
        rule_json=payload.rule,
        position=payload.position,
        active=payload.active,
    )
    return PolicyRuleIn(code=row.code, rule=row.rule_json, position=row.position, active=row.active)
