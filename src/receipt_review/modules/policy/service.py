from __future__ import annotations

import uuid
from collections import Counter

from sqlalchemy.orm import Session

from receipt_review.core.logging import bind_draft, get_logger, log_event, unbind_draft
from receipt_review.modules.drafts import lifecycle
from receipt_review.modules.drafts.schemas import ExpenseDraft
from receipt_review.modules.drafts.store import DraftStore
from receipt_review.modules.policy.engine import evaluate
from receipt_review.modules.policy.rules import load_rules
from receipt_review.modules.policy.schemas import PolicyFinding

logger = get_logger(__name__)


def evaluate_draft(
    session: Session, *, draft_id: uuid.UUID
) -> tuple[ExpenseDraft, list[PolicyFinding]]:
    token = bind_draft(draft_id)
    try:
        store = DraftStore(session)
        draft = store.get(draft_id)
        rules = load_rules(session)
        findings = evaluate(draft.extraction, rules)
        saved = store.save(lifecycle.apply_policy(draft, findings))

        counts = Counter(f.severity.value for f in findings)
        log_event(
            logger,
            "policy.evaluate.summary",
            rules_count=len(rules),
            findings_count=len(findings),
            info_count=counts.get("info", 0),
            warn_count=counts.get("warn", 0),
            block_count=counts.get("block", 0),
            status=saved.status.value,
        )
        return saved, findings
    finally:
        unbind_draft(token)
