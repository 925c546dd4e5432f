from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from receipt_review.core.errors import CategorizationFailedError
from receipt_review.core.logging import (
    bind_draft,
    get_logger,
    log_event,
    log_exception,
    monotonic_ms,
    unbind_draft,
)
from receipt_review.modules.categorize.ai import build_prompt, request_suggestion
from receipt_review.modules.categorize.merge import merge_suggestion
from receipt_review.modules.categorize.suggestion import AISuggestion, parse_suggestion
from receipt_review.modules.directory.service import list_employees, list_teams, list_trips
from receipt_review.modules.drafts.schemas import ExpenseDraft
from receipt_review.modules.drafts.store import DraftStore

logger = get_logger(__name__)

Suggester = Callable[[str], Any]


def categorize_draft(
    session: Session, *, draft_id: uuid.UUID, suggester: Suggester | None = None
) -> tuple[ExpenseDraft, AISuggestion]:
    """
    Ask the AI assistant for category/assignment/GL suggestions and merge them.

    A failing suggestion source leaves the draft untouched and raises
    CategorizationFailedError.
    """
    suggester = suggester or request_suggestion
    token = bind_draft(draft_id)
    start = time.monotonic()
    try:
        store = DraftStore(session)
        draft = store.get(draft_id)
        prompt = build_prompt(**_prompt_context(session, draft))

        log_event(logger, "categorize.start", draft_status=draft.status.value)
        try:
            raw = suggester(prompt)
        except CategorizationFailedError:
            log_exception(logger, "categorize.suggester.error", duration_ms=monotonic_ms(start))
            raise

        parsed = parse_suggestion(raw)
        if parsed.dropped:
            log_event(logger, "coercion.dropped", payload="ai_suggestion", dropped=parsed.dropped)

        merged = store.save(merge_suggestion(draft, parsed.value))
        log_event(
            logger,
            "categorize.merge",
            fields=sorted(parsed.value.model_fields_set),
            ai_confidence=str(merged.ai_confidence) if merged.ai_confidence is not None else None,
            allocations_count=len(merged.ai_allocations or []),
            duration_ms=monotonic_ms(start),
        )
        return merged, parsed.value
    finally:
        unbind_draft(token)


def _prompt_context(session: Session, draft: ExpenseDraft) -> dict[str, Any]:
    extraction = draft.extraction.model_dump(mode="json", by_alias=True)
    receipt = {
        key: extraction.get(key)
        for key in (
            "merchant",
            "date",
            "amountTotal",
            "currency",
            "category",
            "items",
            "location",
            "invoiceNumber",
        )
    }
    assignment = {
        "employeeId": draft.employee_id,
        "functionalTeamCode": draft.functional_team_code,
        "tripId": draft.trip_id,
        "glAccount": draft.gl_account,
        "businessCategory": draft.business_category,
    }
    employees = [
        {"id": str(e.id), "name": e.name, "email": e.email, "teamCode": e.team_code}
        for e in list_employees(session)
    ]
    teams = [
        {"code": t.code, "name": t.name, "description": t.description}
        for t in list_teams(session)
    ]
    trips = [
        {
            "id": str(t.id),
            "name": t.name,
            "startDate": t.start_date.isoformat() if t.start_date else None,
            "endDate": t.end_date.isoformat() if t.end_date else None,
            "city": t.city,
            "country": t.country,
        }
        for t in list_trips(session)
    ]
    return {
        "receipt": receipt,
        "assignment": assignment,
        "employees": employees,
        "teams": teams,
        "trips": trips,
    }
