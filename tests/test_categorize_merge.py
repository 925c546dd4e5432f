from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from receipt_review.core.db import SessionLocal
from receipt_review.core.errors import CategorizationFailedError
from receipt_review.modules.categorize.merge import merge_suggestion
from receipt_review.modules.categorize.service import categorize_draft
from receipt_review.modules.categorize.suggestion import parse_suggestion
from receipt_review.modules.directory.service import create_employee, create_team
from receipt_review.modules.drafts import lifecycle
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.drafts.service import get_draft
from receipt_review.modules.extraction.schemas import ExtractedData

T0 = datetime(2025, 6, 1, tzinfo=UTC)


def _draft(**update):
    draft = lifecycle.new_draft(
        draft_id=uuid.uuid4(),
        receipt_id=uuid.uuid4(),
        extraction=ExtractedData(merchant="Joe's Grill", category="meals", amount_total=Decimal("52.50")),
        created_at=T0,
    )
    return draft.model_copy(update=update)


def _merge(draft, payload):
    return merge_suggestion(draft, parse_suggestion(payload).value, now=T0)


def test_merge_keeps_valid_allocations_and_forces_proposed():
    payload = {
        "category": "Meals",
        "splitAllocations": [{"glAccount": "Meals", "amount": 42.5}, {"amount": 10}],
    }
    result = parse_suggestion(payload)
    assert result.dropped == ["splitAllocations[1]"]

    merged = merge_suggestion(_draft(status=DraftStatus.SUBMITTED), result.value, now=T0)
    assert merged.status == DraftStatus.PROPOSED
    assert merged.extraction.category == "Meals"
    assert merged.extraction.merchant == "Joe's Grill"
    assert merged.extraction.amount_total == Decimal("52.50")
    assert len(merged.ai_allocations) == 1
    assert merged.ai_allocations[0].gl_account == "Meals"
    assert merged.ai_allocations[0].amount == Decimal("42.5")


def test_absent_fields_leave_draft_unchanged_but_null_unassigns():
    draft = _draft(employee_id="emp-1", trip_id="trip-1", gl_account="6100")
    merged = _merge(draft, {"tripId": None})
    assert merged.trip_id is None
    assert merged.employee_id == "emp-1"
    assert merged.gl_account == "6100"
    assert merged.extraction.category == "meals"


def test_malformed_fields_are_dropped_individually():
    result = parse_suggestion(
        {
            "category": 12,
            "glAccount": "  Meals ",
            "employeeId": 77,
            "confidence": "high",
            "notes": ["  lunch with client ", 5, "", "   "],
        }
    )
    assert set(result.dropped) == {"category", "employeeId", "confidence"}
    suggestion = result.value
    assert suggestion.gl_account == "Meals"
    assert suggestion.notes == ["lunch with client"]
    assert "category" not in suggestion.model_fields_set
    assert "employee_id" not in suggestion.model_fields_set


def test_confidence_is_clamped():
    assert _merge(_draft(), {"confidence": 1.7}).ai_confidence == Decimal("1")
    assert _merge(_draft(), {"confidence": -0.2}).ai_confidence == Decimal("0")
    assert _merge(_draft(), {"confidence": 0.85}).ai_confidence == Decimal("0.85")
    assert "confidence" not in parse_suggestion({"confidence": True}).value.model_fields_set


def test_allocation_numbers_must_be_finite():
    result = parse_suggestion(
        {
            "splitAllocations": [
                {"glAccount": "Travel", "amount": float("inf"), "percent": 50, "notes": 3},
                "nope",
            ]
        }
    )
    (allocation,) = result.value.split_allocations
    assert allocation.amount is None
    assert allocation.percent == Decimal("50")
    assert allocation.notes is None
    assert set(result.dropped) == {
        "splitAllocations[0].amount",
        "splitAllocations[0].notes",
        "splitAllocations[1]",
    }


def test_empty_suggestion_still_proposes():
    merged = _merge(_draft(status=DraftStatus.VALID), {})
    assert merged.status == DraftStatus.PROPOSED
    assert merged.updated_at == T0
    assert merged.ai_labels is None


def test_categorize_draft_merges_and_persists(make_draft):
    draft = make_draft({"merchant": "Joe's Grill", "amountTotal": 52.5})
    prompts: list[str] = []

    with SessionLocal() as session:
        employee = create_employee(session, name="Ada Lovelace", team_code="ENG")
        create_team(session, code="ENG", name="Engineering")

        def _suggest(prompt: str):
            prompts.append(prompt)
            return {
                "category": "Client Meals",
                "glAccount": "Meals",
                "employeeId": str(employee.id),
                "functionalTeamCode": "ENG",
                "confidence": 0.9,
                "notes": ["Restaurant receipt"],
                "splitAllocations": [],
            }

        merged, suggestion = categorize_draft(session, draft_id=draft.id, suggester=_suggest)
        stored = get_draft(session, draft_id=draft.id)

    assert "Ada Lovelace" in prompts[0]
    assert "Engineering" in prompts[0]
    assert suggestion.gl_account == "Meals"
    assert stored.status == DraftStatus.PROPOSED
    assert stored.extraction.category == "Client Meals"
    assert stored.employee_id == str(employee.id)
    assert stored.functional_team_code == "ENG"
    assert stored.ai_confidence == Decimal("0.9")
    assert stored.ai_labels == ["Restaurant receipt"]
    assert stored.ai_allocations is None
    assert merged.id == stored.id


def test_categorize_failure_leaves_draft_untouched(make_draft):
    draft = make_draft({"merchant": "Lyft"})

    def _fail(_prompt: str):
        raise CategorizationFailedError("OpenAI error 500")

    with SessionLocal() as session:
        with pytest.raises(CategorizationFailedError):
            categorize_draft(session, draft_id=draft.id, suggester=_fail)
        stored = get_draft(session, draft_id=draft.id)

    assert stored.status == DraftStatus.NEEDS_INFO
    assert stored.version == draft.version
    assert stored.extraction.category == "transport"


def test_request_suggestion_requires_api_key(monkeypatch):
    from receipt_review.core.config import settings
    from receipt_review.modules.categorize.ai import request_suggestion

    monkeypatch.setattr(settings, "openai_api_key", None)

    with pytest.raises(CategorizationFailedError):
        request_suggestion("prompt")


def test_request_suggestion_decodes_model_reply(monkeypatch):
    from receipt_review.core import llm
    from receipt_review.core.config import settings
    from receipt_review.modules.categorize.ai import request_suggestion

    monkeypatch.setattr(settings, "openai_api_key", "sk-test")

    class _Resp:
        def raise_for_status(self):
            return None

        def json(self):
            reply = "```json\n" + json.dumps({"glAccount": "Travel"}) + "\n```"
            return {"choices": [{"message": {"content": reply}}]}

    monkeypatch.setattr(llm.httpx, "post", lambda *args, **kwargs: _Resp())

    assert request_suggestion("prompt") == {"glAccount": "Travel"}


def test_infinite_confidence_is_clamped_and_nan_dropped():
    assert _merge(_draft(), {"confidence": float("inf")}).ai_confidence == Decimal("1")
    assert _merge(_draft(), {"confidence": float("-inf")}).ai_confidence == Decimal("0")

    result = parse_suggestion({"confidence": float("nan")})
    assert "confidence" not in result.value.model_fields_set
    assert result.dropped == ["confidence"]
