from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from receipt_review.core.coercion import (
    CoercionResult,
    as_decimal,
    as_mapping,
    is_finite_number,
    is_number,
)
from receipt_review.modules.drafts.schemas import AISplitAllocation

_ZERO = Decimal("0")
_ONE = Decimal("1")

_LABEL_FIELDS = {
    "category": "category",
    "businessCategory": "business_category",
    "glAccount": "gl_account",
}
# null is meaningful for these: it unassigns.
_ASSIGNMENT_FIELDS = {
    "employeeId": "employee_id",
    "functionalTeamCode": "functional_team_code",
    "tripId": "trip_id",
}


class AISuggestion(BaseModel):
    """
    A validated suggestion. Only fields in ``model_fields_set`` were supplied;
    the rest must leave the draft unchanged.
    """

    category: str | None = None
    business_category: str | None = None
    gl_account: str | None = None
    employee_id: str | None = None
    functional_team_code: str | None = None
    trip_id: str | None = None
    confidence: Decimal | None = None
    notes: list[str] = []
    split_allocations: list[AISplitAllocation] = []


def parse_suggestion(payload: Any) -> CoercionResult[AISuggestion]:
    data = as_mapping(payload)
    if data is None:
        return CoercionResult(AISuggestion(), ["<root>"] if payload is not None else [])

    dropped: list[str] = []
    fields: dict[str, Any] = {}

    for key, attr in _LABEL_FIELDS.items():
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            fields[attr] = value.strip()
        elif value is not None:
            dropped.append(key)

    for key, attr in _ASSIGNMENT_FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        if value is None:
            fields[attr] = None
        elif isinstance(value, str):
            fields[attr] = value.strip() or None
        else:
            dropped.append(key)

    confidence = data.get("confidence")
    score = as_decimal(confidence, allow_non_finite=True) if is_number(confidence) else None
    if score is not None and not score.is_nan():
        # Infinities clamp like any other out-of-range score.
        fields["confidence"] = min(_ONE, max(_ZERO, score))
    elif confidence is not None:
        dropped.append("confidence")

    notes = data.get("notes")
    if isinstance(notes, list):
        fields["notes"] = [n.strip() for n in notes if isinstance(n, str) and n.strip()]
    elif notes is not None:
        dropped.append("notes")

    splits = data.get("splitAllocations")
    if isinstance(splits, list):
        fields["split_allocations"] = _parse_allocations(splits, dropped)
    elif splits is not None:
        dropped.append("splitAllocations")

    return CoercionResult(AISuggestion(**fields), dropped)


def _parse_allocations(entries: list[Any], dropped: list[str]) -> list[AISplitAllocation]:
    out: list[AISplitAllocation] = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            dropped.append(f"splitAllocations[{idx}]")
            continue
        gl_account = entry.get("glAccount")
        if not isinstance(gl_account, str) or not gl_account.strip():
            dropped.append(f"splitAllocations[{idx}]")
            continue
        allocation: dict[str, Any] = {"gl_account": gl_account.strip()}
        for key in ("amount", "percent"):
            value = entry.get(key)
            if is_finite_number(value):
                allocation[key] = as_decimal(value)
            elif value is not None:
                dropped.append(f"splitAllocations[{idx}].{key}")
        notes = entry.get("notes")
        if isinstance(notes, str):
            allocation["notes"] = notes.strip()
        elif notes is not None:
            dropped.append(f"splitAllocations[{idx}].notes")
        out.append(AISplitAllocation(**allocation))
    return out
