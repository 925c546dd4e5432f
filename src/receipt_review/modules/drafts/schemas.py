from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import Field

from receipt_review.core.schemas import FrozenWireModel, WireModel
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.extraction.schemas import ExtractedData
from receipt_review.modules.policy.schemas import PolicyFinding


class AISplitAllocation(FrozenWireModel):
    gl_account: str = Field(min_length=1)
    amount: Decimal | None = None
    percent: Decimal | None = None
    notes: str | None = None


class ExpenseDraft(FrozenWireModel):
    """The draft aggregate as the core sees it. Mutations return a new value."""

    id: uuid.UUID
    receipt_id: uuid.UUID
    extraction: ExtractedData
    validation: list[PolicyFinding] = Field(default_factory=list)
    status: DraftStatus = DraftStatus.NEEDS_INFO
    employee_id: str | None = None
    functional_team_code: str | None = None
    trip_id: str | None = None
    gl_account: str | None = None
    business_category: str | None = None
    ai_confidence: Decimal | None = Field(default=None, ge=0, le=1)
    ai_labels: list[str] | None = None
    ai_allocations: list[AISplitAllocation] | None = None
    created_at: datetime
    updated_at: datetime
    # Persistence revision, compared on every save.
    version: int = Field(default=0, exclude=True)


class DraftEdit(FrozenWireModel):
    """
    A manual edit. ``extraction`` is always replaced; the remaining fields are
    replaced only when they were supplied (``None`` unassigns).
    """

    extraction: ExtractedData
    employee_id: str | None = None
    functional_team_code: str | None = None
    trip_id: str | None = None
    ai_labels: list[str] | None = None


class DraftUpdateIn(WireModel):
    extraction: dict[str, Any]
    employee_id: str | None = None
    functional_team_code: str | None = None
    trip_id: str | None = None
    ai_labels: list[str] | None = None


class DraftSubmitOut(WireModel):
    status: DraftStatus
    changed: bool
