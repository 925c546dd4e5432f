from __future__ import annotations

from decimal import Decimal

from receipt_review.core.schemas import WireModel
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.drafts.schemas import AISplitAllocation


class CategorizeOut(WireModel):
    status: DraftStatus
    category: str | None
    business_category: str | None
    gl_account: str | None
    employee_id: str | None
    functional_team_code: str | None
    trip_id: str | None
    confidence: Decimal | None
    notes: list[str]
    split_allocations: list[AISplitAllocation]
