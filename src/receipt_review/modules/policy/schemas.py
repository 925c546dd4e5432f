from __future__ import annotations

import enum
from decimal import Decimal

from pydantic import Field

from receipt_review.core.schemas import FrozenWireModel
from receipt_review.modules.drafts.status import DraftStatus


class FindingSeverity(str, enum.Enum):
    INFO = "info"
    WARN = "warn"
    # Never produced by the built-in rule kinds yet; it is what flags a draft.
    BLOCK = "block"


class AppliesTo(FrozenWireModel):
    category: str | None = None
    city: str | None = None


class RuleRequirements(FrozenWireModel):
    receipt: bool | None = None
    # Accepted and stored, but no rule outcome depends on it yet.
    manager_approval: bool | None = None


class PolicyRule(FrozenWireModel):
    code: str
    description: str = ""
    applies_to: AppliesTo = Field(default_factory=AppliesTo)
    limit: Decimal | None = None
    requires: RuleRequirements | None = None


class PolicyFinding(FrozenWireModel):
    code: str
    severity: FindingSeverity
    message: str
    evidence: str = ""


class PolicyRuleIn(FrozenWireModel):
    code: str = Field(min_length=1, max_length=100)
    rule: dict = Field(default_factory=dict)
    position: int = 0
    active: bool = True


class PolicyEvaluationOut(FrozenWireModel):
    status: DraftStatus
    findings: list[PolicyFinding]
