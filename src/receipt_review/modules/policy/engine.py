from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.extraction.schemas import ExtractedData
from receipt_review.modules.policy.schemas import FindingSeverity, PolicyFinding, PolicyRule

RECEIPT_REQUIRED_MESSAGE = "Receipt required; attached via upload."


def evaluate(extraction: ExtractedData, rules: Sequence[PolicyRule]) -> list[PolicyFinding]:
    """Run ``rules`` in order against one extraction. Pure: no I/O, no mutation."""
    findings: list[PolicyFinding] = []
    for rule in rules:
        if not rule_applies(rule, extraction):
            continue

        if rule.limit is not None and _exceeds(extraction.amount_total, rule.limit):
            findings.append(
                PolicyFinding(
                    code=rule.code,
                    severity=FindingSeverity.WARN,
                    message=f"{rule.description} (limit {_fmt(rule.limit)})",
                    evidence=f"amount={_fmt(extraction.amount_total)}",
                )
            )

        # Only annotates the requirement; attachment presence is not checked.
        if rule.requires and rule.requires.receipt:
            findings.append(
                PolicyFinding(
                    code=f"{rule.code}_RECEIPT_REQ",
                    severity=FindingSeverity.INFO,
                    message=RECEIPT_REQUIRED_MESSAGE,
                    evidence="",
                )
            )
    return findings


def rule_applies(rule: PolicyRule, extraction: ExtractedData) -> bool:
    applies = rule.applies_to
    if applies.category and not _same(extraction.category, applies.category):
        return False
    city = extraction.location.city if extraction.location else None
    if applies.city and not _same(city, applies.city):
        return False
    return True


def status_from(findings: Sequence[PolicyFinding]) -> DraftStatus:
    if any(f.severity == FindingSeverity.BLOCK for f in findings):
        return DraftStatus.FLAGGED
    return DraftStatus.VALID


def _same(value: str | None, expected: str) -> bool:
    return (value or "").lower() == expected.lower()


def _exceeds(amount: Decimal | None, limit: Decimal) -> bool:
    # An unknown total never trips a limit.
    return amount is not None and amount > limit


def _fmt(value: Decimal | None) -> str:
    if value is None:
        return "null"
    # 150.00 -> "150", 42.50 -> "42.5"
    return format(value.normalize(), "f")
