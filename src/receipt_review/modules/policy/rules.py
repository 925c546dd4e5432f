from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from receipt_review.core.coercion import (
    MISSING,
    as_bool,
    as_decimal,
    as_mapping,
    as_str,
    is_finite_number,
    take,
)
from receipt_review.core.errors import StoreFailedError
from receipt_review.core.logging import get_logger, log_event
from receipt_review.modules.policy.models import PolicyRuleRow
from receipt_review.modules.policy.schemas import AppliesTo, PolicyRule, RuleRequirements

logger = get_logger(__name__)


def coerce_rule(code: str, payload: Any) -> tuple[PolicyRule, list[str]]:
    """
    Map one stored rule row onto the nearest valid PolicyRule.

    Unknown or wrong-typed keys are ignored and reported in the returned list.
    """
    dropped: list[str] = []
    data = as_mapping(payload)
    if data is None:
        if payload is not None:
            dropped.append("<root>")
        return PolicyRule(code=code), dropped

    fields: dict[str, Any] = {"code": code}

    description = take(data, "description", as_str, dropped)
    if isinstance(description, str):
        fields["description"] = description

    applies = data.get("appliesTo")
    if isinstance(applies, dict):
        predicates = {}
        for key in ("category", "city"):
            value = take(applies, key, as_str, dropped, prefix="appliesTo.")
            if isinstance(value, str):
                predicates[key] = value
        fields["applies_to"] = AppliesTo(**predicates)
    elif applies is not None:
        dropped.append("appliesTo")

    limit = data.get("limit")
    if is_finite_number(limit):
        fields["limit"] = as_decimal(limit)
    elif limit is not None:
        dropped.append("limit")

    requires = data.get("requires")
    if isinstance(requires, dict):
        flags = {}
        for key, attr in (("receipt", "receipt"), ("managerApproval", "manager_approval")):
            value = take(requires, key, as_bool, dropped, prefix="requires.")
            if value is not MISSING and value is not None:
                flags[attr] = value
        fields["requires"] = RuleRequirements(**flags)
    elif requires is not None:
        dropped.append("requires")

    return PolicyRule(**fields), dropped


def load_rules(session: Session) -> list[PolicyRule]:
    try:
        rows = list(
            session.scalars(
                select(PolicyRuleRow)
                .where(PolicyRuleRow.active.is_(True))
                .order_by(PolicyRuleRow.position, PolicyRuleRow.code)
            )
        )
    except SQLAlchemyError as e:
        raise StoreFailedError("Failed to load policy rules") from e

    rules: list[PolicyRule] = []
    for row in rows:
        rule, dropped = coerce_rule(row.code, row.rule_json)
        if dropped:
            log_event(
                logger,
                "coercion.dropped",
                payload="policy_rule",
                rule_code=row.code,
                dropped=dropped,
            )
        rules.append(rule)
    return rules


def list_rule_rows(session: Session) -> list[PolicyRuleRow]:
    return list(
        session.scalars(select(PolicyRuleRow).order_by(PolicyRuleRow.position, PolicyRuleRow.code))
    )


def upsert_rule(
    session: Session, *, code: str, rule_json: dict, position: int = 0, active: bool = True
) -> PolicyRuleRow:
    row = session.scalar(select(PolicyRuleRow).where(PolicyRuleRow.code == code))
    action = "updated"
    if not row:
        row = PolicyRuleRow(id=uuid.uuid4(), code=code)
        action = "created"
    row.rule_json = rule_json
    row.position = position
    row.active = active
    try:
        session.add(row)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreFailedError("Failed to save policy rule", code=code) from e
    log_event(logger, "policy.rule.upsert", rule_code=code, action=action, active=active)
    return row


def seed_rules_from_file(session: Session, *, path: Path) -> int:
    """Insert rules from a JSON list (``[{"code": ..., ...}]``) when the table is empty."""
    if session.scalar(select(PolicyRuleRow.id).limit(1)) is not None:
        return 0
    entries = json.loads(path.read_text(encoding="utf-8"))
    count = 0
    for position, entry in enumerate(entries if isinstance(entries, list) else []):
        code = entry.get("code") if isinstance(entry, dict) else None
        if not isinstance(code, str) or not code.strip():
            continue
        body = {k: v for k, v in entry.items() if k != "code"}
        upsert_rule(session, code=code.strip(), rule_json=body, position=position)
        count += 1
    log_event(logger, "policy.rules.seeded", path=str(path), rules_count=count)
    return count
