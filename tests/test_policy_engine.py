from __future__ import annotations

from decimal import Decimal

from receipt_review.core.db import SessionLocal
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.extraction.schemas import ExtractedData, Location
from receipt_review.modules.policy.engine import RECEIPT_REQUIRED_MESSAGE, evaluate, status_from
from receipt_review.modules.policy.rules import coerce_rule, load_rules, upsert_rule
from receipt_review.modules.policy.schemas import FindingSeverity, PolicyFinding


def _meals_limit_rule():
    rule, dropped = coerce_rule(
        "MEALS_LIMIT",
        {"description": "Meals over limit", "appliesTo": {"category": "meals"}, "limit": 100},
    )
    assert dropped == []
    return rule


def test_limit_rule_warns_only_for_matching_category():
    rule = _meals_limit_rule()

    meals = ExtractedData(category="meals", amount_total=Decimal("150"))
    findings = evaluate(meals, [rule])
    assert len(findings) == 1
    assert findings[0].severity == FindingSeverity.WARN
    assert findings[0].code == "MEALS_LIMIT"
    assert findings[0].message == "Meals over limit (limit 100)"
    assert findings[0].evidence == "amount=150"

    lodging = ExtractedData(category="lodging", amount_total=Decimal("150"))
    assert evaluate(lodging, [rule]) == []


def test_limit_is_strict_and_case_insensitive():
    rule = _meals_limit_rule()
    assert evaluate(ExtractedData(category="MEALS", amount_total=Decimal("100.00")), [rule]) == []
    assert len(evaluate(ExtractedData(category="Meals", amount_total=Decimal("100.01")), [rule])) == 1


def test_absent_total_never_trips_a_limit():
    rule = _meals_limit_rule()
    assert evaluate(ExtractedData(category="meals"), [rule]) == []


def test_absent_category_only_matches_rules_without_category_predicate():
    rule = _meals_limit_rule()
    extraction = ExtractedData(amount_total=Decimal("500"))
    assert evaluate(extraction, [rule]) == []

    catch_all, _ = coerce_rule("ANY_LIMIT", {"description": "Any", "limit": 10})
    assert [f.code for f in evaluate(extraction, [catch_all])] == ["ANY_LIMIT"]


def test_city_predicate_uses_extraction_location():
    rule, _ = coerce_rule(
        "NYC", {"description": "NYC cap", "appliesTo": {"city": "new york"}, "limit": 50}
    )
    in_nyc = ExtractedData(amount_total=Decimal("60"), location=Location(city="New York"))
    elsewhere = ExtractedData(amount_total=Decimal("60"), location=Location(city="Boston"))
    no_location = ExtractedData(amount_total=Decimal("60"))
    assert len(evaluate(in_nyc, [rule])) == 1
    assert evaluate(elsewhere, [rule]) == []
    assert evaluate(no_location, [rule]) == []


def test_receipt_requirement_emits_info_finding_and_manager_approval_is_inert():
    rule, _ = coerce_rule(
        "TRAVEL",
        {"description": "Travel", "requires": {"receipt": True, "managerApproval": True}},
    )
    findings = evaluate(ExtractedData(), [rule])
    assert findings == [
        PolicyFinding(
            code="TRAVEL_RECEIPT_REQ",
            severity=FindingSeverity.INFO,
            message=RECEIPT_REQUIRED_MESSAGE,
            evidence="",
        )
    ]


def test_evaluate_is_order_preserving_and_repeatable():
    over, _ = coerce_rule("A_LIMIT", {"description": "A", "limit": 1})
    receipt, _ = coerce_rule("B_DOCS", {"description": "B", "requires": {"receipt": True}})
    extraction = ExtractedData(amount_total=Decimal("5"))

    first = evaluate(extraction, [receipt, over])
    second = evaluate(extraction, [receipt, over])
    assert [f.code for f in first] == ["B_DOCS_RECEIPT_REQ", "A_LIMIT"]
    assert first == second


def test_status_from_only_block_flags():
    warn = PolicyFinding(code="X", severity=FindingSeverity.WARN, message="m")
    block = PolicyFinding(code="Y", severity=FindingSeverity.BLOCK, message="m")
    assert status_from([]) == DraftStatus.VALID
    assert status_from([warn]) == DraftStatus.VALID
    assert status_from([warn, block]) == DraftStatus.FLAGGED


def test_coerce_rule_drops_wrong_typed_fields():
    rule, dropped = coerce_rule(
        "BAD",
        {
            "description": 7,
            "appliesTo": {"category": ["meals"], "city": "Paris"},
            "limit": "100",
            "requires": {"receipt": "yes", "managerApproval": False},
        },
    )
    assert rule.description == ""
    assert rule.applies_to.category is None
    assert rule.applies_to.city == "Paris"
    assert rule.limit is None
    assert rule.requires is not None
    assert rule.requires.receipt is None
    assert rule.requires.manager_approval is False
    assert set(dropped) == {"description", "appliesTo.category", "limit", "requires.receipt"}


def test_coerce_rule_rejects_non_finite_limit():
    rule, dropped = coerce_rule("INF", {"limit": float("inf")})
    assert rule.limit is None
    assert dropped == ["limit"]


def test_load_rules_orders_by_position_then_code_and_skips_inactive():
    with SessionLocal() as session:
        upsert_rule(session, code="ZED", rule_json={"limit": 1}, position=0)
        upsert_rule(session, code="ALPHA", rule_json={"limit": 1}, position=1)
        upsert_rule(session, code="BETA", rule_json={"limit": 1}, position=0)
        upsert_rule(session, code="OFF", rule_json={"limit": 1}, position=0, active=False)

        rules = load_rules(session)

    assert [r.code for r in rules] == ["BETA", "ZED", "ALPHA"]


def test_load_rules_coerces_malformed_rows():
    with SessionLocal() as session:
        upsert_rule(session, code="ODD", rule_json={"limit": "lots", "description": "Odd"})
        rules = load_rules(session)

    assert len(rules) == 1
    assert rules[0].limit is None
    assert rules[0].description == "Odd"


def test_seed_rules_from_file_only_fills_empty_table(tmp_path):
    import json

    from receipt_review.modules.policy.rules import list_rule_rows, seed_rules_from_file

    seed = tmp_path / "rules.json"
    seed.write_text(
        json.dumps(
            [
                {"code": "MEALS_LIMIT", "appliesTo": {"category": "meals"}, "limit": 75},
                {"code": "  ", "limit": 1},
                {"code": "RECEIPTS", "requires": {"receipt": True}},
            ]
        ),
        encoding="utf-8",
    )

    with SessionLocal() as session:
        assert seed_rules_from_file(session, path=seed) == 2
        assert seed_rules_from_file(session, path=seed) == 0
        rows = list_rule_rows(session)
        rules = load_rules(session)

    assert [r.code for r in rows] == ["MEALS_LIMIT", "RECEIPTS"]
    assert rows[0].rule_json == {"appliesTo": {"category": "meals"}, "limit": 75}
    assert rules[0].limit == Decimal("75")


def test_engine_imports_without_orm_models():
    import os
    import subprocess
    import sys
    from pathlib import Path

    code = (
        "import sys\n"
        "import receipt_review.modules.policy.engine\n"
        "assert 'receipt_review.modules.drafts.models' not in sys.modules\n"
        "assert 'sqlalchemy.orm' not in sys.modules\n"
    )
    src = str(Path(__file__).resolve().parents[1] / "src")
    paths = [src, os.environ.get("PYTHONPATH", "")]
    env = {**os.environ, "PYTHONPATH": os.pathsep.join(p for p in paths if p)}
    result = subprocess.run(
        [sys.executable, "-c", code], capture_output=True, text=True, env=env
    )
    assert result.returncode == 0, result.stderr
