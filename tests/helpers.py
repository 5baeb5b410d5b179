from __future__ import annotations

from typing import Iterable

from core.models import Finding, LocalizedText, Product, Rule
from core.enums import RuleType


def rule_ids(findings: Iterable[Finding]) -> set[str]:
    """Return all rule_ids from a list of Finding objects."""
    return {f.rule_id for f in findings}


def assert_no_findings(findings: Iterable[Finding]) -> None:
    """Assert that no rules fired."""
    findings = list(findings)
    assert findings == [], f"Expected no findings, but got: {rule_ids(findings)}"


def assert_has_rule(findings: Iterable[Finding], rule_id: str) -> None:
    """Assert that a specific rule fired."""
    rids = rule_ids(findings)
    assert rule_id in rids, f"Expected rule '{rule_id}' to fire, got: {rids}"


def assert_no_rule(findings: Iterable[Finding], rule_id: str) -> None:
    """Assert that a specific rule did NOT fire."""
    rids = rule_ids(findings)
    assert rule_id not in rids, f"Did NOT expect rule '{rule_id}', but got: {rids}"


def make_product(product_id: str, *ingredient_ids: str) -> Product:
    return Product(id=product_id, ingredients=tuple(ingredient_ids), name=product_id)


def make_rule(
    rule_id: str,
    level: int,
    a: Iterable[str],
    b: Iterable[str],
    weight: float = 0.0,
    rule_type: RuleType = RuleType.mutual,
) -> Rule:
    """A minimal synthetic rule; text fields carry the rule id."""
    text = LocalizedText(en=rule_id, ko=rule_id)
    return Rule(
        id=rule_id,
        level=level,
        type=rule_type,
        a=frozenset(a),
        b=frozenset(b),
        title=text,
        reason=text,
        reason_detail=text,
        fix=text,
        fix_detail=text,
        severity_weight=weight,
    )
