# rule loading + pairwise evaluation
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from core.constants import severity_for_level, type_for_level
from core.enums import RuleType
from core.models import Finding, Product, Rule
from data.loaders import localized

logger = logging.getLogger(__name__)

RULE_DIR = Path(__file__).resolve().parent / "rule_defs"


def rule_from_dict(raw: dict[str, Any]) -> Rule:
    return Rule(
        id=raw["id"],
        level=int(raw["level"]),
        type=RuleType(raw.get("type", "mutual")),
        a=frozenset(raw["a"]),
        b=frozenset(raw["b"]),
        title=localized(raw["title"]),
        reason=localized(raw.get("reason")),
        reason_detail=localized(raw.get("reason_detail")),
        fix=localized(raw.get("fix")),
        fix_detail=localized(raw.get("fix_detail")),
        severity_weight=float(raw.get("severity_weight", 0)),
    )


def _rule_records(path: Path) -> list[tuple[str, dict[str, Any]]]:
    if path.is_dir():
        return [
            (p.name, json.loads(p.read_text(encoding="utf-8")))
            for p in sorted(path.glob("*.json"))
        ]

    # A single file holding an array of rules
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = [raw]
    return [(f"{path.name}[{i}]", item) for i, item in enumerate(raw)]


def load_rules(rule_path: Path = RULE_DIR) -> list[Rule]:
    rules: list[Rule] = []

    for label, raw in _rule_records(Path(rule_path)):
        try:
            rule = rule_from_dict(raw)
        except KeyError as e:
            raise ValueError(
                f"Rule file '{label}' missing required key: {e}"
            ) from e

        rules.append(rule)

    return rules


def sort_findings(findings: list[Finding]) -> list[Finding]:
    """Level ascending (red first), then severity weight descending."""
    return sorted(findings, key=lambda f: (f.level, -f.rule.severity_weight))


def _finding(
    rule: Rule, ingredient_a: str, ingredient_b: str, product_a: Product, product_b: Product
) -> Finding:
    return Finding(
        rule_id=rule.id,
        level=rule.level,
        severity=severity_for_level(rule.level),
        type=type_for_level(rule.level),
        ingredient_a=ingredient_a,
        ingredient_b=ingredient_b,
        product_a=product_a.id,
        product_b=product_b.id,
        rule=rule,
    )


def evaluate_rule(rule: Rule, product_a: Product, product_b: Product) -> Finding | None:
    """
    Evaluate a single rule for the pair (product_a, product_b).

    Fires when one product contributes a group-A ingredient and the other a
    group-B ingredient, in either direction; `rule.type` does not change this.
    The representative ingredients are the first qualifying ones in each
    product's ingredient order, forward pairing before reverse.
    """
    a_in_group_a = [i for i in product_a.ingredients if i in rule.a]
    a_in_group_b = [i for i in product_a.ingredients if i in rule.b]
    b_in_group_a = [i for i in product_b.ingredients if i in rule.a]
    b_in_group_b = [i for i in product_b.ingredients if i in rule.b]

    # Forward: product_a holds the group-A side
    if a_in_group_a and b_in_group_b:
        return _finding(rule, a_in_group_a[0], b_in_group_b[0], product_a, product_b)

    # Reverse: product_b holds the group-A side
    if a_in_group_b and b_in_group_a:
        return _finding(rule, b_in_group_a[0], a_in_group_b[0], product_a, product_b)

    return None


def analyze_products(
    product_a: Product, product_b: Product, rules: Sequence[Rule]
) -> list[Finding]:
    findings: list[Finding] = []
    seen: set[str] = set()

    for rule in rules:
        if rule.id in seen:
            continue
        finding = evaluate_rule(rule, product_a, product_b)
        if finding is None:
            continue
        seen.add(rule.id)
        findings.append(finding)
        logger.debug(
            "rule %s fired for %s + %s (%s, %s)",
            rule.id,
            product_a.id,
            product_b.id,
            finding.ingredient_a,
            finding.ingredient_b,
        )

    return sort_findings(findings)


def analyze_multiple_products(
    products: Sequence[Product], rules: Sequence[Rule]
) -> list[Finding]:
    """
    Analyze every positional pair (i < j) and keep the first finding per rule id.

    Pairs are by position, not identity: the same product listed twice still
    forms one pair. Fewer than two products yields no findings.
    """
    all_findings: list[Finding] = []

    for i in range(len(products)):
        for j in range(i + 1, len(products)):
            logger.debug("analyzing pair (%d, %d)", i, j)
            all_findings.extend(analyze_products(products[i], products[j], rules))

    unique: list[Finding] = []
    seen: set[str] = set()
    for f in all_findings:
        if f.rule_id in seen:
            continue
        seen.add(f.rule_id)
        unique.append(f)

    return sort_findings(unique)
