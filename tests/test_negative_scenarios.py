"""Negative / non-trigger tests.

These tests exist to reduce false positives ("alert fatigue"). They assert that
rules do NOT fire when the ingredient overlap is absent or when the "wrong"
rule could be tempting.
"""

from __future__ import annotations

from core.enums import Severity
from helpers import assert_no_findings, assert_no_rule, rule_ids
from matching.matcher import register_product
from rules.engine import analyze_multiple_products


def _run(ingredients, rules, *labels: str):
    products = [
        register_product(f"p{i + 1}", text, ingredients, product_id=f"p{i + 1}")
        for i, text in enumerate(labels)
    ]
    return analyze_multiple_products(products, rules)


def test_negative_niacinamide_and_hyaluronic_acid(ingredients, rules):
    findings = _run(ingredients, rules, "Water, Niacinamide", "Water, Sodium Hyaluronate")
    assert not [f for f in findings if f.severity in (Severity.red, Severity.yellow)]
    assert_no_findings(findings)


def test_negative_gentle_basics(ingredients, rules):
    """Humectants and emollients alone never trigger anything."""
    findings = _run(
        ingredients,
        rules,
        "Water, Glycerin, Butylene Glycol",
        "Water, Squalane, Allantoin",
        "Zinc Oxide, Glycerin",
    )
    assert_no_findings(findings)


def test_negative_conflict_inside_one_product(ingredients, rules):
    """Both actives in the same bottle: nothing to pair with a plain moisturizer."""
    findings = _run(ingredients, rules, "Retinol, Glycolic Acid", "Water, Glycerin")
    assert_no_findings(findings)


def test_negative_bakuchiol_is_not_a_retinoid(ingredients, rules):
    findings = _run(ingredients, rules, "Bakuchiol", "Glycolic Acid")
    assert_no_rule(findings, "R01_retinoid_aha")
    assert_no_findings(findings)


def test_negative_vitamin_c_derivative_with_benzoyl_peroxide(ingredients, rules):
    """Only pure ascorbic acid is oxidized by benzoyl peroxide."""
    findings = _run(ingredients, rules, "Sodium Ascorbyl Phosphate", "Benzoyl Peroxide")
    assert_no_rule(findings, "R04_vitamin_c_benzoyl_peroxide")
    assert_no_findings(findings)


def test_negative_vitamin_c_and_niacinamide_is_only_a_caution(ingredients, rules):
    findings = _run(ingredients, rules, "Ascorbic Acid", "Niacinamide")
    assert rule_ids(findings) == {"C06_vitamin_c_niacinamide"}
    assert findings[0].severity == Severity.yellow


def test_negative_same_retinoid_twice_is_not_a_double_retinoid(ingredients, rules):
    findings = _run(ingredients, rules, "Retinol", "Retinol, Squalane")
    assert_no_rule(findings, "R05_double_retinoid")
    assert not [f for f in findings if f.severity == Severity.red]


def test_negative_unmatched_labels(ingredients, rules):
    findings = _run(ingredients, rules, "xxxxzzzz nothing here", "12345 67890")
    assert_no_findings(findings)


def test_negative_hydration_without_acid(ingredients, rules):
    findings = _run(ingredients, rules, "Hyaluronic Acid", "Panthenol")
    assert_no_rule(findings, "S04_exfoliant_hydration")
