from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from core.enums import Language
from core.models import AnalysisResult, Finding, Ingredient, LocalizedText, Product
from reasoning.combine import build_pair_reports, summarize_findings
from reasoning.explain import ingredient_label, render_explanation

SCHEMA_VERSION = "1.0"


def _val(x: Any) -> Any:
    """Convert enums-like objects to plain JSON-safe values."""
    if hasattr(x, "value"):
        return x.value
    return x


def _text(t: LocalizedText) -> dict[str, str]:
    return {"en": t.en, "ko": t.ko}


def _ingredient_ref(
    ingredients: Mapping[str, Ingredient], ingredient_id: str, lang: Language
) -> dict[str, Any]:
    return {
        "id": ingredient_id,
        "label": ingredient_label(ingredients, ingredient_id, lang),
        "known": ingredient_id in ingredients,
    }


def finding_to_dict(
    f: Finding,
    ingredients: Mapping[str, Ingredient],
    lang: Language = Language.ko,
) -> dict[str, Any]:
    rule = f.rule
    return {
        "rule_id": f.rule_id,
        "level": f.level,
        "severity": _val(f.severity),
        "type": _val(f.type),
        "rule_type": _val(rule.type),
        "severity_weight": rule.severity_weight,
        "ingredient_a": _ingredient_ref(ingredients, f.ingredient_a, lang),
        "ingredient_b": _ingredient_ref(ingredients, f.ingredient_b, lang),
        "product_a": f.product_a,
        "product_b": f.product_b,
        "explanation": render_explanation(f, ingredients, lang),
        "title": _text(rule.title),
        "reason": _text(rule.reason),
        "reason_detail": _text(rule.reason_detail),
        "fix": _text(rule.fix),
        "fix_detail": _text(rule.fix_detail),
    }


def product_to_dict(p: Product) -> dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "brand": p.brand,
        "category": _val(p.category),
        "ingredients": list(p.ingredients),
        "raw_text": p.raw_text,
        "created_at": p.created_at,
    }


def build_json_payload(
    *,
    result: AnalysisResult,
    products: Sequence[Product],
    ingredients: Mapping[str, Ingredient],
    lang: Language = Language.ko,
    selected_severities: Sequence[str] = (),
) -> dict[str, Any]:
    # Findings keep the analyzer's order (level, then weight); that order is
    # already deterministic so it is not re-sorted here.
    findings_out = [finding_to_dict(f, ingredients, lang) for f in result.findings]
    summary = summarize_findings(result.findings)

    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "analysis": {
            "id": result.id,
            "created_at": result.created_at,
            "product_ids": list(result.product_ids),
        },
        "input": {
            "language": _val(lang),
            "selected_severities": [_val(s) for s in selected_severities],
            "products": [product_to_dict(p) for p in products],
        },
        "summary": {
            "verdict": _val(summary.verdict),
            "red": summary.red,
            "yellow": summary.yellow,
            "green": summary.green,
        },
        "findings": findings_out,
        "pairs": [
            {
                "product_a": rep.product_a,
                "product_b": rep.product_b,
                "worst_level": rep.worst_level,
                "rule_ids": [f.rule_id for f in rep.findings],
            }
            for rep in build_pair_reports(result.findings)
        ],
    }
    return payload


def build_match_payload(
    *,
    text: str,
    matched_ids: Sequence[str],
    ingredients: Mapping[str, Ingredient],
    lang: Language = Language.ko,
) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "input": {"text": text, "language": _val(lang)},
        "ingredients": [
            {
                **_ingredient_ref(ingredients, i, lang),
                "is_active": bool(ingredients[i].is_active) if i in ingredients else False,
            }
            for i in matched_ids
        ],
    }
