# labels, finding text, share text

from __future__ import annotations

from collections.abc import Mapping, Sequence

from core.enums import Language, Severity
from core.models import Finding, Ingredient
from reasoning.combine import summarize_findings

_TYPE_LABELS: dict[Language, dict[Severity, str]] = {
    Language.ko: {
        Severity.red: "충돌",
        Severity.yellow: "주의",
        Severity.green: "궁합",
    },
    Language.en: {
        Severity.red: "Conflict",
        Severity.yellow: "Caution",
        Severity.green: "Synergy",
    },
}

SHARE_BRAND = "SelfShelf"


def type_label(severity: Severity | str, lang: Language | str = Language.ko) -> str:
    return _TYPE_LABELS[Language(lang)][Severity(severity)]


def ingredient_label(
    ingredients: Mapping[str, Ingredient],
    ingredient_id: str,
    lang: Language | str = Language.ko,
) -> str:
    """Display name for an ingredient id; unknown ids are shown as-is."""
    ing = ingredients.get(ingredient_id)
    if ing is None:
        return ingredient_id
    if Language(lang) == Language.ko and ing.ko_name:
        return f"{ing.ko_name} ({ing.inci_name})"
    return ing.inci_name


def render_explanation(
    finding: Finding,
    ingredients: Mapping[str, Ingredient],
    lang: Language | str = Language.ko,
) -> str:
    rule = finding.rule
    a = ingredient_label(ingredients, finding.ingredient_a, lang)
    b = ingredient_label(ingredients, finding.ingredient_b, lang)
    return f"{rule.title.get(lang)}: {a} + {b}. {rule.reason.get(lang)}"


def render_share_text(
    product_names: Sequence[str],
    findings: Sequence[Finding],
    lang: Language | str = Language.ko,
) -> str:
    lines: list[str] = [f"[{SHARE_BRAND}] {' × '.join(product_names)}", ""]

    summary = summarize_findings(findings)
    for severity, count in (
        (Severity.red, summary.red),
        (Severity.yellow, summary.yellow),
        (Severity.green, summary.green),
    ):
        if count > 0:
            lines.append(f"{type_label(severity, lang)}: {count}")
    lines.append("")

    for f in findings:
        lines.append(f"[{type_label(f.severity, lang)}] {f.rule.title.get(lang)}")

    return "\n".join(lines)
