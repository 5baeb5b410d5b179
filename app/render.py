from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from core.enums import Language
from core.models import Finding, Ingredient, PairReport

# Text styles (fine to include backgrounds here)
_SEV_STYLE = {
    "red": "bold white on red",
    "yellow": "bold yellow",
    "green": "bold green",
}


def _border_style_for_level(level: int) -> str:
    """Panel borders should use simple colors (avoid background styles)."""
    return {1: "red", 2: "yellow", 3: "green"}.get(level, "dim")


def _mk_console():
    """
    Force ANSI + colors even when Rich mis-detects TTY on Windows.
    Keep this in one place so summary + details behave identically.
    """
    from rich.console import Console

    return Console(
        force_terminal=True,
        no_color=False,
        color_system="truecolor",
        stderr=False,
    )


@dataclass(frozen=True)
class SummaryRow:
    severity: str
    type_label: str
    rule: str
    ingredients: str
    products: str


def build_summary_rows(
    findings: Iterable[Finding],
    ingredients: Mapping[str, Ingredient],
    product_names: Mapping[str, str],
    lang: Language = Language.ko,
) -> list[SummaryRow]:
    # Findings arrive sorted by the analyzer; rows keep that order.
    from reasoning.explain import ingredient_label, type_label

    rows: list[SummaryRow] = []
    for f in findings:
        a = ingredient_label(ingredients, f.ingredient_a, lang)
        b = ingredient_label(ingredients, f.ingredient_b, lang)
        pa = product_names.get(f.product_a, f.product_a)
        pb = product_names.get(f.product_b, f.product_b)

        rows.append(
            SummaryRow(
                severity=f.severity.value,
                type_label=type_label(f.severity, lang),
                rule=f.rule.title.get(lang),
                ingredients=f"{a}\n+\n{b}",
                products=f"{pa} + {pb}",
            )
        )
    return rows


def render_rich_summary(rows: list[SummaryRow], top: int = 0) -> None:
    from rich.table import Table
    from rich.text import Text

    console = _mk_console()

    table = Table(title="Routine Check Summary (pairwise)", show_lines=False)

    # Severity: do NOT ellipsize
    table.add_column("Severity", justify="center", no_wrap=True)
    table.add_column("Type", justify="center", no_wrap=True)
    table.add_column("Rule", overflow="fold", no_wrap=False)
    # Let ingredient labels wrap
    table.add_column("Ingredients", overflow="fold", no_wrap=False)
    table.add_column("Products", overflow="fold", no_wrap=False)

    view = rows[:top] if top and top > 0 else rows
    for r in view:
        sev_style = _SEV_STYLE.get(r.severity, "")
        table.add_row(
            Text(r.severity, style=sev_style),
            Text(r.type_label, style=sev_style),
            r.rule,
            r.ingredients,
            r.products,
        )

    console.print(table)


def render_rich_details(
    reports: Iterable[PairReport],
    ingredients: Mapping[str, Ingredient],
    product_names: Mapping[str, str],
    lang: Language = Language.ko,
) -> None:
    from rich.panel import Panel
    from rich.text import Text

    from reasoning.explain import render_explanation, type_label

    console = _mk_console()

    for rep in reports:
        pa = product_names.get(rep.product_a, rep.product_a)
        pb = product_names.get(rep.product_b, rep.product_b)

        worst = rep.findings[0].severity.value if rep.findings else ""

        # Keep panel title short to avoid truncation
        title = Text(f"{pa} + {pb}", style=_SEV_STYLE.get(worst, "bold"))

        body_lines: list[str] = []
        for f in rep.findings:
            rule = f.rule
            body_lines.append(f"- [{type_label(f.severity, lang)}] {rule.title.get(lang)}")
            body_lines.append(f"  Explanation: {render_explanation(f, ingredients, lang)}")
            if rule.reason_detail.get(lang):
                body_lines.append(f"   {rule.reason_detail.get(lang)}")
            body_lines.append(f"  Fix: {rule.fix.get(lang)}")
            if rule.fix_detail.get(lang):
                body_lines.append(f"   {rule.fix_detail.get(lang)}")
            body_lines.append("")

        body = "\n".join(body_lines).strip() if body_lines else "(No details.)"

        console.print(
            Panel(
                body,
                title=title,
                border_style=_border_style_for_level(rep.worst_level),
                expand=False,
            )
        )
