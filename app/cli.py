from __future__ import annotations

import argparse
import difflib
import json
import logging
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from core.constants import normalize_severity, severity_for_level
from core.enums import Language, Severity
from core.exceptions import UnknownIngredientError
from core.models import Finding, Ingredient, Product, Rule
from data.loaders import DEFAULT_DICTIONARY_PATH, ingredient_map, load_ingredients
from matching.matcher import match_ingredients, register_product
from reasoning.combine import build_analysis_result, build_pair_reports, summarize_findings
from reasoning.explain import ingredient_label, render_explanation, render_share_text, type_label
from rules.engine import RULE_DIR, analyze_multiple_products, load_rules

logger = logging.getLogger(__name__)

ALL_SEVERITIES = [Severity.red, Severity.yellow, Severity.green]


def _parse_ingredient_tokens(text: str) -> list[str]:
    """Parse ingredient tokens from free-form text.

    Supports:
    - one ingredient per line
    - comma-separated lists
    - comments starting with '#'

    Whitespace inside a token is kept ("hyaluronic acid").
    """
    out: list[str] = []
    for raw_line in (text or "").splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        out.extend([p.strip() for p in line.split(",") if p.strip()])

    return out


def _read_text_file(path: str, flag: str = "--file") -> str:
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SystemExit(f"{flag} not found: {p}") from e


def _read_stdin() -> str:
    return sys.stdin.read()


def _split_named(value: str, flag: str) -> tuple[str, str]:
    """Split a NAME=VALUE argument."""
    name, sep, rest = value.partition("=")
    if not sep or not name.strip():
        raise SystemExit(f"{flag} expects NAME=VALUE, got: {value!r}")
    return name.strip(), rest


def _fetch_known_terms(dictionary: Iterable[Ingredient]) -> list[str]:
    """
    Return a list of known ingredient terms users might type:
    - ingredient ids
    - INCI and Korean names (lowercased)
    - aliases (lowercased)
    """
    terms: list[str] = []
    for ing in dictionary:
        terms.append(ing.id)
        for s in (ing.inci_name, ing.ko_name, *ing.aliases):
            s = (s or "").strip().lower()
            if s:
                terms.append(s)

    # de-duplicate while keeping stable ordering
    seen = set()
    out = []
    for t in terms:
        if t not in seen:
            seen.add(t)
            out.append(t)
    return out


def _suggest_ingredient_terms(
    token: str, known_terms: list[str], limit: int = 5
) -> tuple[str, ...]:
    """Suggest close matches for a token from known terms."""
    q = (token or "").strip().lower()
    if not q:
        return tuple()

    matches = difflib.get_close_matches(q, known_terms, n=limit, cutoff=0.6)
    return tuple(matches)


def resolve_ingredient_ids(
    dictionary: Sequence[Ingredient],
    tokens: Iterable[str],
    allow_unknown: bool = False,
) -> list[str]:
    """
    Resolve user tokens to ingredient ids by id, INCI name, Korean name or alias.

    Matching is exact and case-insensitive (no substring search, unlike label
    text). Unresolved tokens raise UnknownIngredientError unless allow_unknown,
    in which case they are kept as opaque ids.
    """
    lookup: dict[str, str] = {}
    for ing in dictionary:
        for term in (ing.id, ing.inci_name, ing.ko_name, *ing.aliases):
            key = (term or "").strip().lower()
            if key:
                lookup.setdefault(key, ing.id)

    out: list[str] = []
    unknown: list[str] = []

    for raw in tokens:
        q = raw.strip().lower()
        if not q:
            continue

        ing_id = lookup.get(q)
        if ing_id is None:
            if not allow_unknown:
                unknown.append(raw)
                continue
            logger.warning("keeping unknown ingredient token %r as-is", raw)
            ing_id = raw.strip()

        if ing_id not in out:
            out.append(ing_id)

    if unknown:
        known_terms = _fetch_known_terms(dictionary)
        sug_map = {}
        for tok in unknown:
            sug = _suggest_ingredient_terms(tok, known_terms, limit=5)
            if sug:
                sug_map[tok] = sug
        raise UnknownIngredientError(unknown, suggestions=sug_map)

    return out


def _parse_severity_selection(severity_arg: str) -> list[Severity]:
    raw = (severity_arg or "all").strip().lower()
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    selected: list[Severity] = []

    for p in parts:
        if p == "all":
            for s in ALL_SEVERITIES:
                if s not in selected:
                    selected.append(s)
            continue

        sev = normalize_severity(p)
        if sev is None:
            raise SystemExit(
                "Unknown --severity option. Use: all, red, yellow, green "
                "(or conflict, caution, synergy)"
            )
        if sev not in selected:
            selected.append(sev)

    if not selected:
        selected = list(ALL_SEVERITIES)

    return selected


def filter_rules_for_selected_severities(
    rules_all: Iterable[Rule], selected: Iterable[Severity]
) -> list[Rule]:
    """Keep rules whose level maps to one of the selected severities."""
    selected_set = set(selected)
    return [r for r in rules_all if severity_for_level(r.level) in selected_set]


def _product_source(kind: str):
    """argparse type tagging a --label/--file/--ids value with its kind."""

    def parse(value: str) -> tuple[str, str]:
        return kind, value

    parse.__name__ = kind
    return parse


def build_products(
    dictionary: Sequence[Ingredient],
    sources: Iterable[tuple[str, str]],
    *,
    allow_unknown: bool = False,
) -> list[Product]:
    """
    Build products from (kind, value) pairs in command-line order.

    kind is "label" (NAME=TEXT), "file" (PATH, name = file stem) or "ids"
    (NAME=ING,ING,...). Order matters: cross-pair de-duplication credits a
    finding to the first pair. Product ids are positional ("p1", "p2", ...)
    so output is reproducible.
    """
    products: list[Product] = []

    for kind, value in sources:
        pid = f"p{len(products) + 1}"

        if kind == "label":
            name, text = _split_named(value, "--label")
            products.append(register_product(name, text, dictionary, product_id=pid))
        elif kind == "file":
            text = _read_text_file(value)
            products.append(
                register_product(Path(value).stem, text, dictionary, product_id=pid)
            )
        elif kind == "ids":
            name, text = _split_named(value, "--ids")
            tokens = _parse_ingredient_tokens(text)
            resolved = resolve_ingredient_ids(dictionary, tokens, allow_unknown=allow_unknown)
            products.append(
                Product(id=pid, ingredients=tuple(resolved), name=name, raw_text=text.strip())
            )
        else:
            raise ValueError(f"Unknown product source kind: {kind!r}")

    for p in products:
        if not p.ingredients:
            logger.warning("no known ingredients recognized in %r", p.name)

    return products


def _print_unknown_ingredients(e: UnknownIngredientError) -> None:
    # Print one line per unknown token for clarity
    for tok in e.unknown:
        opts = e.suggestions.get(tok, ())
        if opts:
            print(
                f"Ingredient '{tok}' not found. Did you mean: {', '.join(opts)}?",
                file=sys.stderr,
            )
        else:
            print(f"Ingredient '{tok}' not found.", file=sys.stderr)

    print(
        "Tip: use ingredient ids, INCI names or Korean names, "
        "or pass --allow-unknown.",
        file=sys.stderr,
    )


def _print_plain_findings(
    findings: Sequence[Finding],
    ingredients: dict[str, Ingredient],
    names: dict[str, str],
    lang: Language,
    details: bool,
) -> None:
    for f in findings:
        rule = f.rule

        print("=" * 80)
        print(f"[{type_label(f.severity, lang)} | {f.severity.value}] {rule.title.get(lang)}")
        print(f"  Products: {names[f.product_a]} + {names[f.product_b]}")
        print(f"  Explanation: {render_explanation(f, ingredients, lang)}")
        if details and rule.reason_detail.get(lang):
            print(f"   {rule.reason_detail.get(lang)}")
        print(f"  Fix: {rule.fix.get(lang)}")
        if details and rule.fix_detail.get(lang):
            print(f"   {rule.fix_detail.get(lang)}")
        print()


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log matching and rule evaluation at DEBUG level.",
    )
    common.add_argument(
        "--dictionary",
        default=str(DEFAULT_DICTIONARY_PATH),
        metavar="PATH",
        help="Ingredient dictionary JSON. Default: data/curation/ingredients.json.",
    )
    common.add_argument(
        "--lang",
        choices=[lang.value for lang in Language],
        default=Language.ko.value,
        help="Language for labels and explanations. Default: ko.",
    )

    p = argparse.ArgumentParser(
        prog="selfshelf",
        description="Skincare routine checker: label matching and pairwise ingredient rules.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    m = sub.add_parser("match", parents=[common], help="Match ingredient ids from label text.")
    m.add_argument(
        "text",
        nargs="*",
        help="Label text. If omitted and stdin is piped, stdin is read.",
    )
    m.add_argument(
        "-f",
        "--file",
        action="append",
        default=[],
        metavar="PATH",
        help="Read label text from a file (repeatable). Use '-' to read from stdin.",
    )
    m.add_argument(
        "--format",
        choices=("plain", "json"),
        default="plain",
        help="Output format. Default: plain.",
    )

    a = sub.add_parser(
        "analyze",
        parents=[common],
        help="Analyze two or more products for conflicts and synergies.",
    )
    a.add_argument(
        "--label",
        dest="sources",
        action="append",
        type=_product_source("label"),
        default=[],
        metavar="NAME=TEXT",
        help="A product given as label text (repeatable).",
    )
    a.add_argument(
        "-f",
        "--file",
        dest="sources",
        action="append",
        type=_product_source("file"),
        default=[],
        metavar="PATH",
        help="A product label read from a file (repeatable). The file stem is the product name.",
    )
    a.add_argument(
        "--ids",
        dest="sources",
        action="append",
        type=_product_source("ids"),
        default=[],
        metavar="NAME=ING,ING,...",
        help=(
            "A product given as an explicit ingredient list (repeatable). "
            "Tokens are ingredient ids, names or aliases."
        ),
    )
    a.add_argument(
        "--allow-unknown",
        action="store_true",
        help="Keep unresolved --ids tokens as opaque ingredient ids instead of failing.",
    )
    a.add_argument(
        "--rules",
        default=str(RULE_DIR),
        metavar="PATH",
        help="Rule directory or a JSON file holding an array of rules.",
    )
    a.add_argument(
        "--format",
        choices=("plain", "rich", "json"),
        default="plain",
        help=(
            "Output format. Use 'rich' for colored tables/panels, "
            "'json' for machine-readable output. Default: plain."
        ),
    )
    a.add_argument(
        "--severity",
        default="all",
        help=(
            "Comma-separated severity filter. "
            "Allowed: red, yellow, green (or conflict, caution, synergy), all. "
            "Examples: --severity red  |  --severity red,yellow"
        ),
    )
    a.add_argument(
        "--top",
        type=int,
        default=0,
        help="Show only the top N findings (0 = all).",
    )
    a.add_argument(
        "--details",
        action="store_true",
        help="Include detailed reasons and fixes (per-pair panels in rich mode).",
    )
    a.add_argument(
        "--share",
        action="store_true",
        help="Also print the plain share text.",
    )
    return p


def run_match(args: argparse.Namespace, dictionary: list[Ingredient]) -> None:
    lang = Language(args.lang)
    chunks: list[str] = []
    for fp in args.file:
        chunks.append(_read_stdin() if fp == "-" else _read_text_file(fp))
    if args.text:
        chunks.append(" ".join(args.text))
    if not chunks and not sys.stdin.isatty():
        chunks.append(_read_stdin())

    text = "\n".join(chunks)
    matched = match_ingredients(text, dictionary)
    by_id = ingredient_map(dictionary)

    if args.format == "json":
        from app.json_output import build_match_payload

        payload = build_match_payload(text=text, matched_ids=matched, ingredients=by_id, lang=lang)
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not matched:
        print("No known ingredients recognized.")
        return

    for ing_id in matched:
        marker = "*" if by_id[ing_id].is_active else " "
        print(f"{marker} {ing_id}\t{ingredient_label(by_id, ing_id, lang)}")


def run_analyze(args: argparse.Namespace, dictionary: list[Ingredient]) -> None:
    lang = Language(args.lang)

    try:
        products = build_products(
            dictionary,
            args.sources,
            allow_unknown=args.allow_unknown,
        )
    except UnknownIngredientError as e:
        _print_unknown_ingredients(e)
        raise SystemExit(2) from e

    if len(products) < 2:
        raise SystemExit(
            "Provide at least two products (--label, --file or --ids)."
        )

    selected = _parse_severity_selection(args.severity)
    rules_all = load_rules(Path(args.rules))
    rules = filter_rules_for_selected_severities(rules_all, selected)
    logger.debug("%d of %d rule(s) selected", len(rules), len(rules_all))

    findings = analyze_multiple_products(products, rules)
    if args.top and args.top > 0:
        findings = findings[: args.top]

    by_id = ingredient_map(dictionary)
    names = {p.id: p.name for p in products}
    product_names = [p.name for p in products]

    if args.format == "json":
        from app.json_output import build_json_payload

        result = build_analysis_result(products, findings)
        payload = build_json_payload(
            result=result,
            products=products,
            ingredients=by_id,
            lang=lang,
            selected_severities=selected,
        )
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not findings:
        sev = ", ".join(s.value for s in selected)
        print(f"No rule-based findings for selected severities: {sev}.")
    elif args.format == "rich":
        from app.render import (
            build_summary_rows,
            render_rich_details,
            render_rich_summary,
        )

        rows = build_summary_rows(findings, by_id, names, lang)
        render_rich_summary(rows)

        if args.details:
            render_rich_details(build_pair_reports(findings), by_id, names, lang)
    else:
        _print_plain_findings(findings, by_id, names, lang, args.details)
        print("=" * 80)

    summary = summarize_findings(findings)
    print(
        f"Verdict: {summary.verdict.value} "
        f"(red={summary.red}, yellow={summary.yellow}, green={summary.green})"
    )

    if args.share:
        print()
        print(render_share_text(product_names, findings, lang))


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    dictionary = load_ingredients(Path(args.dictionary))

    if args.command == "match":
        run_match(args, dictionary)
    else:
        run_analyze(args, dictionary)


if __name__ == "__main__":
    main()
