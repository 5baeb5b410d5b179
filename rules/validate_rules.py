from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from core.constants import RULE_LEVELS
from core.enums import RuleType
from data.loaders import load_ingredients

ALLOWED_LEVELS = set(RULE_LEVELS)
ALLOWED_TYPES = {t.value for t in RuleType}
LANGUAGES = ("en", "ko")

REQUIRED_TOP_KEYS = {
    "id",
    "level",
    "type",
    "a",
    "b",
    "title",
    "reason",
    "reason_detail",
    "fix",
    "fix_detail",
    "severity_weight",
}

TEXT_KEYS = ("title", "reason", "reason_detail", "fix", "fix_detail")


@dataclass
class RuleError:
    file: str
    message: str


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e


def _check_group(name: str, raw: Dict[str, Any], known_ids: Optional[Set[str]], path: Path) -> List[RuleError]:
    errors: List[RuleError] = []
    group = raw.get(name)
    if not isinstance(group, list) or not group or any(not isinstance(x, str) or not x.strip() for x in group):
        errors.append(RuleError(path.name, f"{name} must be a non-empty list of ingredient ids"))
        return errors

    if len(set(group)) != len(group):
        errors.append(RuleError(path.name, f"{name} contains duplicate ingredient ids"))

    if known_ids is not None:
        unknown = sorted(set(group) - known_ids)
        if unknown:
            errors.append(RuleError(path.name, f"{name} references unknown ingredient ids: {unknown}"))

    return errors


def validate_rule(path: Path, raw: Dict[str, Any], known_ids: Optional[Set[str]] = None) -> List[RuleError]:
    errors: List[RuleError] = []

    if not isinstance(raw, dict):
        return [RuleError(path.name, "rule must be a JSON object")]

    # Required top-level keys
    missing = REQUIRED_TOP_KEYS - set(raw.keys())
    if missing:
        errors.append(RuleError(path.name, f"Missing required keys: {sorted(missing)}"))
        return errors  # cannot safely continue

    if not isinstance(raw["id"], str) or not raw["id"].strip():
        errors.append(RuleError(path.name, "id must be a non-empty string"))

    # Enums
    level = raw["level"]
    if isinstance(level, bool) or not isinstance(level, int) or level not in ALLOWED_LEVELS:
        errors.append(RuleError(path.name, f"Invalid level: {raw['level']} (allowed: {sorted(ALLOWED_LEVELS)})"))

    if not isinstance(raw["type"], str) or raw["type"] not in ALLOWED_TYPES:
        errors.append(RuleError(path.name, f"Invalid type: {raw['type']} (allowed: {sorted(ALLOWED_TYPES)})"))

    weight = raw["severity_weight"]
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        errors.append(RuleError(path.name, "severity_weight must be a number"))

    # Ingredient groups
    errors.extend(_check_group("a", raw, known_ids, path))
    errors.extend(_check_group("b", raw, known_ids, path))

    # Localized text: every field needs both languages
    for key in TEXT_KEYS:
        text = raw[key]
        if not isinstance(text, dict):
            errors.append(RuleError(path.name, f"{key} must be an object with {list(LANGUAGES)}"))
            continue
        for lang in LANGUAGES:
            val = text.get(lang)
            if not isinstance(val, str) or not val.strip():
                errors.append(RuleError(path.name, f"{key}.{lang} must be a non-empty string"))

    return errors


def validate_rule_dir(rule_dir: Path, known_ids: Optional[Set[str]] = None) -> List[RuleError]:
    all_errors: List[RuleError] = []
    seen_ids: Dict[str, str] = {}  # rule id -> file name

    for p in sorted(rule_dir.glob("*.json")):
        try:
            raw = _load_json(p)
        except (OSError, ValueError) as e:
            all_errors.append(RuleError(p.name, str(e)))
            continue

        all_errors.extend(validate_rule(p, raw, known_ids))

        rid = raw.get("id") if isinstance(raw, dict) else None
        if isinstance(rid, str):
            if rid in seen_ids:
                all_errors.append(RuleError(p.name, f"Duplicate rule id '{rid}' (also in {seen_ids[rid]})"))
            else:
                seen_ids[rid] = p.name

    return all_errors


def main() -> int:
    base_dir = Path(__file__).resolve().parents[1]
    rule_dir = base_dir / "rules" / "rule_defs"

    if not rule_dir.exists():
        print(f"Rule directory not found: {rule_dir}")
        return 2

    files = sorted(rule_dir.glob("*.json"))
    if not files:
        print(f"No rule JSON files found in: {rule_dir}")
        return 2

    known_ids = {ing.id for ing in load_ingredients()}
    all_errors = validate_rule_dir(rule_dir, known_ids)

    if all_errors:
        print("Rule validation failed:\n")
        for err in all_errors:
            print(f"- {err.file}: {err.message}")
        return 1

    print(f"Rule validation passed ({len(files)} rules).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
