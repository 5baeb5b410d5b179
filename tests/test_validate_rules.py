from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest

from rules.engine import RULE_DIR, load_rules
from rules.validate_rules import validate_rule, validate_rule_dir

GOOD_RULE = {
    "id": "T01_test",
    "level": 2,
    "type": "mutual",
    "a": ["retinol"],
    "b": ["glycolic_acid"],
    "title": {"en": "Title", "ko": "제목"},
    "reason": {"en": "Reason", "ko": "이유"},
    "reason_detail": {"en": "Detail", "ko": "상세"},
    "fix": {"en": "Fix", "ko": "해결"},
    "fix_detail": {"en": "Fix detail", "ko": "해결 상세"},
    "severity_weight": 1.5,
}


def _messages(raw, known_ids=None):
    return [e.message for e in validate_rule(Path("t01_test.json"), raw, known_ids)]


def test_bundled_rules_are_valid(ingredients):
    known_ids = {ing.id for ing in ingredients}
    assert validate_rule_dir(RULE_DIR, known_ids) == []


def test_bundled_rules_load(rules):
    assert len(rules) == 20
    assert {r.level for r in rules} == {1, 2, 3}
    assert len({r.id for r in rules}) == len(rules)


def test_good_rule_has_no_errors():
    assert _messages(GOOD_RULE, {"retinol", "glycolic_acid"}) == []


def test_missing_keys_are_reported():
    raw = {k: v for k, v in GOOD_RULE.items() if k != "severity_weight"}
    assert _messages(raw) == ["Missing required keys: ['severity_weight']"]


@pytest.mark.parametrize(
    "key, value, expected",
    [
        ("level", 4, "Invalid level"),
        ("level", True, "Invalid level"),
        ("level", [1], "Invalid level"),
        ("level", "1", "Invalid level"),
        ("type", "sometimes", "Invalid type"),
        ("type", ["mutual"], "Invalid type"),
        ("type", {"kind": "mutual"}, "Invalid type"),
        ("severity_weight", "high", "severity_weight must be a number"),
        ("a", [], "a must be a non-empty list"),
        ("b", ["glycolic_acid", "glycolic_acid"], "b contains duplicate"),
    ],
)
def test_invalid_values(key, value, expected):
    raw = copy.deepcopy(GOOD_RULE)
    raw[key] = value
    assert any(m.startswith(expected) for m in _messages(raw))


def test_unknown_ingredient_ids_are_reported():
    msgs = _messages(GOOD_RULE, {"retinol"})
    assert msgs == ["b references unknown ingredient ids: ['glycolic_acid']"]


def test_both_languages_required():
    raw = copy.deepcopy(GOOD_RULE)
    raw["fix"] = {"en": "Fix"}
    assert _messages(raw) == ["fix.ko must be a non-empty string"]


def test_duplicate_rule_ids_across_files(tmp_path):
    for name in ("a.json", "b.json"):
        (tmp_path / name).write_text(json.dumps(GOOD_RULE), encoding="utf-8")

    errors = validate_rule_dir(tmp_path)
    assert [(e.file, e.message) for e in errors] == [
        ("b.json", "Duplicate rule id 'T01_test' (also in a.json)")
    ]


def test_invalid_json_is_reported(tmp_path):
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    errors = validate_rule_dir(tmp_path)
    assert errors[0].file == "broken.json"
    assert errors[0].message.startswith("Invalid JSON")


def test_load_rules_from_single_array_file(tmp_path):
    second = dict(GOOD_RULE, id="T02_test", level=1)
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([GOOD_RULE, second]), encoding="utf-8")

    loaded = load_rules(path)
    assert [r.id for r in loaded] == ["T01_test", "T02_test"]
    assert loaded[0].a == frozenset({"retinol"})
    assert loaded[1].title.get("ko") == "제목"


def test_load_rules_missing_key_names_the_file(tmp_path):
    raw = {k: v for k, v in GOOD_RULE.items() if k != "b"}
    (tmp_path / "t01_test.json").write_text(json.dumps(raw), encoding="utf-8")

    with pytest.raises(ValueError) as exc:
        load_rules(tmp_path)
    assert "t01_test.json" in str(exc.value)
    assert isinstance(exc.value.__cause__, KeyError)
