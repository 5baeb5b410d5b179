from __future__ import annotations

import json

import pytest

from data.curation.validate import (
    assert_valid_ingredients_curation,
    validate_ingredients_curation,
)
from data.loaders import load_ingredients


def _write(tmp_path, raw):
    path = tmp_path / "ingredients.json"
    path.write_text(json.dumps(raw, ensure_ascii=False), encoding="utf-8")
    return path


def _entry(ing_id="x", **overrides):
    d = {
        "id": ing_id,
        "inci_name": ing_id.title(),
        "ko_name": ing_id,
        "aliases": [ing_id],
        "class": [],
        "is_active": False,
    }
    d.update(overrides)
    return d


def test_bundled_dictionary_is_valid():
    assert validate_ingredients_curation() == []
    assert_valid_ingredients_curation()


def test_bundled_dictionary_loads_in_order(ingredients):
    assert ingredients[0].id == "water"
    assert len({i.id for i in ingredients}) == len(ingredients)
    retinol = next(i for i in ingredients if i.id == "retinol")
    assert retinol.is_active is True
    assert "레티놀" in retinol.aliases


def test_wrong_root_shape(tmp_path):
    errors = validate_ingredients_curation(_write(tmp_path, []))
    assert [e.message for e in errors] == ["Root must be a JSON object."]


def test_alias_claimed_by_two_entries(tmp_path):
    raw = {
        "version": 1,
        "ingredients": [_entry("a", aliases=["shared"]), _entry("b", aliases=["Shared"])],
    }
    errors = validate_ingredients_curation(_write(tmp_path, raw))
    assert [e.message for e in errors] == ["Alias 'shared' already used by 'a'."]


@pytest.mark.parametrize(
    "entry, fragment",
    [
        (_entry("Bad-Id"), "Ingredient id must be lowercase"),
        (_entry("x", aliases=[]), "aliases must be a non-empty list"),
        (_entry("x", aliases=["  "]), "Alias must be a non-empty string"),
        (_entry("x", aliases=["two  spaces"]), "whitespace"),
        (_entry("x", aliases=["a", "A"]), "Duplicate aliases"),
        (_entry("x", is_active="yes"), "Must be boolean"),
        (_entry("x", inci_name=""), "Missing inci_name"),
        (_entry("x", description={"en": 1}), "Must be a string"),
    ],
)
def test_invalid_entries(tmp_path, entry, fragment):
    errors = validate_ingredients_curation(_write(tmp_path, {"version": 1, "ingredients": [entry]}))
    assert any(fragment in e.message for e in errors), errors


def test_duplicate_ids_and_version(tmp_path):
    raw = {"version": 2, "ingredients": [_entry("x"), _entry("x", aliases=["other"])]}
    messages = [e.message for e in validate_ingredients_curation(_write(tmp_path, raw))]
    assert "Expected version=1." in messages
    assert "Duplicate id 'x'." in messages


def test_assert_valid_raises(tmp_path):
    with pytest.raises(ValueError):
        assert_valid_ingredients_curation(_write(tmp_path, {"version": 1, "ingredients": "no"}))


def test_loader_accepts_bare_list(tmp_path):
    path = _write(tmp_path, [_entry("x", aliases=["xx", "엑스"], description={"en": "E"})])
    (ing,) = load_ingredients(path)
    assert ing.id == "x"
    assert ing.aliases == ("xx", "엑스")
    assert ing.description.get("ko") == "E"


def test_loader_missing_aliases_names_the_entry(tmp_path):
    entry = _entry("x")
    del entry["aliases"]
    with pytest.raises(ValueError) as exc:
        load_ingredients(_write(tmp_path, {"version": 1, "ingredients": [entry]}))
    assert "'x'" in str(exc.value)
