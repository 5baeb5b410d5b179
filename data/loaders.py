from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from core.models import Ingredient, LocalizedText

DATA_DIR = Path(__file__).parent
DEFAULT_DICTIONARY_PATH = DATA_DIR / "curation" / "ingredients.json"


def localized(raw: Any) -> LocalizedText:
    """Build LocalizedText from {"en": ..., "ko": ...} or a plain string."""
    if isinstance(raw, dict):
        return LocalizedText(en=str(raw.get("en") or ""), ko=str(raw.get("ko") or ""))
    if isinstance(raw, str):
        return LocalizedText(en=raw, ko=raw)
    return LocalizedText()


def _ingredient_records(raw: Any) -> list[dict[str, Any]]:
    # Case 1: curated file {"version": 1, "ingredients": [...]}
    if isinstance(raw, dict):
        items = raw.get("ingredients")
        return [x for x in items or [] if isinstance(x, dict)]

    # Case 2: bare list of records
    if isinstance(raw, list):
        return [x for x in raw if isinstance(x, dict)]

    return []


def ingredient_from_dict(item: dict[str, Any]) -> Ingredient:
    description = item.get("description")
    return Ingredient(
        id=item["id"],
        inci_name=item.get("inci_name", item["id"]),
        ko_name=item.get("ko_name", ""),
        aliases=tuple(item["aliases"]),
        classes=tuple(item.get("class", [])),
        is_active=bool(item.get("is_active", False)),
        description=localized(description) if description is not None else None,
    )


def load_ingredients(path: Path | None = None) -> list[Ingredient]:
    """Load the ingredient dictionary (data/curation/ingredients.json by default).

    Dictionary order is preserved; the matcher reports ids in this order.
    """
    if path is None:
        path = DEFAULT_DICTIONARY_PATH
    raw = json.loads(Path(path).read_text(encoding="utf-8"))

    out: list[Ingredient] = []
    for i, item in enumerate(_ingredient_records(raw)):
        try:
            out.append(ingredient_from_dict(item))
        except KeyError as e:
            label = item.get("id", f"#{i}")
            raise ValueError(
                f"Ingredient entry '{label}' in {Path(path).name} missing required key: {e}"
            ) from e
    return out


def ingredient_map(ingredients: Iterable[Ingredient]) -> dict[str, Ingredient]:
    return {ing.id: ing for ing in ingredients}
