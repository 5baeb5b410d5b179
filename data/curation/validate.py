from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path

from matching.matcher import normalize_label_text

BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_PATH = BASE_DIR / "data" / "curation" / "ingredients.json"

_INGREDIENT_ID_RE = re.compile(r"^[a-z0-9][a-z0-9_]*$")


@dataclass(frozen=True)
class CurationError:
    path: str
    message: str


def _validate_description(prefix: str, desc: object) -> list[CurationError]:
    if desc is None:
        return []
    if not isinstance(desc, dict):
        return [CurationError(prefix + ".description", "description must be an object.")]

    errors: list[CurationError] = []
    for lang in ("en", "ko"):
        val = desc.get(lang)
        if val is not None and not isinstance(val, str):
            errors.append(
                CurationError(prefix + f".description.{lang}", "Must be a string.")
            )
    return errors


def validate_ingredients_curation(path: Path = DEFAULT_PATH) -> list[CurationError]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    errors: list[CurationError] = []

    if not isinstance(raw, dict):
        return [CurationError(str(path), "Root must be a JSON object.")]

    if raw.get("version") != 1:
        errors.append(CurationError(str(path), "Expected version=1."))

    ingredients = raw.get("ingredients")
    if not isinstance(ingredients, list):
        errors.append(
            CurationError(str(path), "Expected key 'ingredients' to be a list.")
        )
        return errors

    seen_ids: set[str] = set()
    seen_aliases: dict[str, str] = {}  # alias -> ingredient id

    for i, d in enumerate(ingredients):
        prefix = f"ingredients[{i}]"
        if not isinstance(d, dict):
            errors.append(CurationError(prefix, "Ingredient must be an object."))
            continue

        ing_id = d.get("id")
        if not isinstance(ing_id, str) or not ing_id.strip():
            errors.append(CurationError(prefix + ".id", "Missing or empty ingredient id."))
            continue
        ing_id = ing_id.strip()

        if not _INGREDIENT_ID_RE.match(ing_id):
            errors.append(
                CurationError(
                    prefix + ".id",
                    "Ingredient id must be lowercase and match ^[a-z0-9][a-z0-9_]*$.",
                )
            )

        if ing_id in seen_ids:
            errors.append(CurationError(prefix + ".id", f"Duplicate id '{ing_id}'."))
        seen_ids.add(ing_id)

        for key in ("inci_name", "ko_name"):
            name = d.get(key)
            if not isinstance(name, str) or not name.strip():
                errors.append(CurationError(prefix + f".{key}", f"Missing {key}."))

        # Aliases
        aliases = d.get("aliases")
        if not isinstance(aliases, list) or not aliases:
            errors.append(
                CurationError(prefix + ".aliases", "aliases must be a non-empty list.")
            )
            aliases = []

        norm_aliases: list[str] = []
        for a in aliases:
            if not isinstance(a, str) or not a.strip():
                errors.append(
                    CurationError(
                        prefix + ".aliases",
                        "Alias must be a non-empty string.",
                    )
                )
                continue
            a_norm = a.lower()
            # Label text is whitespace-collapsed before matching, so such an
            # alias could never be found.
            if normalize_label_text(a) != a_norm:
                errors.append(
                    CurationError(
                        prefix + ".aliases",
                        f"Alias '{a}' contains whitespace that never survives normalization.",
                    )
                )
            norm_aliases.append(a_norm)

        if len(set(norm_aliases)) != len(norm_aliases):
            errors.append(
                CurationError(
                    prefix + ".aliases",
                    "Duplicate aliases within the same ingredient.",
                )
            )

        for a in norm_aliases:
            if a in seen_aliases and seen_aliases[a] != ing_id:
                errors.append(
                    CurationError(
                        prefix + ".aliases",
                        f"Alias '{a}' already used by '{seen_aliases[a]}'.",
                    )
                )
            seen_aliases[a] = ing_id

        classes = d.get("class", [])
        if not isinstance(classes, list) or any(not isinstance(c, str) for c in classes):
            errors.append(CurationError(prefix + ".class", "class must be a list of strings."))

        is_active = d.get("is_active")
        if is_active is not None and not isinstance(is_active, bool):
            errors.append(CurationError(prefix + ".is_active", "Must be boolean."))

        errors.extend(_validate_description(prefix, d.get("description")))

    return errors


def assert_valid_ingredients_curation(path: Path = DEFAULT_PATH) -> None:
    errors = validate_ingredients_curation(path)
    if errors:
        msg = "Ingredient curation validation failed:\n" + "\n".join(
            f"- {e.path}: {e.message}" for e in errors
        )
        raise ValueError(msg)


def main() -> int:
    errors = validate_ingredients_curation()
    if errors:
        print("Ingredient curation validation failed:\n")
        for e in errors:
            print(f"- {e.path}: {e.message}")
        return 1

    print("Ingredient curation validation passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
