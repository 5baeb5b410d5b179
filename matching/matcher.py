# label text -> ingredient ids
from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from core.enums import ProductCategory
from core.models import Ingredient, Product

logger = logging.getLogger(__name__)

# U+FEFF (BOM) is whitespace for label text too; \s alone misses it.
_WHITESPACE_RE = re.compile(r"[\s\ufeff]+")


def normalize_label_text(text: str | None) -> str:
    """Lowercase and collapse whitespace runs (newlines, tabs, ...) to one space.

    Punctuation is kept: aliases are found by substring containment, so commas
    and symbols simply act as separators.
    """
    return _WHITESPACE_RE.sub(" ", (text or "").lower())


def match_ingredients(text: str | None, dictionary: Iterable[Ingredient]) -> list[str]:
    """Return the ids of dictionary entries whose aliases occur in `text`.

    Entries are checked independently in dictionary order and the first alias
    found stops the scan for that entry, so a specific alias
    ("ethyl ascorbic acid") and a general one ("ascorbic acid") can both match.
    Never raises for unmatched or noisy text.
    """
    normalized = normalize_label_text(text)
    if not normalized.strip():
        return []

    matched: list[str] = []
    seen: set[str] = set()

    for ingredient in dictionary:
        for alias in ingredient.aliases:
            if alias.lower() in normalized:
                if ingredient.id not in seen:
                    seen.add(ingredient.id)
                    matched.append(ingredient.id)
                break

    logger.debug("matched %d ingredient(s): %s", len(matched), matched)
    return matched


def register_product(
    name: str,
    raw_text: str,
    dictionary: Iterable[Ingredient],
    *,
    category: ProductCategory | str = ProductCategory.other,
    brand: str = "",
    product_id: str | None = None,
    created_at: str | None = None,
) -> Product:
    """Build a product record from label text (the scan/register flow)."""
    return Product(
        id=product_id or uuid.uuid4().hex,
        ingredients=tuple(match_ingredients(raw_text, dictionary)),
        name=name,
        brand=brand,
        category=ProductCategory(category),
        raw_text=(raw_text or "").strip(),
        created_at=created_at or datetime.now(timezone.utc).isoformat(),
    )
