from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the repository root is on sys.path so tests can import `app`, `rules`, etc.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(scope="session")
def ingredients():
    """The curated dictionary, loaded once per test session."""
    from data.loaders import load_ingredients

    return load_ingredients()


@pytest.fixture(scope="session")
def ingredients_by_id(ingredients):
    from data.loaders import ingredient_map

    return ingredient_map(ingredients)


@pytest.fixture(scope="session")
def rules():
    from rules.engine import RULE_DIR, load_rules

    return load_rules(RULE_DIR)
