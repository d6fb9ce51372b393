"""Shared fixtures for unit tests."""

import pytest

from pantrypal.catalog.catalog import RecipeCatalog, seed_catalog
from pantrypal.models.models import Ingredient, Recipe, RecipeIngredient


def build_recipe(title="Test Recipe", ingredients=(), ingredient_ids=None, optional=(), **fields):
    """Build a Recipe from ingredient names.

    ingredient_ids maps names to catalog ids; names listed in optional are
    marked is_required=False.
    """
    ids = ingredient_ids or {}
    rows = [
        RecipeIngredient(
            ingredient=Ingredient(id=ids.get(name), name=name),
            amount="1",
            is_required=name not in optional,
        )
        for name in ingredients
    ]
    fields.setdefault("cook_time", 20)
    return Recipe(title=title, ingredients=rows, **fields)


@pytest.fixture
def recipe_factory():
    return build_recipe


@pytest.fixture
def seeded_catalog():
    return seed_catalog(RecipeCatalog())
