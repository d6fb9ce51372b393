"""Ingredient overlap between a recipe and an available ingredient set.

Two adapters decide whether a recipe ingredient is available:

- IdentifierAdapter: exact membership over catalog ingredient ids.
- NameAdapter: loose name membership via the normalizer (AI output).

Both feed the same calculation, so catalog and free-text callers get the
same MatchResult shape.
"""

from typing import Iterable, Protocol

from pantrypal.matching.normalizer import canonicalize, is_present
from pantrypal.models.models import MatchResult, Recipe, RecipeIngredient


class AvailabilityAdapter(Protocol):
    def is_available(self, recipe_ingredient: RecipeIngredient) -> bool:
        ...


class IdentifierAdapter:
    """Availability by exact catalog id."""

    def __init__(self, available_ids: Iterable[int]) -> None:
        self.available_ids = frozenset(available_ids)

    def is_available(self, recipe_ingredient: RecipeIngredient) -> bool:
        ingredient_id = recipe_ingredient.ingredient.id
        return ingredient_id is not None and ingredient_id in self.available_ids

    def __bool__(self) -> bool:
        return bool(self.available_ids)


class NameAdapter:
    """Availability by bidirectional substring match on names."""

    def __init__(self, available_names: Iterable[str]) -> None:
        names = (canonicalize(name) for name in available_names)
        self.available_names = tuple(dict.fromkeys(name for name in names if name))

    def is_available(self, recipe_ingredient: RecipeIngredient) -> bool:
        return is_present(recipe_ingredient.name, self.available_names)

    def __bool__(self) -> bool:
        return bool(self.available_names)


def match_percentage(matched: int, total: int) -> int:
    """round(matched / total * 100) with halves rounded up; 0 when total is 0."""
    if total <= 0:
        return 0
    # Integer half-up rounding
    return (matched * 200 + total) // (2 * total)


def calculate_match(recipe: Recipe, adapter: AvailabilityAdapter) -> MatchResult:
    """Compute the MatchResult of a recipe against an availability adapter.

    Only required ingredients count. Matched and missing names follow the
    recipe's declared ingredient order.
    """
    matched = []
    missing = []
    for recipe_ingredient in recipe.required_ingredients:
        if adapter.is_available(recipe_ingredient):
            matched.append(recipe_ingredient.name)
        else:
            missing.append(recipe_ingredient.name)

    return MatchResult(
        match_percentage=match_percentage(len(matched), len(matched) + len(missing)),
        matched_ingredients=matched,
        missing_ingredients=missing,
    )
