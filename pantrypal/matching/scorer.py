"""Composite ranking score for a recipe.

The score only orders results; it is not a probability and has no upper bound.
Terms are applied in a fixed order:

    match percentage
    + 10 per requested dietary preference the recipe satisfies
    - 20 if a cook-time limit is set and exceeded (soft penalty)
    + 5 for Easy recipes
    + rating * 2

and the total is floored at 0.
"""

from typing import Optional

from pantrypal.matching.filters import satisfied_preferences
from pantrypal.models.models import DietaryPreferences, Difficulty, Recipe

PREFERENCE_BONUS = 10
COOK_TIME_PENALTY = 20
EASY_BONUS = 5
RATING_WEIGHT = 2


def score_recipe(
    recipe: Recipe,
    match_percentage: int,
    preferences: Optional[DietaryPreferences] = None,
    max_cook_time: Optional[int] = None,
) -> float:
    """Score one recipe. Pure and deterministic.

    Args:
        recipe: Recipe being ranked.
        match_percentage: Its match percentage (0-100) from the calculator.
        preferences: Requested dietary preferences, None for none.
        max_cook_time: Cook-time limit in minutes, None for unconstrained.

    Returns:
        Non-negative score.
    """
    score = float(match_percentage)

    if preferences is not None:
        score += PREFERENCE_BONUS * len(satisfied_preferences(recipe, preferences))

    if max_cook_time is not None and recipe.cook_time > max_cook_time:
        score -= COOK_TIME_PENALTY

    if recipe.difficulty == Difficulty.EASY:
        score += EASY_BONUS

    score += recipe.rating * RATING_WEIGHT

    return max(0.0, score)
