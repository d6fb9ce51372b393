"""Hard dietary and cook-time filtering of a recipe catalog snapshot."""

from typing import Iterable, List, Optional

from pantrypal.models.models import DietaryPreferences, Recipe

# Preference field -> recipe flag
DIETARY_FLAGS = {
    "vegetarian": "is_vegetarian",
    "vegan": "is_vegan",
    "gluten_free": "is_gluten_free",
    "keto": "is_keto",
}


def satisfied_preferences(recipe: Recipe, preferences: DietaryPreferences) -> List[str]:
    """Requested preferences that the recipe satisfies."""
    return [name for name in preferences.requested() if getattr(recipe, DIETARY_FLAGS[name])]


def meets_constraints(
    recipe: Recipe,
    preferences: Optional[DietaryPreferences] = None,
    max_cook_time: Optional[int] = None,
) -> bool:
    """Check one recipe against all active constraints.

    Only requested flags constrain: a user who does not ask for vegetarian food
    still gets vegetarian recipes.
    """
    if preferences is not None:
        for name in preferences.requested():
            if not getattr(recipe, DIETARY_FLAGS[name]):
                return False
    if max_cook_time is not None and recipe.cook_time > max_cook_time:
        return False
    return True


def filter_recipes(
    recipes: Iterable[Recipe],
    preferences: Optional[DietaryPreferences] = None,
    max_cook_time: Optional[int] = None,
) -> List[Recipe]:
    """Return the recipes satisfying every active constraint, in input order."""
    return [recipe for recipe in recipes if meets_constraints(recipe, preferences, max_cook_time)]
