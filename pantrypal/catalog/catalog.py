"""In-memory recipe catalog.

The catalog is long-lived reference data: ingredients and recipes are created at
seed time or through the catalog-management methods below, and the matching
engine only reads snapshots of it (recipes()). There is no module-level
instance; callers build a RecipeCatalog and hand it to MatchingEngine.
"""

from typing import Any, Dict, Iterable, List, Optional

from pantrypal.matching.normalizer import canonicalize, names_match
from pantrypal.models.models import Ingredient, Recipe, RecipeIngredient
from pantrypal.utils.logger import logger


class CatalogError(Exception):
    """Base class for catalog errors."""


class DuplicateIngredientError(CatalogError):
    """An ingredient with the same canonical name already exists."""


class UnknownIngredientError(CatalogError):
    """No ingredient with the given name or id exists."""


class RecipeNotFoundError(CatalogError):
    """No recipe with the given id exists."""


class RecipeCatalog:
    """Ingredients and recipes, addressed by integer ids assigned on insert."""

    def __init__(self) -> None:
        self._ingredients: Dict[int, Ingredient] = {}
        self._ingredient_ids_by_name: Dict[str, int] = {}
        self._recipes: Dict[int, Recipe] = {}
        self._next_ingredient_id = 1
        self._next_recipe_id = 1

    # Ingredients

    def add_ingredient(self, name: str, category: str = "other") -> Ingredient:
        """Create an ingredient under its canonical (lower-case) name.

        Raises:
            DuplicateIngredientError: If the canonical name already exists.
        """
        canonical = canonicalize(name)
        if canonical in self._ingredient_ids_by_name:
            raise DuplicateIngredientError(f"Ingredient already exists: {canonical}")

        ingredient = Ingredient(id=self._next_ingredient_id, name=canonical, category=category)
        self._ingredients[ingredient.id] = ingredient
        self._ingredient_ids_by_name[ingredient.name] = ingredient.id
        self._next_ingredient_id += 1
        logger.debug(f"Catalog: added ingredient {ingredient.name} (id={ingredient.id})")
        return ingredient

    def get_or_create_ingredient(self, name: str, category: str = "other") -> Ingredient:
        existing = self.get_ingredient_by_name(name)
        if existing is not None:
            return existing
        return self.add_ingredient(name, category)

    def get_ingredient_by_name(self, name: str) -> Optional[Ingredient]:
        ingredient_id = self._ingredient_ids_by_name.get(canonicalize(name))
        return self._ingredients.get(ingredient_id) if ingredient_id is not None else None

    def get_ingredient(self, ingredient_id: int) -> Optional[Ingredient]:
        return self._ingredients.get(ingredient_id)

    def all_ingredients(self) -> List[Ingredient]:
        return list(self._ingredients.values())

    def resolve_ingredient_ids(self, names: Iterable[str]) -> List[int]:
        """Map ingredient names to catalog ids.

        An exact canonical name wins. Otherwise every catalog ingredient whose
        name loosely matches (bidirectional substring, see names_match) is
        taken, so "cherry tomatoes" resolves to "tomatoes". Unresolved names are
        skipped (logged at debug level). Order follows names, duplicates are
        dropped.
        """
        ids: List[int] = []
        for name in names:
            ingredient = self.get_ingredient_by_name(name)
            if ingredient is not None:
                matches = [ingredient]
            else:
                matches = [candidate for candidate in self._ingredients.values() if names_match(name, candidate.name)]
            if not matches:
                logger.debug(f"Catalog: no ingredient matching {canonicalize(name)!r}, skipping")
                continue
            for match in matches:
                if match.id not in ids:
                    ids.append(match.id)
        return ids

    # Recipes

    def add_recipe(self, recipe_data: Dict[str, Any]) -> Recipe:
        """Validate and store a recipe without ingredients; assigns its id.

        Ingredient rows are attached with add_recipe_ingredient().
        """
        data = dict(recipe_data)
        data.pop("ingredients", None)
        data["id"] = self._next_recipe_id
        recipe = Recipe.model_validate(data)
        self._recipes[recipe.id] = recipe
        self._next_recipe_id += 1
        logger.debug(f"Catalog: added recipe {recipe.title!r} (id={recipe.id})")
        return recipe

    def add_recipe_ingredient(
        self,
        recipe_id: int,
        ingredient_name: str,
        amount: str,
        unit: Optional[str] = None,
        is_required: bool = True,
    ) -> RecipeIngredient:
        """Attach an existing catalog ingredient to a recipe.

        Raises:
            RecipeNotFoundError: If recipe_id is unknown.
            UnknownIngredientError: If the ingredient is not in the catalog.
        """
        recipe = self.get_recipe(recipe_id)
        ingredient = self.get_ingredient_by_name(ingredient_name)
        if ingredient is None:
            raise UnknownIngredientError(f"Ingredient not in catalog: {canonicalize(ingredient_name)}")

        row = RecipeIngredient(ingredient=ingredient, amount=amount, unit=unit, is_required=is_required)
        # Replace rather than mutate so earlier snapshots stay unchanged
        self._recipes[recipe_id] = recipe.model_copy(update={"ingredients": [*recipe.ingredients, row]})
        return row

    def get_recipe(self, recipe_id: int) -> Recipe:
        """Raises RecipeNotFoundError for unknown ids."""
        try:
            return self._recipes[recipe_id]
        except KeyError:
            raise RecipeNotFoundError(f"Recipe not found: {recipe_id}") from None

    def find_recipe_by_title(self, title: str) -> Optional[Recipe]:
        return next((r for r in self._recipes.values() if r.title == title), None)

    def recipes(self) -> List[Recipe]:
        """Snapshot of all recipes in insertion order."""
        return list(self._recipes.values())

    def __len__(self) -> int:
        return len(self._recipes)


SEED_INGREDIENTS = [
    ("tomatoes", "vegetables"),
    ("basil", "herbs"),
    ("mozzarella", "dairy"),
    ("olive oil", "oils"),
    ("garlic", "vegetables"),
    ("onion", "vegetables"),
    ("pasta", "grains"),
    ("chicken breast", "meat"),
    ("bell peppers", "vegetables"),
    ("mushrooms", "vegetables"),
    ("cheese", "dairy"),
    ("eggs", "dairy"),
    ("flour", "grains"),
    ("butter", "dairy"),
    ("spinach", "vegetables"),
]

SEED_RECIPES = [
    {
        "title": "Classic Margherita Pizza",
        "description": "A traditional Italian pizza with fresh tomatoes, mozzarella, and aromatic basil leaves.",
        "instructions": [
            "Preheat your oven to 475°F (245°C). If you have a pizza stone, place it in the oven while preheating.",
            "Roll out the pizza dough on a floured surface to your desired thickness.",
            "Slice tomatoes and arrange evenly over the dough. Add torn pieces of fresh mozzarella.",
            "Bake for 12-15 minutes until crust is golden and cheese is bubbly. Top with fresh basil and serve.",
        ],
        "cookTime": 25,
        "servings": 4,
        "difficulty": "Easy",
        "imageUrl": "https://images.unsplash.com/photo-1574071318508-1cdbab80d002",
        "isVegetarian": True,
        "ingredients": [
            ("tomatoes", "3", "large"),
            ("mozzarella", "8", "oz"),
            ("basil", "10", "leaves"),
            ("flour", "2", "cups"),
            ("olive oil", "2", "tbsp"),
        ],
    },
    {
        "title": "Fresh Caprese Salad",
        "description": "Light and refreshing salad with ripe tomatoes, creamy mozzarella, and fresh basil.",
        "instructions": [
            "Slice tomatoes and mozzarella into 1/4 inch thick rounds.",
            "Arrange alternating slices of tomato and mozzarella on a platter.",
            "Tuck fresh basil leaves between the slices.",
            "Drizzle with olive oil and balsamic vinegar. Season with salt and pepper to taste.",
        ],
        "cookTime": 10,
        "servings": 2,
        "difficulty": "Easy",
        "imageUrl": "https://images.unsplash.com/photo-1546549032-9571cd6b27df",
        "isVegetarian": True,
        "ingredients": [
            ("tomatoes", "2", "large"),
            ("mozzarella", "4", "oz"),
            ("basil", "6", "leaves"),
            ("olive oil", "2", "tbsp"),
        ],
    },
    {
        "title": "Garlic Mushroom Pasta",
        "description": "Simple yet delicious pasta with sautéed mushrooms and garlic in a light olive oil sauce.",
        "instructions": [
            "Cook pasta according to package directions until al dente.",
            "Heat olive oil in a large pan and sauté sliced mushrooms until golden.",
            "Add minced garlic and cook for 1 minute until fragrant.",
            "Toss cooked pasta with mushroom mixture and season with salt, pepper, and fresh herbs.",
        ],
        "cookTime": 20,
        "servings": 3,
        "difficulty": "Easy",
        "imageUrl": "https://images.unsplash.com/photo-1621996346565-e3dbc353d2e5",
        "isVegetarian": True,
        "ingredients": [
            ("pasta", "12", "oz"),
            ("mushrooms", "8", "oz"),
            ("garlic", "4", "cloves"),
            ("olive oil", "3", "tbsp"),
            ("basil", "2", "tbsp"),
        ],
    },
]


def seed_catalog(catalog: RecipeCatalog) -> RecipeCatalog:
    """Load the sample ingredients and recipes. Safe to call repeatedly."""
    for name, category in SEED_INGREDIENTS:
        catalog.get_or_create_ingredient(name, category)

    added = 0
    for recipe_data in SEED_RECIPES:
        if catalog.find_recipe_by_title(recipe_data["title"]) is not None:
            continue
        recipe = catalog.add_recipe(recipe_data)
        for name, amount, unit in recipe_data["ingredients"]:
            catalog.add_recipe_ingredient(recipe.id, name, amount, unit)
        added += 1

    logger.info(f"Catalog seeded: {len(catalog.all_ingredients())} ingredients, {added} new recipes")
    return catalog
