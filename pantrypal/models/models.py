"""Data models and schemas for the PantryPal matching engine.

Defines Pydantic models for catalog records, detected ingredients and match results.
All models use Pydantic v2. Field names are snake_case in Python and camelCase on the
wire (isVegetarian, cookTime, matchPercentage, ...), so records produced by the
storage collaborator or the AI service validate directly.
"""

from enum import Enum
from typing import Any, List, Optional, Annotated, Union

from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from pantrypal.matching.normalizer import canonicalize

MIN_RATING = 0.0
MAX_RATING = 5.0


class Difficulty(str, Enum):
    """Recipe difficulty levels."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class _WireModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Ingredient(_WireModel):
    """Catalog ingredient. Identity is the canonical lower-case name."""

    model_config = ConfigDict(frozen=True)

    id: Annotated[Optional[int], Field(None, description="Catalog identifier (None for free-text ingredients)")]
    name: Annotated[str, Field(min_length=1, max_length=100, description="Canonical lower-case ingredient name")]
    category: Annotated[str, Field("other", max_length=50, description="Category label, e.g. vegetables")]

    @field_validator("name", mode="before")
    @classmethod
    def canonicalize_name(cls, v: Any) -> Any:
        return canonicalize(v) if isinstance(v, str) else v


class RecipeIngredient(_WireModel):
    """Association between a recipe and one ingredient, with its quantity."""

    ingredient: Ingredient
    amount: Annotated[str, Field("", max_length=50, description="Free-text quantity, e.g. '2'")]
    unit: Annotated[Optional[str], Field(None, max_length=50, description="Free-text unit, e.g. 'cups'")]
    is_required: Annotated[bool, Field(True, description="Optional ingredients never count toward matching")]

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        # AI output often sends numeric amounts
        if v is None:
            return ""
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @property
    def name(self) -> str:
        return self.ingredient.name


class Recipe(_WireModel):
    """Domain model for a recipe with its ingredient associations.

    Ingredient order is the declared order and is preserved by every matching
    operation. Dietary flags are independent of each other.
    """

    id: Annotated[Optional[Union[int, str]], Field(None, description="Catalog id or generated id")]
    title: Annotated[str, Field(min_length=1, max_length=200, description="Recipe title (1-200 chars)")]
    description: Annotated[str, Field("", max_length=2000)]
    instructions: Annotated[List[str], Field(default_factory=list, description="Ordered instruction steps")]
    cook_time: Annotated[int, Field(ge=0, le=1440, description="Cook time in minutes")]
    servings: Annotated[int, Field(1, ge=1, le=100)]
    difficulty: Annotated[Difficulty, Field(Difficulty.MEDIUM)]
    rating: Annotated[float, Field(0.0, description="Rating clamped to 0.00-5.00, two decimals")]
    image_url: Annotated[Optional[str], Field(None, max_length=500)]
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_keto: bool = False
    ingredients: Annotated[List[RecipeIngredient], Field(default_factory=list)]
    tips: Annotated[List[str], Field(default_factory=list)]
    variations: Annotated[List[str], Field(default_factory=list)]
    nutritional_info: Optional[dict[str, Union[int, float, str]]] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, v: Any) -> Any:
        """Accept any capitalization ("easy", "EASY") for difficulty."""
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    @field_validator("rating", mode="before")
    @classmethod
    def clamp_rating(cls, v: Any) -> float:
        """Clamp rating to [0.00, 5.00] and round to two decimals.

        Ratings arrive as decimal strings from the datastore ("4.50") or as numbers
        from the AI service; None means unrated.
        """
        if v is None or v == "":
            return MIN_RATING
        try:
            rating = float(v)
        except (TypeError, ValueError):
            raise ValueError(f"rating must be numeric, got {v!r}")
        return round(min(MAX_RATING, max(MIN_RATING, rating)), 2)

    @property
    def required_ingredients(self) -> List[RecipeIngredient]:
        return [ri for ri in self.ingredients if ri.is_required]


class DietaryPreferences(_WireModel):
    """Requested dietary preferences. False means no restriction."""

    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = False
    keto: bool = False

    def requested(self) -> List[str]:
        """Names of the requested flags, in fixed order."""
        return [name for name in ("vegetarian", "vegan", "gluten_free", "keto") if getattr(self, name)]


class DetectedIngredient(_WireModel):
    """One ingredient reported by the AI service with its confidence."""

    name: Annotated[str, Field(min_length=1, max_length=100)]
    confidence: Annotated[float, Field(ge=0.0, le=1.0, description="Confidence score in [0, 1]")]

    @field_validator("name", mode="before")
    @classmethod
    def canonicalize_name(cls, v: Any) -> Any:
        return canonicalize(v) if isinstance(v, str) else v


class DetectedIngredientSet(_WireModel):
    """Ingredients detected for one session (one image-analysis request)."""

    session_id: Annotated[str, Field(min_length=1)]
    ingredients: Annotated[List[DetectedIngredient], Field(default_factory=list)]

    def names(self, min_confidence: Optional[float] = None) -> List[str]:
        """Ingredient names in detection order, de-duplicated.

        Args:
            min_confidence: Drop ingredients scored below this value. None keeps all.
        """
        kept = [
            item.name
            for item in self.ingredients
            if min_confidence is None or item.confidence >= min_confidence
        ]
        return list(dict.fromkeys(kept))


class MatchResult(_WireModel):
    """Ingredient overlap between one recipe and an available ingredient set."""

    match_percentage: Annotated[int, Field(ge=0, le=100)]
    matched_ingredients: Annotated[List[str], Field(default_factory=list)]
    missing_ingredients: Annotated[List[str], Field(default_factory=list)]


class RecipeMatch(_WireModel):
    """A recipe annotated with its match result and, on the scoring path, its score."""

    recipe: Recipe
    match: MatchResult
    score: Optional[float] = None

    @property
    def match_percentage(self) -> int:
        return self.match.match_percentage

    def annotated(self) -> dict[str, Any]:
        """Recipe record with matchPercentage and matchedIngredients, as sent to clients."""
        record = self.recipe.model_dump(by_alias=True, mode="json")
        record["matchPercentage"] = self.match.match_percentage
        record["matchedIngredients"] = list(self.match.matched_ingredients)
        record["missingIngredients"] = list(self.match.missing_ingredients)
        if self.score is not None:
            record["score"] = self.score
        return record


class SearchRecipesRequest(_WireModel):
    """Recipe search request as received from the transport layer."""

    session_id: Annotated[str, Field(min_length=1)]
    ingredients: Annotated[List[str], Field(default_factory=list, max_length=100)]
    dietary_preferences: Annotated[DietaryPreferences, Field(default_factory=DietaryPreferences)]
    max_cook_time: Annotated[Optional[int], Field(None, gt=0, description="Minutes, None means unconstrained")]

    @field_validator("ingredients", mode="before")
    @classmethod
    def canonicalize_ingredients(cls, v: Any) -> Any:
        if isinstance(v, list):
            names = [canonicalize(item) for item in v if isinstance(item, str)]
            return [name for name in names if name]
        return v
