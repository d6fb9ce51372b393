"""Recipe matching engine.

Two entry points share one calculator and one ranker:

1. CATALOG PATH (find_catalog_matches):
   - Input: catalog ingredient ids
   - Hard dietary/cook-time filter over the catalog snapshot
   - Id-based match, keeps match percentage >= CATALOG_MIN_MATCH_PERCENTAGE (25)
   - Ordered by match percentage

2. FREE-TEXT PATH (rank_free_text):
   - Input: ingredient names as returned by the AI service
   - Name-based (substring) match, each recipe scored
   - Keeps any non-zero match, cook time is a soft penalty in the score
   - Ordered by score

The engine is pure: it reads the catalog it was given, never mutates it and does
no I/O beyond logging. Concurrent calls need no coordination.
"""

from typing import Iterable, List, Optional, Sequence

from pantrypal.catalog.catalog import RecipeCatalog
from pantrypal.matching.calculator import IdentifierAdapter, NameAdapter, calculate_match
from pantrypal.matching.filters import filter_recipes
from pantrypal.matching.ranker import FREE_TEXT_POLICY, ThresholdPolicy, catalog_policy, rank
from pantrypal.matching.scorer import score_recipe
from pantrypal.models.models import DietaryPreferences, Recipe, RecipeMatch, SearchRecipesRequest
from pantrypal.utils.config import config
from pantrypal.utils.logger import logger, session_logger


class MatchingEngine:
    """Matches ingredient sets against an explicit recipe catalog."""

    def __init__(
        self,
        catalog: RecipeCatalog,
        catalog_threshold: Optional[ThresholdPolicy] = None,
        free_text_threshold: ThresholdPolicy = FREE_TEXT_POLICY,
    ) -> None:
        """
        Args:
            catalog: Catalog read by the catalog path.
            catalog_threshold: Catalog policy; defaults to config.CATALOG_MIN_MATCH_PERCENTAGE.
            free_text_threshold: Free-text policy; defaults to FREE_TEXT_POLICY (> 0%).
        """
        self.catalog = catalog
        self.catalog_threshold = catalog_threshold or catalog_policy(config.CATALOG_MIN_MATCH_PERCENTAGE)
        self.free_text_threshold = free_text_threshold

    def find_catalog_matches(
        self,
        ingredient_ids: Iterable[int],
        preferences: Optional[DietaryPreferences] = None,
        max_cook_time: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[RecipeMatch]:
        """Rank catalog recipes against a set of catalog ingredient ids.

        Returns an empty list when no ids are given.
        """
        adapter = IdentifierAdapter(ingredient_ids)
        if not adapter:
            logger.debug("Catalog match skipped: no ingredient ids")
            return []

        candidates = filter_recipes(self.catalog.recipes(), preferences, max_cook_time)
        matches = [
            RecipeMatch(recipe=recipe, match=calculate_match(recipe, adapter))
            for recipe in candidates
        ]
        ranked = rank(matches, self.catalog_threshold, limit=limit)

        logger.info(
            f"Catalog match: {len(candidates)}/{len(self.catalog)} recipes passed filters, "
            f"{len(ranked)} ranked (threshold {self.catalog_threshold.min_match_percentage}%)"
        )
        return ranked

    def rank_free_text(
        self,
        recipes: Sequence[Recipe],
        ingredient_names: Iterable[str],
        preferences: Optional[DietaryPreferences] = None,
        max_cook_time: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[RecipeMatch]:
        """Score and rank recipes against free-text ingredient names.

        Dietary preferences add bonuses and an exceeded cook time costs a penalty;
        neither excludes a recipe. Returns an empty list when no names are given.
        """
        adapter = NameAdapter(ingredient_names)
        if not adapter:
            logger.debug("Free-text match skipped: no ingredient names")
            return []

        matches = []
        for recipe in recipes:
            result = calculate_match(recipe, adapter)
            score = score_recipe(recipe, result.match_percentage, preferences, max_cook_time)
            matches.append(RecipeMatch(recipe=recipe, match=result, score=score))

        ranked = rank(matches, self.free_text_threshold, limit=limit)
        logger.info(f"Free-text match: {len(ranked)}/{len(recipes)} recipes ranked")
        return ranked

    def search(
        self,
        request: SearchRecipesRequest,
        recipes: Optional[Sequence[Recipe]] = None,
        limit: Optional[int] = None,
    ) -> List[RecipeMatch]:
        """Resolve a search request on the appropriate path.

        With recipes (for example AI-generated ones) the free-text path ranks them.
        Without, the request's ingredient names are resolved to catalog ids and the
        catalog path runs.
        """
        log = session_logger(request.session_id)
        limit = limit if limit is not None else config.MAX_RECIPES
        preferences = request.dietary_preferences
        max_cook_time = request.max_cook_time
        log.info(
            f"Search: {len(request.ingredients)} ingredients, preferences={preferences.requested()}, "
            f"max_cook_time={max_cook_time}"
        )

        if recipes is not None:
            return self.rank_free_text(recipes, request.ingredients, preferences, max_cook_time, limit=limit)

        ids = self.catalog.resolve_ingredient_ids(request.ingredients)
        log.debug(f"Resolved {len(ids)}/{len(request.ingredients)} ingredients to catalog ids")
        return self.find_catalog_matches(ids, preferences, max_cook_time, limit=limit)
