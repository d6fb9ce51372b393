"""Unit tests for the MatchingEngine entry points.

Tests cover:
- Catalog path over the seeded catalog (filter, id match, 25% threshold)
- Free-text path over generated recipes (name match, score, > 0% threshold)
- search() dispatch and limits
"""

import pytest

from pantrypal.catalog.catalog import RecipeCatalog
from pantrypal.matching.engine import MatchingEngine
from pantrypal.matching.ranker import catalog_policy
from pantrypal.models.models import DietaryPreferences, SearchRecipesRequest


@pytest.fixture
def engine(seeded_catalog):
    return MatchingEngine(seeded_catalog)


def ids_for(catalog, *names):
    return catalog.resolve_ingredient_ids(names)


def titles(matches):
    return [match.recipe.title for match in matches]


class TestFindCatalogMatches:
    """Test the catalog path."""

    def test_ranked_by_match_percentage(self, engine, seeded_catalog):
        matches = engine.find_catalog_matches(ids_for(seeded_catalog, "tomatoes", "mozzarella", "basil"))

        # Caprese 3/4 = 75%, Margherita 3/5 = 60%, pasta 1/5 = 20% (below threshold)
        assert titles(matches) == ["Fresh Caprese Salad", "Classic Margherita Pizza"]
        assert [m.match_percentage for m in matches] == [75, 60]
        assert matches[0].match.missing_ingredients == ["olive oil"]
        assert matches[0].score is None

    def test_cook_time_is_hard_filter(self, engine, seeded_catalog):
        matches = engine.find_catalog_matches(
            ids_for(seeded_catalog, "tomatoes", "mozzarella", "basil"), max_cook_time=15
        )
        assert titles(matches) == ["Fresh Caprese Salad"]

    def test_dietary_filter(self, engine, seeded_catalog):
        ids = ids_for(seeded_catalog, "tomatoes", "mozzarella", "basil")
        assert engine.find_catalog_matches(ids, DietaryPreferences(vegan=True)) == []
        assert len(engine.find_catalog_matches(ids, DietaryPreferences(vegetarian=True))) == 2

    def test_empty_ids_return_empty(self, engine):
        assert engine.find_catalog_matches([]) == []

    def test_configured_threshold(self, seeded_catalog):
        strict = MatchingEngine(seeded_catalog, catalog_threshold=catalog_policy(70))
        matches = strict.find_catalog_matches(ids_for(seeded_catalog, "tomatoes", "mozzarella", "basil"))
        assert titles(matches) == ["Fresh Caprese Salad"]

    def test_catalog_not_mutated(self, engine, seeded_catalog):
        before = seeded_catalog.recipes()
        engine.find_catalog_matches(ids_for(seeded_catalog, "pasta", "garlic"), max_cook_time=5)
        assert seeded_catalog.recipes() == before


class TestRankFreeText:
    """Test the free-text path."""

    @pytest.fixture
    def generated(self, recipe_factory):
        return [
            recipe_factory(
                "Tomato Soup",
                ["tomatoes", "onion", "garlic", "cream", "stock"],
                difficulty="Easy",
                rating=4.0,
                cook_time=45,
                is_vegetarian=True,
            ),
            recipe_factory("Bruschetta", ["tomatoes", "basil", "bread"], difficulty="Easy", rating=4.5, cook_time=15),
            recipe_factory("Beef Stew", ["beef", "carrots", "potatoes"], difficulty="Hard", rating=5.0, cook_time=120),
        ]

    def test_scored_and_ordered_by_score(self, engine, generated):
        matches = engine.rank_free_text(generated, ["cherry tomatoes", "Basil", "garlic"])

        # Bruschetta 67 + 5 + 9 = 81; Tomato Soup 40 + 5 + 8 = 53; Beef Stew 0% excluded
        assert titles(matches) == ["Bruschetta", "Tomato Soup"]
        assert [m.score for m in matches] == [81.0, 53.0]
        assert matches[0].match.matched_ingredients == ["tomatoes", "basil"]

    def test_preferences_and_cook_time_are_soft(self, engine, generated):
        matches = engine.rank_free_text(
            generated,
            ["tomatoes", "garlic"],
            DietaryPreferences(vegetarian=True),
            max_cook_time=30,
        )

        # Tomato Soup 40 + 10 - 20 + 5 + 8 = 43; Bruschetta 33 + 5 + 9 = 47
        assert titles(matches) == ["Bruschetta", "Tomato Soup"]
        assert [m.score for m in matches] == [47.0, 43.0]

    def test_low_match_still_included(self, engine, recipe_factory):
        recipe = recipe_factory("Big Salad", ["lettuce", "cucumber", "onion", "pepper", "tomatoes"])
        matches = engine.rank_free_text([recipe], ["tomatoes"])
        assert [m.match_percentage for m in matches] == [20]

    def test_empty_names_return_empty(self, engine, generated):
        assert engine.rank_free_text(generated, []) == []
        assert engine.rank_free_text(generated, ["", "  "]) == []

    def test_limit(self, engine, generated):
        assert len(engine.rank_free_text(generated, ["tomatoes"], limit=1)) == 1


class TestSearch:
    """Test search() dispatch."""

    def test_catalog_path_from_names(self, engine):
        request = SearchRecipesRequest(session_id="s1", ingredients=["Pasta", "mushrooms", "garlic"])

        matches = engine.search(request)

        assert titles(matches) == ["Garlic Mushroom Pasta"]
        assert matches[0].match_percentage == 60

    def test_catalog_path_resolves_loose_names(self, engine):
        """Detected-style names resolve to catalog ingredients by substring."""
        request = SearchRecipesRequest(
            session_id="s1", ingredients=["cherry tomatoes", "fresh mozzarella", "basil"]
        )

        matches = engine.search(request)

        assert titles(matches) == ["Fresh Caprese Salad", "Classic Margherita Pizza"]
        assert [match.match_percentage for match in matches] == [75, 60]

    def test_free_text_path_when_recipes_given(self, engine, recipe_factory):
        recipes = [recipe_factory("Omelette", ["eggs", "cheese"], cook_time=10)]
        request = SearchRecipesRequest(session_id="s1", ingredients=["eggs"], max_cook_time=30)

        matches = engine.search(request, recipes=recipes)

        assert titles(matches) == ["Omelette"]
        assert matches[0].score == 50.0

    def test_unknown_ingredients_return_empty(self, engine):
        request = SearchRecipesRequest(session_id="s1", ingredients=["dragonfruit"])
        assert engine.search(request) == []

    def test_empty_request_returns_empty(self, engine):
        assert engine.search(SearchRecipesRequest(session_id="s1")) == []

    def test_default_limit_from_config(self, monkeypatch, engine, recipe_factory):
        monkeypatch.setattr("pantrypal.matching.engine.config.MAX_RECIPES", 2)
        recipes = [recipe_factory(f"Rice {i}", ["rice"]) for i in range(5)]
        request = SearchRecipesRequest(session_id="s1", ingredients=["rice"])

        assert len(engine.search(request, recipes=recipes)) == 2

    def test_empty_catalog(self):
        engine = MatchingEngine(RecipeCatalog())
        request = SearchRecipesRequest(session_id="s1", ingredients=["tomatoes"])
        assert engine.search(request) == []
