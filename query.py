#!/usr/bin/env python3
"""Ad hoc query runner for the PantryPal matching engine.

Match ingredients against the seeded catalog, or against recipes generated by
Gemini, without starting a server.

Usage:
    python query.py tomatoes mozzarella basil
    python query.py --vegetarian --max-cook-time 15 tomatoes basil
    python query.py --generate chicken rice broccoli  # Rank Gemini-generated recipes
    python query.py --image images/pantry.png  # Detect ingredients, then generate

Features:
- Catalog mode: seeded sample catalog, hard dietary/cook-time filter
- Generate mode: free-text scoring of AI recipes (requires GEMINI_API_KEY)
- Image mode: ingredient detection before generation (requires GEMINI_API_KEY)
- Results rendered as a rich table
"""

import asyncio
import sys
import uuid
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from pantrypal.catalog.catalog import RecipeCatalog, seed_catalog
from pantrypal.matching.engine import MatchingEngine
from pantrypal.models.models import DietaryPreferences, RecipeMatch, SearchRecipesRequest
from pantrypal.services.gemini import GeminiClient
from pantrypal.utils.config import config
from pantrypal.utils.logger import logger

console = Console()

PREFERENCE_FLAGS = {
    "--vegetarian": "vegetarian",
    "--vegan": "vegan",
    "--gluten-free": "gluten_free",
    "--keto": "keto",
}

USAGE = (
    "Usage: python query.py [--vegetarian] [--vegan] [--gluten-free] [--keto] "
    "[--max-cook-time N] [--generate] [--image PATH] ingredient ..."
)


def render_matches(matches: List[RecipeMatch], title: str) -> None:
    """Print ranked matches as a table."""
    if not matches:
        console.print("[yellow]No matching recipes found[/yellow]")
        return

    show_score = any(match.score is not None for match in matches)
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Recipe", style="bold")
    table.add_column("Match", justify="right", style="green")
    if show_score:
        table.add_column("Score", justify="right", style="cyan")
    table.add_column("Cook", justify="right")
    table.add_column("Have")
    table.add_column("Missing", style="red")

    for position, match in enumerate(matches, start=1):
        row = [str(position), match.recipe.title, f"{match.match_percentage}%"]
        if show_score:
            row.append(f"{match.score:.1f}")
        row.extend(
            [
                f"{match.recipe.cook_time} min",
                ", ".join(match.match.matched_ingredients),
                ", ".join(match.match.missing_ingredients),
            ]
        )
        table.add_row(*row)

    console.print(table)


async def run_generation(
    request: SearchRecipesRequest,
    engine: MatchingEngine,
    image_path: Optional[str] = None,
) -> List[RecipeMatch]:
    """Detect ingredients (if an image is given), generate recipes and rank them."""
    client = GeminiClient()
    ingredients = list(request.ingredients)

    if image_path:
        image_bytes = Path(image_path).read_bytes()
        detected = await client.detect_ingredients(image_bytes, request.session_id)
        console.print(f"[bold cyan]Detected:[/bold cyan] {', '.join(detected.names())}")
        ingredients = list(dict.fromkeys([*ingredients, *detected.names()]))
        request = request.model_copy(update={"ingredients": ingredients})

    recipes = await client.generate_recipes(ingredients, request.dietary_preferences, request.max_cook_time)
    return engine.search(request, recipes=recipes)


def run_query(
    ingredients: List[str],
    preferences: DietaryPreferences,
    max_cook_time: Optional[int] = None,
    generate: bool = False,
    image_path: Optional[str] = None,
) -> None:
    """Execute a single query and print ranked recipes.

    Args:
        ingredients: Ingredient names the user has.
        preferences: Requested dietary preferences.
        max_cook_time: Cook-time limit in minutes.
        generate: Rank Gemini-generated recipes instead of the catalog.
        image_path: Optional image for ingredient detection (implies generate).
    """
    try:
        request = SearchRecipesRequest(
            session_id=f"cli-{uuid.uuid4().hex[:8]}",
            ingredients=ingredients,
            dietary_preferences=preferences,
            max_cook_time=max_cook_time if max_cook_time is not None else config.DEFAULT_MAX_COOK_TIME,
        )
        engine = MatchingEngine(seed_catalog(RecipeCatalog()))

        if generate or image_path:
            if image_path and not Path(image_path).exists():
                console.print(f"[red]✗ Error: Image file not found: {image_path}[/red]")
                sys.exit(1)
            matches = asyncio.run(run_generation(request, engine, image_path))
            render_matches(matches, "Generated recipes")
        else:
            matches = engine.search(request)
            render_matches(matches, "Catalog recipes")

    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except ValueError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        print("")
        print("Examples:")
        print("  python query.py tomatoes mozzarella basil")
        print("  python query.py --vegetarian --max-cook-time 15 tomatoes basil")
        print("  python query.py --generate chicken rice broccoli")
        print("  python query.py --image images/pantry.png")
        sys.exit(1)

    flags = {}
    generate_mode = False
    cook_time_limit = None
    image_path = None
    argv_start = 1

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        arg = sys.argv[argv_start]
        if arg in PREFERENCE_FLAGS:
            flags[PREFERENCE_FLAGS[arg]] = True
            argv_start += 1
        elif arg == "--generate":
            generate_mode = True
            argv_start += 1
        elif arg in ("--max-cook-time", "--image"):
            argv_start += 1
            if argv_start >= len(sys.argv):
                print(f"Error: {arg} flag requires a value")
                sys.exit(1)
            value = sys.argv[argv_start]
            if arg == "--image":
                image_path = value
            elif value.isdigit() and int(value) > 0:
                cook_time_limit = int(value)
            else:
                print(f"Error: --max-cook-time must be a positive integer, got: {value}")
                sys.exit(1)
            argv_start += 1
        else:
            print(f"Unknown flag: {arg}")
            sys.exit(1)

    ingredient_args = sys.argv[argv_start:]
    if not ingredient_args and not image_path:
        print("Error: No ingredients provided")
        print(USAGE)
        sys.exit(1)

    run_query(
        ingredient_args,
        DietaryPreferences(**flags),
        max_cook_time=cook_time_limit,
        generate=generate_mode,
        image_path=image_path,
    )
