"""Gemini adapter: ingredient detection and recipe generation.

This module is the boundary to the external AI service. It sends a prompt, gets
text back, and turns that text into the engine's input types:

1. INGREDIENT DETECTION (GeminiClient.detect_ingredients):
   - Accepts bytes, an http(s) URL, a data URI or plain base64
   - Validates format (JPEG/PNG/WebP) and size (MAX_IMAGE_SIZE_MB)
   - Calls the vision model, parses a JSON array of {name, confidence}
   - Drops ingredients below MIN_INGREDIENT_CONFIDENCE
   - Returns a DetectedIngredientSet for the session

2. RECIPE GENERATION (GeminiClient.generate_recipes):
   - Asks the text model for recipes built from the detected names
   - Parses the JSON array into Recipe models (invalid entries are skipped)
   - The engine's free-text path then scores and ranks them

Parsing is lenient: replies are tried as JSON first, then the first [...] block
is extracted from surrounding text. Transient API errors are retried with
exponential backoff (MAX_RETRIES, DELAY_BETWEEN_RETRIES).
"""

import asyncio
import base64
import json
import re
from typing import Awaitable, Callable, List, Optional, TypeVar

import aiohttp
import filetype
from google import genai
from google.genai import types
from pydantic import ValidationError

from pantrypal.models.models import (
    DetectedIngredient,
    DetectedIngredientSet,
    DietaryPreferences,
    Recipe,
)
from pantrypal.prompts.prompts import get_detection_prompt, get_generation_prompt
from pantrypal.utils.config import config
from pantrypal.utils.logger import logger, session_logger

T = TypeVar("T")

SUPPORTED_IMAGE_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}

TRANSIENT_ERROR_KEYWORDS = ("timeout", "connection", "429", "500", "502", "503", "unavailable", "retryable")


# ============================================================================
# Error Handling Helpers
# ============================================================================


def _log_error(operation_name: str, exception: Exception, log_level: str = "warning") -> None:
    msg = f"{operation_name}: {exception}"
    if log_level == "debug":
        logger.debug(msg)
    elif log_level == "error":
        logger.error(msg)
    else:
        logger.warning(msg)


async def safe_execute_async(
    coro: Awaitable[T],
    operation_name: str,
    log_level: str = "warning",
):
    """Await coro, logging any exception.

    Args:
        coro: Awaitable to execute.
        operation_name: Description for logging (e.g., "Fetch image from URL").
        log_level: "debug", "warning" or "error".

    Returns:
        The awaited result, or None if it raised.
    """
    try:
        return await coro
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return None


def safe_execute_sync(
    func: Callable[[], T],
    operation_name: str,
    log_level: str = "warning",
):
    """Synchronous counterpart of safe_execute_async."""
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return None


def is_transient_error(exception: Exception) -> bool:
    """True for network errors, timeouts, rate limits and 5xx replies."""
    if isinstance(exception, (asyncio.TimeoutError, TimeoutError, aiohttp.ClientConnectionError, ConnectionError)):
        return True
    error_str = str(exception).lower()
    return any(keyword in error_str for keyword in TRANSIENT_ERROR_KEYWORDS)


async def call_with_retries(
    operation: Callable[[], Awaitable[Optional[T]]],
    operation_name: str,
    max_retries: Optional[int] = None,
    delay_seconds: Optional[float] = None,
) -> Optional[T]:
    """Run operation until it returns a non-None result.

    A None result (unparseable reply) and transient exceptions are retried with
    backoff; permanent exceptions (bad API key, invalid request) stop immediately.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt.
        operation_name: Description for logging.
        max_retries: Attempts in total. Default: config.MAX_RETRIES.
        delay_seconds: Initial delay. Default: config.DELAY_BETWEEN_RETRIES.

    Returns:
        The first non-None result, or None when attempts are exhausted.
    """
    attempts = max_retries if max_retries is not None else config.MAX_RETRIES
    delay = delay_seconds if delay_seconds is not None else config.DELAY_BETWEEN_RETRIES

    for attempt in range(1, attempts + 1):
        try:
            result = await operation()
            if result is not None:
                return result
            logger.debug(f"{operation_name}: empty result (attempt {attempt}/{attempts})")
        except Exception as e:
            if not is_transient_error(e):
                logger.warning(f"{operation_name} failed permanently: {e}")
                return None
            logger.debug(f"{operation_name}: transient error (attempt {attempt}/{attempts}): {e}")

        if attempt < attempts:
            await asyncio.sleep(delay)
            if config.EXPONENTIAL_BACKOFF:
                delay *= 2

    logger.warning(f"{operation_name} exhausted all {attempts} attempts")
    return None


# ============================================================================
# Image handling
# ============================================================================


async def fetch_image_bytes(image_source: str | bytes) -> Optional[bytes]:
    """Get image bytes from bytes, an http(s) URL, a data URI or plain base64.

    Returns:
        Image bytes, or None on any failure (logged as warning).
    """
    if isinstance(image_source, bytes):
        return image_source

    if not isinstance(image_source, str) or not image_source:
        return None

    if image_source.startswith("data:"):

        def _decode_data_url():
            _, encoded = image_source.split(",", 1)
            return base64.b64decode(encoded)

        return safe_execute_sync(_decode_data_url, "Decode data URL")

    if image_source.startswith(("http://", "https://")):

        async def _fetch_url():
            async with aiohttp.ClientSession() as session:
                async with session.get(image_source, timeout=aiohttp.ClientTimeout(total=10)) as response:
                    response.raise_for_status()
                    return await response.read()

        return await safe_execute_async(_fetch_url(), f"Fetch image from URL: {image_source}")

    return safe_execute_sync(lambda: base64.b64decode(image_source, validate=True), "Decode base64 image string")


def detect_mime_type(image_bytes: bytes) -> Optional[str]:
    """MIME type from magic bytes, or None if the format is unsupported."""
    kind = filetype.guess(image_bytes) if image_bytes else None
    if kind is None:
        return None
    return SUPPORTED_IMAGE_TYPES.get(kind.extension)


def validate_image_format(image_bytes: bytes) -> bool:
    """True for JPEG, PNG or WebP images (checked from magic bytes, not extension)."""
    if detect_mime_type(image_bytes) is None:
        logger.warning("Invalid image format. Only JPEG, PNG and WebP are supported.")
        return False
    return True


def validate_image_size(image_bytes: bytes) -> bool:
    """True if the image is within MAX_IMAGE_SIZE_MB."""
    size_mb = len(image_bytes) / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        logger.warning(f"Image size {size_mb:.2f}MB exceeds limit of {config.MAX_IMAGE_SIZE_MB}MB")
        return False
    return True


# ============================================================================
# Response parsing
# ============================================================================


def extract_json_array(response_text: str) -> Optional[list]:
    """Parse a JSON array from a model reply that may include extra text.

    Tries json.loads on the whole reply, then the outermost [...] block.
    Returns None if neither yields a list.
    """
    if not response_text:
        return None

    parsed = safe_execute_sync(lambda: json.loads(response_text), "Direct JSON parse", log_level="debug")
    if isinstance(parsed, list):
        return parsed

    match = re.search(r"\[.*\]", response_text, re.DOTALL)
    if match:
        parsed = safe_execute_sync(lambda: json.loads(match.group()), "Regex JSON extraction", log_level="debug")
        if isinstance(parsed, list):
            return parsed

    logger.warning("Failed to parse JSON array from Gemini response")
    return None


def parse_detected_ingredients(
    response_text: str,
    session_id: str,
    max_ingredients: Optional[int] = None,
) -> Optional[DetectedIngredientSet]:
    """Parse a detection reply into a DetectedIngredientSet.

    Entries without a usable name or confidence are skipped. Duplicate names keep
    their first occurrence. At most max_ingredients (default
    MAX_DETECTED_INGREDIENTS) entries are kept.

    Returns:
        The set (possibly empty), or None if the reply holds no JSON array.
    """
    items = extract_json_array(response_text)
    if items is None:
        return None

    limit = max_ingredients if max_ingredients is not None else config.MAX_DETECTED_INGREDIENTS
    detected: List[DetectedIngredient] = []
    seen = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        ingredient = safe_execute_sync(
            lambda: DetectedIngredient(name=item.get("name"), confidence=item.get("confidence")),
            f"Validate detected ingredient {item!r}",
            log_level="debug",
        )
        if ingredient is None or ingredient.name in seen:
            continue
        seen.add(ingredient.name)
        detected.append(ingredient)
        if len(detected) >= limit:
            break

    return DetectedIngredientSet(session_id=session_id, ingredients=detected)


def _to_recipe(item: dict, index: int, preferences: Optional[DietaryPreferences]) -> Recipe:
    data = dict(item)
    data["id"] = f"gemini-recipe-{index + 1}"
    raw_ingredients = item.get("ingredients") or []
    if not isinstance(raw_ingredients, list):
        raise TypeError(f"ingredients is {type(raw_ingredients).__name__}, expected a list")
    data["ingredients"] = [
        {
            "ingredient": {"name": entry.get("name", "")},
            "amount": entry.get("amount", ""),
            "unit": entry.get("unit") or None,
        }
        for entry in raw_ingredients
        if isinstance(entry, dict)
    ]
    if not data["ingredients"]:
        raise TypeError("recipe has no ingredients")
    # Generated recipes carry no dietary flags; the prompt made each requested
    # preference a hard requirement, so they are taken as satisfied.
    if preferences is not None:
        data.setdefault("isVegetarian", preferences.vegetarian)
        data.setdefault("isVegan", preferences.vegan)
        data.setdefault("isGlutenFree", preferences.gluten_free)
        data.setdefault("isKeto", preferences.keto)
    return Recipe.model_validate(data)


def parse_generated_recipes(
    response_text: str,
    preferences: Optional[DietaryPreferences] = None,
) -> Optional[List[Recipe]]:
    """Parse a generation reply into Recipe models.

    Entries failing validation or carrying no ingredient list are skipped
    with a warning.

    Returns:
        List of recipes, or None if the reply holds no JSON array.
    """
    items = extract_json_array(response_text)
    if items is None:
        return None

    recipes: List[Recipe] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        try:
            recipes.append(_to_recipe(item, index, preferences))
        except ValidationError as e:
            logger.warning(f"Skipping invalid generated recipe #{index + 1}: {e.error_count()} validation errors")
        except (TypeError, AttributeError) as e:
            logger.warning(f"Skipping malformed generated recipe #{index + 1}: {e}")
    return recipes


# ============================================================================
# Client
# ============================================================================


class GeminiClient:
    """Async wrapper around the google-genai client for PantryPal's two calls."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        image_model: Optional[str] = None,
    ) -> None:
        """
        Args:
            api_key: Gemini API key. Default: config.GEMINI_API_KEY.
            model: Recipe generation model. Default: config.GEMINI_MODEL.
            image_model: Vision model. Default: config.IMAGE_DETECTION_MODEL.

        Raises:
            ValueError: If no API key is available.
        """
        self.api_key = api_key or config.GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        self.model = model or config.GEMINI_MODEL
        self.image_model = image_model or config.IMAGE_DETECTION_MODEL
        self._client = genai.Client(api_key=self.api_key)

    async def _generate(self, model: str, contents: list, generation_config=None) -> str:
        # The SDK call is blocking
        response = await asyncio.to_thread(
            self._client.models.generate_content,
            model=model,
            contents=contents,
            config=generation_config,
        )
        return response.text or ""

    async def detect_ingredients(self, image_source: str | bytes, session_id: str) -> DetectedIngredientSet:
        """Detect ingredients in one image.

        Raises:
            ValueError: With a user-facing message when the image cannot be read,
                has an unsupported format or size, detection fails after retries,
                or no ingredient reaches MIN_INGREDIENT_CONFIDENCE.
        """
        log = session_logger(session_id)

        image_bytes = await fetch_image_bytes(image_source)
        if not image_bytes:
            raise ValueError("Could not retrieve image bytes from provided data")
        if not validate_image_format(image_bytes):
            raise ValueError("Invalid image format. Only JPEG, PNG and WebP are supported.")
        if not validate_image_size(image_bytes):
            raise ValueError(f"Image too large. Maximum size is {config.MAX_IMAGE_SIZE_MB}MB")

        contents = [
            get_detection_prompt(config.MAX_DETECTED_INGREDIENTS),
            types.Part.from_bytes(data=image_bytes, mime_type=detect_mime_type(image_bytes)),
        ]

        async def _attempt() -> Optional[DetectedIngredientSet]:
            text = await self._generate(self.image_model, contents)
            return parse_detected_ingredients(text, session_id)

        result = await call_with_retries(_attempt, "Gemini ingredient detection")
        if result is None:
            raise ValueError("Failed to detect ingredients from image. Please try another image.")

        kept = [item for item in result.ingredients if item.confidence >= config.MIN_INGREDIENT_CONFIDENCE]
        if len(kept) < len(result.ingredients):
            log.debug(
                f"Filtered ingredients: {len(result.ingredients)} → {len(kept)} "
                f"(confidence threshold: {config.MIN_INGREDIENT_CONFIDENCE})"
            )
        if not kept:
            raise ValueError("No ingredients detected with sufficient confidence. Please try another image.")

        log.info(f"Detected ingredients: {[item.name for item in kept]}")
        return DetectedIngredientSet(session_id=session_id, ingredients=kept)

    async def generate_recipes(
        self,
        ingredients: List[str],
        preferences: Optional[DietaryPreferences] = None,
        max_cook_time: Optional[int] = None,
    ) -> List[Recipe]:
        """Ask the generation model for recipes using the given ingredient names.

        Returns an empty list when no ingredients are given.

        Raises:
            ValueError: If generation fails after retries.
        """
        if not ingredients:
            return []

        prompt = get_generation_prompt(ingredients, preferences, max_cook_time, config.GENERATED_RECIPE_COUNT)
        generation_config = types.GenerateContentConfig(
            temperature=config.TEMPERATURE,
            response_mime_type="application/json",
        )

        async def _attempt() -> Optional[List[Recipe]]:
            text = await self._generate(self.model, [prompt], generation_config)
            return parse_generated_recipes(text, preferences)

        recipes = await call_with_retries(_attempt, "Gemini recipe generation")
        if recipes is None:
            raise ValueError("Failed to generate recipes. Please try again.")

        logger.info(f"Generated {len(recipes)} recipes for {len(ingredients)} ingredients")
        return recipes
