"""Configuration management for PantryPal.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults

The matching engine itself needs no credentials. GEMINI_API_KEY is only
checked when a GeminiClient is constructed, so the engine and the seeded
catalog can be used offline.
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Recipe generation model (free-text path)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Vision model used for ingredient detection
        self.IMAGE_DETECTION_MODEL: str = os.getenv("IMAGE_DETECTION_MODEL", "gemini-2.5-flash-lite")
        # Maximum image size (in MB) accepted for detection. Default: 10 MB
        self.MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "10"))
        # Detected ingredients below this confidence are dropped before matching
        self.MIN_INGREDIENT_CONFIDENCE: float = float(os.getenv("MIN_INGREDIENT_CONFIDENCE", "0.6"))
        # Detection replies are capped to this many ingredients
        self.MAX_DETECTED_INGREDIENTS: int = int(os.getenv("MAX_DETECTED_INGREDIENTS", "8"))
        # Number of recipes requested from the generation model
        self.GENERATED_RECIPE_COUNT: int = int(os.getenv("GENERATED_RECIPE_COUNT", "10"))
        # Maximum number of ranked matches returned to callers. Default: 10
        self.MAX_RECIPES: int = int(os.getenv("MAX_RECIPES", "10"))
        # Minimum match percentage for the catalog path (inclusive)
        self.CATALOG_MIN_MATCH_PERCENTAGE: int = int(os.getenv("CATALOG_MIN_MATCH_PERCENTAGE", "25"))
        # Default cook-time limit in minutes, unset means unconstrained
        self.DEFAULT_MAX_COOK_TIME: Optional[int] = _env_optional_int("DEFAULT_MAX_COOK_TIME")
        # Sampling temperature for recipe generation
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.4"))

        # Retry configuration for Gemini calls
        # MAX_RETRIES: attempts per call, DELAY_BETWEEN_RETRIES: initial delay in seconds
        self.MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
        self.DELAY_BETWEEN_RETRIES: int = int(os.getenv("DELAY_BETWEEN_RETRIES", "1"))
        # Double the delay after each failed attempt
        self.EXPONENTIAL_BACKOFF: bool = _env_bool("EXPONENTIAL_BACKOFF", "true")

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a value is outside its allowed range.
        """
        if self.MAX_IMAGE_SIZE_MB < 1:
            raise ValueError(f"MAX_IMAGE_SIZE_MB must be at least 1, got: {self.MAX_IMAGE_SIZE_MB}")
        if not (0.0 <= self.MIN_INGREDIENT_CONFIDENCE <= 1.0):
            raise ValueError(
                f"MIN_INGREDIENT_CONFIDENCE must be between 0.0 and 1.0, got: {self.MIN_INGREDIENT_CONFIDENCE}"
            )
        if self.MAX_DETECTED_INGREDIENTS < 1:
            raise ValueError(
                f"MAX_DETECTED_INGREDIENTS must be at least 1, got: {self.MAX_DETECTED_INGREDIENTS}"
            )
        if self.GENERATED_RECIPE_COUNT < 1:
            raise ValueError(f"GENERATED_RECIPE_COUNT must be at least 1, got: {self.GENERATED_RECIPE_COUNT}")
        if self.MAX_RECIPES < 1:
            raise ValueError(f"MAX_RECIPES must be at least 1, got: {self.MAX_RECIPES}")
        if not (0 <= self.CATALOG_MIN_MATCH_PERCENTAGE <= 100):
            raise ValueError(
                f"CATALOG_MIN_MATCH_PERCENTAGE must be between 0 and 100, got: {self.CATALOG_MIN_MATCH_PERCENTAGE}"
            )
        if self.DEFAULT_MAX_COOK_TIME is not None and self.DEFAULT_MAX_COOK_TIME < 1:
            raise ValueError(f"DEFAULT_MAX_COOK_TIME must be positive, got: {self.DEFAULT_MAX_COOK_TIME}")
        if not (0.0 <= self.TEMPERATURE <= 1.0):
            raise ValueError(f"TEMPERATURE must be between 0.0 and 1.0, got: {self.TEMPERATURE}")
        if self.MAX_RETRIES < 1:
            raise ValueError(f"MAX_RETRIES must be at least 1, got: {self.MAX_RETRIES}")
        if self.DELAY_BETWEEN_RETRIES < 0:
            raise ValueError(
                f"DELAY_BETWEEN_RETRIES must not be negative, got: {self.DELAY_BETWEEN_RETRIES}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()
