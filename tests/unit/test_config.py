"""Unit tests for configuration management."""

import pytest

from pantrypal.utils.config import Config

CONFIG_VARS = [
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "IMAGE_DETECTION_MODEL",
    "MAX_IMAGE_SIZE_MB",
    "MIN_INGREDIENT_CONFIDENCE",
    "MAX_DETECTED_INGREDIENTS",
    "GENERATED_RECIPE_COUNT",
    "MAX_RECIPES",
    "CATALOG_MIN_MATCH_PERCENTAGE",
    "DEFAULT_MAX_COOK_TIME",
    "TEMPERATURE",
    "MAX_RETRIES",
    "DELAY_BETWEEN_RETRIES",
    "EXPONENTIAL_BACKOFF",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigInitialization:
    """Test Config class initialization and environment variable loading."""

    def test_config_loads_default_values(self, clean_env):
        """Test that Config uses default values when env vars not set."""
        config = Config()

        assert config.GEMINI_API_KEY == ""
        assert config.GEMINI_MODEL == "gemini-2.5-flash"
        assert config.IMAGE_DETECTION_MODEL == "gemini-2.5-flash-lite"
        assert config.MAX_IMAGE_SIZE_MB == 10
        assert config.MIN_INGREDIENT_CONFIDENCE == 0.6
        assert config.MAX_DETECTED_INGREDIENTS == 8
        assert config.GENERATED_RECIPE_COUNT == 10
        assert config.MAX_RECIPES == 10
        assert config.CATALOG_MIN_MATCH_PERCENTAGE == 25
        assert config.DEFAULT_MAX_COOK_TIME is None
        assert config.MAX_RETRIES == 3
        assert config.DELAY_BETWEEN_RETRIES == 1
        assert config.EXPONENTIAL_BACKOFF is True

    def test_config_loads_from_environment(self, clean_env):
        """Test that Config loads values from environment variables."""
        clean_env.setenv("GEMINI_API_KEY", "test_gemini_key")
        clean_env.setenv("GEMINI_MODEL", "custom-model")
        clean_env.setenv("IMAGE_DETECTION_MODEL", "vision-model")
        clean_env.setenv("MIN_INGREDIENT_CONFIDENCE", "0.85")
        clean_env.setenv("CATALOG_MIN_MATCH_PERCENTAGE", "50")
        clean_env.setenv("DEFAULT_MAX_COOK_TIME", "30")
        clean_env.setenv("EXPONENTIAL_BACKOFF", "false")

        config = Config()

        assert config.GEMINI_API_KEY == "test_gemini_key"
        assert config.GEMINI_MODEL == "custom-model"
        assert config.IMAGE_DETECTION_MODEL == "vision-model"
        assert config.MIN_INGREDIENT_CONFIDENCE == 0.85
        assert config.CATALOG_MIN_MATCH_PERCENTAGE == 50
        assert config.DEFAULT_MAX_COOK_TIME == 30
        assert config.EXPONENTIAL_BACKOFF is False

    def test_config_converts_numeric_types(self, clean_env):
        """Test that Config properly converts numeric environment variables."""
        clean_env.setenv("MAX_IMAGE_SIZE_MB", "20")
        clean_env.setenv("MIN_INGREDIENT_CONFIDENCE", "0.95")
        clean_env.setenv("MAX_RECIPES", "5")

        config = Config()

        assert isinstance(config.MAX_IMAGE_SIZE_MB, int)
        assert isinstance(config.MIN_INGREDIENT_CONFIDENCE, float)
        assert isinstance(config.MAX_RECIPES, int)

    def test_blank_default_cook_time_means_unconstrained(self, clean_env):
        clean_env.setenv("DEFAULT_MAX_COOK_TIME", "  ")
        assert Config().DEFAULT_MAX_COOK_TIME is None


class TestConfigValidation:
    """Test Config validation logic."""

    def test_validate_passes_without_api_key(self, clean_env):
        """The matching engine runs offline, so a missing key is not a config error."""
        Config().validate()

    @pytest.mark.parametrize(
        "name,value,message",
        [
            ("MIN_INGREDIENT_CONFIDENCE", "1.5", "MIN_INGREDIENT_CONFIDENCE"),
            ("CATALOG_MIN_MATCH_PERCENTAGE", "101", "CATALOG_MIN_MATCH_PERCENTAGE"),
            ("MAX_RECIPES", "0", "MAX_RECIPES"),
            ("MAX_RETRIES", "0", "MAX_RETRIES"),
            ("DEFAULT_MAX_COOK_TIME", "0", "DEFAULT_MAX_COOK_TIME"),
            ("TEMPERATURE", "2.0", "TEMPERATURE"),
            ("MAX_IMAGE_SIZE_MB", "0", "MAX_IMAGE_SIZE_MB"),
        ],
    )
    def test_validate_rejects_out_of_range_values(self, clean_env, name, value, message):
        """Test that validate() raises ValueError for out-of-range values."""
        clean_env.setenv(name, value)
        config = Config()

        with pytest.raises(ValueError) as exc_info:
            config.validate()

        assert message in str(exc_info.value)

    def test_invalid_integer_raises_on_load(self, clean_env):
        clean_env.setenv("MAX_RECIPES", "ten")
        with pytest.raises(ValueError):
            Config()
