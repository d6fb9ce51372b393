"""Pytest configuration and fixtures for integration tests.

Loads .env before collection and skips the live Gemini tests when no
GEMINI_API_KEY is configured.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv


def pytest_configure(config):
    """Load environment variables from .env (in project root) before tests run."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    # Keep live runs short
    os.environ.setdefault("GENERATED_RECIPE_COUNT", "3")
    os.environ.setdefault("MAX_RETRIES", "2")


@pytest.fixture(scope="session", autouse=True)
def check_api_keys():
    """Skip integration tests if GEMINI_API_KEY is not configured in .env."""
    if not os.getenv("GEMINI_API_KEY"):
        pytest.skip(
            "Integration tests skipped. Missing API key: GEMINI_API_KEY. Please set it in your .env file.",
            allow_module_level=True,
        )
