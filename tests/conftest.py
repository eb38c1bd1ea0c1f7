"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import json
import pytest
from pathlib import Path
from typing import Any, Dict

from llm_resilience.config import Settings
from llm_resilience.models.llm_models import ProviderConfig, RetryPolicy


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.OPENAI_MODEL = "gpt-4-turbo"
    """
    return Settings(
        # === Application ===
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Provider ===
        LLM_PROVIDER="openai",
        OPENAI_API_KEY="sk-test",
        OPENAI_BASE_URL="https://api.openai.test",
        OPENAI_MODEL="gpt-4",
        OPENAI_TIMEOUT=5,

        # === Generation ===
        LLM_TEMPERATURE=0.1,
        LLM_MAX_TOKENS=2048,

        # === Retry ===
        RETRY_MAX_ATTEMPTS=3,
        RETRY_INITIAL_DELAY_MS=1000,
        RETRY_MAX_DELAY_MS=30000,
        RETRY_FACTOR=2.0,
    )


@pytest.fixture
def retry_policy() -> RetryPolicy:
    """Policy used by the retry scenarios: 3 attempts, 1s doubling, 30s cap."""
    return RetryPolicy(max_attempts=3, initial_delay_ms=1000, max_delay_ms=30000, factor=2)


@pytest.fixture
def provider_config(retry_policy: RetryPolicy) -> ProviderConfig:
    """ProviderConfig for gpt-4 (8192 token window, 2048 reserved for output)."""
    return ProviderConfig(
        provider_name="openai",
        api_key="sk-test",
        model_name="gpt-4",
        temperature=0.1,
        default_max_output_tokens=2048,
        retry=retry_policy,
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture(fixtures_dir: Path):
    """Factory fixture loading a JSON fixture by file name.

    Usage:
        def test_something(load_fixture):
            payload = load_fixture("models_list.json")
    """
    def _load(name: str) -> Dict[str, Any]:
        with open(fixtures_dir / name) as f:
            return json.load(f)

    return _load
