"""Integration test fixtures (service checks and prerequisites).

Integration tests talk to the real OpenAI API and are skipped unless
OPENAI_API_KEY is set in the environment.
"""

import os

import pytest
import pytest_asyncio

from llm_resilience.config import Settings
from llm_resilience.llm.factory import create_provider


@pytest.fixture(scope="session")
def check_openai():
    """Skip tests when no OpenAI credentials are configured."""
    if not os.environ.get("OPENAI_API_KEY"):
        pytest.skip("OPENAI_API_KEY not set")


@pytest_asyncio.fixture
async def real_provider(check_openai):
    """LLMProvider against the real OpenAI API.

    Model and base URL come from the environment (OPENAI_MODEL, OPENAI_BASE_URL).
    """
    provider = create_provider(Settings())
    yield provider
    await provider.close()
