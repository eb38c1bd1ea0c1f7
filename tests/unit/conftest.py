"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, Mock

from llm_resilience.llm.exceptions import TransportError, TransportErrorSignal
from llm_resilience.llm.openai_client import OpenAITransport
from llm_resilience.llm.provider import LLMProvider


class RecordingSleep:
    """Async sleep stand-in that records requested delays (seconds) instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def transport_error(
    status_code: int | None = None,
    code: str | None = None,
    error_type: str | None = None,
    message: str = "remote failure",
    response_received: bool = True,
) -> TransportError:
    """Build a TransportError the way the OpenAI transport would."""
    return TransportError(
        TransportErrorSignal(
            message=message,
            status_code=status_code,
            provider_error_code=code,
            provider_error_type=error_type,
            response_received=response_received,
            cause=RuntimeError(message),
        )
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Sleep replacement; inspect `.delays` after the call."""
    return RecordingSleep()


@pytest.fixture
def mock_transport():
    """Mock LLMTransport for unit tests."""
    mock = Mock()
    mock.provider_name = "openai"

    # Mock invoke method (structured result by default)
    mock.invoke = AsyncMock(return_value={"title": "Quarterly report", "priority": 2})

    # Exact tokenizer available, prompt is small
    mock.count_tokens = Mock(return_value=100)

    mock.list_model_ids = AsyncMock(return_value=["gpt-4", "gpt-4-turbo"])
    mock.retrieve_model = AsyncMock(return_value={"id": "gpt-4", "object": "model"})
    mock.close = AsyncMock(return_value=None)

    return mock


@pytest.fixture
def make_provider(provider_config, mock_transport, recording_sleep):
    """Factory fixture building an LLMProvider over the mock transport.

    Usage:
        def test_something(make_provider):
            provider = make_provider(model_name="gpt-4-turbo")
    """
    def _create(transport=None, **config_overrides) -> LLMProvider:
        config = provider_config.model_copy(update=config_overrides)
        return LLMProvider(
            config,
            transport if transport is not None else mock_transport,
            sleep=recording_sleep,
        )

    return _create


@pytest.fixture
def make_openai_transport():
    """Factory fixture building an OpenAITransport backed by httpx.MockTransport.

    Usage:
        def test_something(make_openai_transport):
            transport = make_openai_transport(handler)
    """
    def _create(handler, model_name: str = "gpt-4") -> OpenAITransport:
        return OpenAITransport(
            api_key="sk-test",
            model_name=model_name,
            base_url="https://api.openai.test",
            timeout=5,
            http_transport=httpx.MockTransport(handler),
        )

    return _create


@pytest.fixture
def make_transport_error():
    """Factory fixture for TransportError instances.

    Usage:
        def test_something(make_transport_error):
            error = make_transport_error(status_code=429, code="rate_limit_exceeded")
    """
    return transport_error
