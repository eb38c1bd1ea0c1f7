"""Provider construction from settings."""

from typing import Optional

import httpx
import structlog

from llm_resilience.config import Settings, settings as default_settings
from llm_resilience.llm.openai_client import OpenAITransport
from llm_resilience.llm.provider import LLMProvider
from llm_resilience.models.llm_models import ProviderConfig


logger = structlog.get_logger(__name__)


def create_provider(
    settings: Optional[Settings] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> LLMProvider:
    """
    Build an LLMProvider for the configured backend.

    Args:
        settings: Settings to read from (global settings by default)
        http_transport: Custom httpx transport for the OpenAI client

    Raises:
        ValueError: LLM_PROVIDER names an unsupported backend
    """
    settings = settings or default_settings
    config = ProviderConfig.from_settings(settings)

    if config.provider_name != "openai":
        raise ValueError(f"Unsupported LLM provider: {config.provider_name}")

    transport = OpenAITransport(
        api_key=config.api_key,
        model_name=config.model_name,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT,
        provider_name=config.provider_name,
        http_transport=http_transport,
    )
    return LLMProvider(config, transport)
