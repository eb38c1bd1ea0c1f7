"""
Provider abstraction and implementations.

Components:
- LLMTransport: Capability protocol implemented by backend adapters
- OpenAITransport: httpx adapter for the OpenAI REST API
- LLMProvider: Budget checks + retries + classification around a transport
- create_provider: Builds a provider from Settings
- classify / classify_failure: Failure classification
- resolve_context_window / validate_token_budget: Pre-dispatch checks
- exceptions: Provider layer exceptions
"""

from llm_resilience.llm.base_client import LLMTransport
from llm_resilience.llm.call_options import build_call_options
from llm_resilience.llm.classifier import classify, classify_failure
from llm_resilience.llm.context_window import (
    DEFAULT_CONTEXT_WINDOW,
    OPENAI_CONTEXT_WINDOWS,
    ContextWindowTable,
    resolve_context_window,
)
from llm_resilience.llm.exceptions import (
    LLMClientError,
    ModelNotFoundError,
    ProviderError,
    TransportError,
    TransportErrorSignal,
)
from llm_resilience.llm.factory import create_provider
from llm_resilience.llm.openai_client import OpenAITransport
from llm_resilience.llm.provider import LLMProvider
from llm_resilience.llm.token_budget import (
    DEFAULT_OUTPUT_RESERVE,
    resolve_max_output_tokens,
    validate_token_budget,
)

__all__ = [
    "LLMTransport",
    "OpenAITransport",
    "LLMProvider",
    "create_provider",
    "build_call_options",
    "classify",
    "classify_failure",
    "ContextWindowTable",
    "OPENAI_CONTEXT_WINDOWS",
    "DEFAULT_CONTEXT_WINDOW",
    "resolve_context_window",
    "DEFAULT_OUTPUT_RESERVE",
    "resolve_max_output_tokens",
    "validate_token_budget",
    "LLMClientError",
    "ModelNotFoundError",
    "ProviderError",
    "TransportError",
    "TransportErrorSignal",
]
