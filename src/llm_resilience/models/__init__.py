"""
Pydantic data models for the provider resilience layer.

Includes:
- Enums (ErrorKind, LookupMode)
- Outcome (explicit success/failure value)
- Provider models (ProviderConfig, RetryPolicy, CompletionRequest, OutputSchema, CallOptions)
"""

from llm_resilience.models.enums import ErrorKind, LookupMode, RETRYABLE_KINDS
from llm_resilience.models.outcome import Outcome
from llm_resilience.models.llm_models import (
    BoundParameters,
    CallOptions,
    CompletionOverrides,
    CompletionRequest,
    OutputSchema,
    PromptPayload,
    ProviderConfig,
    RetryPolicy,
    RuntimeOptions,
)

__all__ = [
    # Enums
    "ErrorKind",
    "LookupMode",
    "RETRYABLE_KINDS",
    # Outcome
    "Outcome",
    # Provider models
    "BoundParameters",
    "CallOptions",
    "CompletionOverrides",
    "CompletionRequest",
    "OutputSchema",
    "PromptPayload",
    "ProviderConfig",
    "RetryPolicy",
    "RuntimeOptions",
]
