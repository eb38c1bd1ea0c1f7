"""
Transport capability interface.

Each backend integration implements this protocol directly; shared
behaviour (budget validation, retry, classification) lives in plain
functions composed by LLMProvider rather than in a base class.
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from llm_resilience.models.llm_models import CallOptions, OutputSchema, PromptPayload


@runtime_checkable
class LLMTransport(Protocol):
    """
    Narrow contract between the provider layer and a remote backend.

    Responsibilities:
    - Send completion requests and return parsed results
    - Surface failures as TransportError with a populated signal
      (status code and provider error body when available)
    - Report malformed payloads as ProviderError(INVALID_RESPONSE)

    Does NOT handle:
    - Retries (that's RetryExecutor's job)
    - Token budgets (that's validate_token_budget's job)
    - Classification (that's classify's job)
    """

    provider_name: str

    async def invoke(
        self,
        prompt_payload: PromptPayload,
        call_options: CallOptions,
        schema: Optional[OutputSchema] = None,
    ) -> Any:
        """
        Run one completion.

        Returns:
            Parsed structured result when `schema` is given, else the text

        Raises:
            TransportError: Remote call failed
            ProviderError: Response payload is malformed
        """
        ...

    def count_tokens(self, text: str) -> Optional[int]:
        """Exact token count, or None when no tokenizer is available."""
        ...

    async def list_model_ids(self) -> list[str]:
        """
        List model identifiers available to the credentials.

        Raises:
            TransportError: Non-200 response or connection failure
            ProviderError: INVALID_RESPONSE or NO_MODELS_FOUND
        """
        ...

    async def retrieve_model(self, model_name: str) -> Dict[str, Any]:
        """Fetch metadata for a single model."""
        ...

    async def close(self) -> None:
        ...
