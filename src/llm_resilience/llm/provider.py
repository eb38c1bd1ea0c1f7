"""
Resilient provider: the structured completion orchestrator.

LLMProvider composes the context window resolver, the token budget check,
the call-options builder, the retry executor and the classifier around an
LLMTransport. Every public method returns an Outcome; no exception from
the transport crosses this boundary.

Usage:
    provider = LLMProvider(config, OpenAITransport(api_key, model_name))
    outcome = await provider.get_structured_completion(
        CompletionRequest(prompt_payload="..."),
        OutputSchema.from_model(Invoice),
    )
    if outcome.ok:
        invoice = outcome.value
"""

import asyncio
from typing import Any, Optional

import structlog

from llm_resilience.llm.base_client import LLMTransport
from llm_resilience.llm.call_options import build_call_options
from llm_resilience.llm.classifier import classify_failure
from llm_resilience.llm.context_window import (
    OPENAI_CONTEXT_WINDOWS,
    ContextWindowTable,
    resolve_context_window,
)
from llm_resilience.llm.exceptions import ProviderError
from llm_resilience.llm.text_utils import serialize_prompt
from llm_resilience.llm.token_budget import (
    count_prompt_tokens,
    resolve_max_output_tokens,
    validate_token_budget,
)
from llm_resilience.models.enums import LookupMode
from llm_resilience.models.llm_models import (
    CompletionOverrides,
    CompletionRequest,
    OutputSchema,
    ProviderConfig,
)
from llm_resilience.models.outcome import Outcome
from llm_resilience.monitoring.metrics import provider_errors_total
from llm_resilience.retry.executor import RetryExecutor, Sleep


logger = structlog.get_logger(__name__)


class LLMProvider:
    """
    One remote LLM backend with budget checks, retries and classification.

    Shared state is limited to the frozen ProviderConfig and the read-only
    context window table; each call owns its retry loop, so concurrent
    calls on one instance do not interfere.

    Attributes:
        config: Immutable provider configuration
        transport: Backend adapter
        context_windows: Context window table for the provider family
        default_context_size: Permissive context window of the configured model
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: LLMTransport,
        context_windows: ContextWindowTable = OPENAI_CONTEXT_WINDOWS,
        sleep: Optional[Sleep] = None,
    ):
        """
        Initialize the provider.

        Args:
            config: Provider configuration
            transport: Backend adapter implementing LLMTransport
            context_windows: Context window table for the provider family
            sleep: Backoff sleep override (asyncio.sleep by default)
        """
        self.config = config
        self.transport = transport
        self.context_windows = context_windows
        self.executor: RetryExecutor[Any] = RetryExecutor(
            classify=self._classify,
            sleep=sleep,
            provider_name=config.provider_name,
        )

        window = resolve_context_window(config.model_name, LookupMode.PERMISSIVE, context_windows)
        self.default_context_size: int = window.unwrap()
        self.context_window_warnings = window.warnings

        logger.info(
            "Initialized LLM provider",
            provider=config.provider_name,
            model=config.model_name,
            default_context_size=self.default_context_size,
            max_attempts=config.retry.max_attempts,
        )

    @property
    def name(self) -> str:
        return self.config.provider_name

    def _classify(self, exc: Exception) -> ProviderError:
        return classify_failure(exc, self.name)

    def _fail(self, error: ProviderError, operation: str) -> Outcome[Any]:
        provider_errors_total.labels(provider=self.name, error_kind=error.kind.value).inc()
        logger.error(
            f"{operation} failed",
            provider=self.name,
            model=self.config.model_name,
            error_kind=error.kind.value,
            status_code=error.status_code,
            error=error.message,
        )
        return Outcome.failure(error)

    async def _complete(
        self,
        request: CompletionRequest,
        schema: Optional[OutputSchema],
        operation: str,
    ) -> Outcome[Any]:
        overrides = request.overrides or CompletionOverrides()

        # The structured form is what gets sent; the text is only counted
        prompt_text = serialize_prompt(request.prompt_payload)
        max_output_tokens = resolve_max_output_tokens(
            overrides.max_output_tokens, self.config.default_max_output_tokens
        )

        # Tokenizer loading and encoding are blocking; keep them off the event loop
        budget = await asyncio.to_thread(
            validate_token_budget,
            prompt_text,
            max_output_tokens,
            self.default_context_size,
            counter=self.transport.count_tokens,
            provider_name=self.name,
            model_name=self.config.model_name,
        )
        if not budget.ok:
            return self._fail(budget.error, operation)

        call_options = build_call_options(self.config, request.overrides)
        if request.overrides is not None:
            logger.debug(
                "Applied per-call overrides",
                provider=self.name,
                bound=call_options.bound.model_dump(exclude_none=True),
                runtime=call_options.runtime.model_dump(exclude_none=True),
            )

        outcome = await self.executor.execute(
            lambda: self.transport.invoke(request.prompt_payload, call_options, schema),
            self.config.retry,
        )
        if not outcome.ok:
            return self._fail(outcome.error, operation)

        logger.debug(
            f"{operation} succeeded",
            provider=self.name,
            model=self.config.model_name,
        )
        return Outcome.success(outcome.value, warnings=budget.warnings)

    async def get_structured_completion(
        self,
        request: CompletionRequest,
        schema: OutputSchema,
    ) -> Outcome[Any]:
        """
        Schema-constrained completion.

        Steps: budget the serialized prompt against the configured model's
        context window, fail fast when it does not fit, then invoke the
        transport through the retry executor.

        Returns:
            Outcome with the parsed result (pydantic instance when the schema
            carries a model, dict otherwise)
        """
        logger.debug(
            "Getting structured completion",
            provider=self.name,
            model=self.config.model_name,
            schema_name=schema.extraction_name,
            prompt_type="string" if isinstance(request.prompt_payload, str) else "messages",
        )
        return await self._complete(request, schema, "Structured completion")

    async def get_completion(
        self,
        system_prompt: str,
        user_prompt: str,
        overrides: Optional[CompletionOverrides] = None,
    ) -> Outcome[str]:
        """Plain text completion with the same budget and retry flow."""
        request = CompletionRequest(
            prompt_payload=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            overrides=overrides,
        )
        return await self._complete(request, None, "Completion")

    async def list_models(self) -> Outcome[list[str]]:
        """Model identifiers available to the configured credentials."""
        try:
            model_ids = await self.transport.list_model_ids()
        except Exception as e:
            return self._fail(self._classify(e), "List models")
        logger.debug("Fetched models", provider=self.name, count=len(model_ids))
        return Outcome.success(model_ids)

    def get_token_context_window(self, model_name: str) -> Outcome[int]:
        """Strict context window lookup; unknown models fail with MODEL_NOT_FOUND."""
        return resolve_context_window(model_name, LookupMode.STRICT, self.context_windows)

    async def get_context_window_size(self) -> Outcome[int]:
        """
        Context window reported by the backend for the configured model.

        Never fails: any transport failure, or a payload without a usable
        `context_length`, yields `default_context_size` with a warning.
        """
        model_name = self.config.model_name
        try:
            info = await self.transport.retrieve_model(model_name)
        except Exception as e:
            error = self._classify(e)
            logger.warning(
                "Failed to get context window size, using default",
                provider=self.name,
                model=model_name,
                error_kind=error.kind.value,
                error=error.message,
                default_context_size=self.default_context_size,
            )
            return Outcome.success(
                self.default_context_size,
                warnings=[f"Context window lookup failed ({error.kind.value}); using default"],
            )

        context_length = info.get("context_length")
        if context_length is None and isinstance(info.get("data"), list) and info["data"]:
            first = info["data"][0]
            if isinstance(first, dict):
                context_length = first.get("context_length")

        if isinstance(context_length, int) and context_length > 0:
            return Outcome.success(context_length)

        logger.debug(
            "Model payload has no context_length, using default",
            provider=self.name,
            model=model_name,
            default_context_size=self.default_context_size,
        )
        return Outcome.success(
            self.default_context_size,
            warnings=["Model payload has no context_length; using default"],
        )

    def count_tokens(self, text: str) -> int:
        """Exact count when the transport has a tokenizer, else ceil(len/4)."""
        tokens, _ = count_prompt_tokens(text, self.transport.count_tokens, self.name)
        return tokens

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"provider={self.name}, "
            f"model={self.config.model_name}, "
            f"context_window={self.default_context_size})"
        )
