"""
Token budget validation before dispatch.

A prompt fits when its token count does not exceed the context window
minus the tokens reserved for the completion. The check is local, so a
prompt that cannot fit fails fast without any network call.
"""

from typing import Callable, Optional

import structlog

from llm_resilience.llm.exceptions import ProviderError
from llm_resilience.llm.text_utils import count_tokens_approximate
from llm_resilience.models.enums import ErrorKind
from llm_resilience.models.outcome import Outcome
from llm_resilience.monitoring.metrics import token_count_fallback_total


logger = structlog.get_logger(__name__)

DEFAULT_OUTPUT_RESERVE = 2048

# Exact tokenizer; returning None means no tokenizer for this model
TokenCounter = Callable[[str], Optional[int]]


def resolve_max_output_tokens(
    override: Optional[int],
    provider_default: Optional[int],
) -> int:
    """Per-call override, else provider default, else DEFAULT_OUTPUT_RESERVE."""
    if override is not None:
        return override
    if provider_default is not None:
        return provider_default
    return DEFAULT_OUTPUT_RESERVE


def count_prompt_tokens(
    text: str,
    counter: Optional[TokenCounter] = None,
    provider_name: str = "unknown",
) -> tuple[int, bool]:
    """
    Count tokens with the exact counter when possible.

    Returns:
        Tuple of (token count, approximate) where approximate is True when
        the chars/4 fallback was used
    """
    if counter is not None:
        try:
            exact = counter(text)
        except Exception as e:
            logger.warning(
                "Token counter failed, falling back to approximation",
                provider=provider_name,
                error=str(e),
                error_type=type(e).__name__,
            )
        else:
            if exact is not None:
                return exact, False

    token_count_fallback_total.labels(provider=provider_name).inc()
    approximate = count_tokens_approximate(text)
    logger.info(
        "Using approximate token count",
        provider=provider_name,
        approximate_tokens=approximate,
        text_length=len(text),
    )
    return approximate, True


def validate_token_budget(
    prompt_text: str,
    effective_max_output_tokens: int,
    context_window: int,
    counter: Optional[TokenCounter] = None,
    provider_name: str = "unknown",
    model_name: str = "unknown",
) -> Outcome[None]:
    """
    Check that a prompt fits the model's input budget.

    Args:
        prompt_text: Prompt rendered as text
        effective_max_output_tokens: Tokens reserved for the completion
        context_window: Model context window in tokens
        counter: Exact token counter, if the backend exposes one
        provider_name: Provider name for errors and metrics
        model_name: Model name for diagnostics

    Returns:
        Success (possibly with an approximate-count warning), or a
        VALIDATION_ERROR failure naming both the counted and the available
        token numbers
    """
    available_for_input = context_window - effective_max_output_tokens
    input_tokens, approximate = count_prompt_tokens(prompt_text, counter, provider_name)

    logger.debug(
        "Token budget check",
        provider=provider_name,
        model=model_name,
        input_tokens=input_tokens,
        available_for_input=available_for_input,
        context_window=context_window,
        reserved_for_output=effective_max_output_tokens,
        approximate=approximate,
    )

    if input_tokens > available_for_input:
        message = (
            f"Input prompt ({input_tokens} tokens) exceeds model's available input "
            f"token limit ({available_for_input} tokens). Model: {model_name}, "
            f"Total Context: {context_window}, Reserved for Output: {effective_max_output_tokens}."
        )
        logger.warning(
            "Prompt exceeds token budget",
            provider=provider_name,
            model=model_name,
            input_tokens=input_tokens,
            available_for_input=available_for_input,
        )
        return Outcome.failure(
            ProviderError(message, ErrorKind.VALIDATION_ERROR, provider_name)
        )

    warnings = []
    if approximate:
        warnings.append(
            f"Token count approximated as ceil(len/4) = {input_tokens}"
        )
    return Outcome.success(None, warnings=warnings)
