"""
Context window resolution per model.

Tables are ordered and matched by substring, first hit wins, so more
specific names (gpt-4-turbo, gpt-4-32k) must precede their family name
(gpt-4). Two lookup modes are exposed on purpose:

- PERMISSIVE: used at provider construction, always yields a usable number
- STRICT: used when a caller explicitly asks, fails for unknown models
"""

from dataclasses import dataclass

import structlog

from llm_resilience.llm.exceptions import ModelNotFoundError
from llm_resilience.models.enums import LookupMode
from llm_resilience.models.outcome import Outcome
from llm_resilience.monitoring.metrics import context_window_fallback_total


logger = structlog.get_logger(__name__)

DEFAULT_CONTEXT_WINDOW = 4096


@dataclass(frozen=True)
class ContextWindowTable:
    """
    Read-only mapping of model name matchers to token capacity.

    Attributes:
        provider_name: Provider family the table describes
        entries: Ordered (substring, capacity) pairs, most specific first
        default_capacity: Capacity assumed for unmatched names in permissive mode
    """

    provider_name: str
    entries: tuple[tuple[str, int], ...]
    default_capacity: int = DEFAULT_CONTEXT_WINDOW

    def lookup(self, model_name: str) -> int | None:
        """Return the capacity of the first matching entry, or None."""
        for matcher, capacity in self.entries:
            if matcher in model_name:
                return capacity
        return None


# https://platform.openai.com/docs/models
OPENAI_CONTEXT_WINDOWS = ContextWindowTable(
    provider_name="openai",
    entries=(
        ("gpt-4o-mini", 128000),
        ("gpt-4o", 128000),
        ("gpt-4-turbo", 128000),
        ("gpt-4-32k", 32768),
        ("gpt-4", 8192),
        ("gpt-3.5-turbo-16k", 16385),
        ("gpt-3.5-turbo-0125", 16385),
        ("gpt-3.5-turbo-1106", 16385),
        ("gpt-3.5-turbo-instruct", 4096),
        ("gpt-3.5-turbo", 4096),
    ),
)


def resolve_context_window(
    model_name: str,
    mode: LookupMode,
    table: ContextWindowTable = OPENAI_CONTEXT_WINDOWS,
) -> Outcome[int]:
    """
    Resolve the context window size for a model.

    Args:
        model_name: Model identifier (e.g., "gpt-4-turbo-preview")
        mode: PERMISSIVE falls back to the table default with a warning,
            STRICT fails with MODEL_NOT_FOUND
        table: Context window table of the provider family

    Returns:
        Outcome with the capacity in tokens
    """
    capacity = table.lookup(model_name)
    if capacity is not None:
        logger.debug(
            "Resolved context window",
            model=model_name,
            context_window=capacity,
            mode=mode.value,
        )
        return Outcome.success(capacity)

    if mode is LookupMode.STRICT:
        error = ModelNotFoundError(
            f"Model '{model_name}' not found in {table.provider_name} context window mapping",
            table.provider_name,
        )
        logger.error(
            "Context window lookup failed",
            model=model_name,
            provider=table.provider_name,
            error_kind=error.kind.value,
        )
        return Outcome.failure(error)

    warning = (
        f"Using fallback context size ({table.default_capacity}) "
        f"for unknown model: {model_name}"
    )
    logger.warning(
        "Unknown model for context size, using default",
        model=model_name,
        provider=table.provider_name,
        default_context_window=table.default_capacity,
    )
    context_window_fallback_total.labels(model=model_name).inc()
    return Outcome.success(table.default_capacity, warnings=[warning])
