"""Per-call option building.

Hyperparameters bound to the model call and options passed with a single
invocation are kept in separate groups because transports scope them
differently. Both are plain immutable values built fresh for every call.
"""

from typing import Optional

from llm_resilience.models.llm_models import (
    BoundParameters,
    CallOptions,
    CompletionOverrides,
    ProviderConfig,
    RuntimeOptions,
)


def build_call_options(
    config: ProviderConfig,
    overrides: Optional[CompletionOverrides] = None,
) -> CallOptions:
    """Merge provider defaults with per-call overrides."""
    overrides = overrides or CompletionOverrides()

    bound = BoundParameters(
        model=config.model_name,
        temperature=(
            overrides.temperature if overrides.temperature is not None else config.temperature
        ),
        max_tokens=(
            overrides.max_output_tokens
            if overrides.max_output_tokens is not None
            else config.default_max_output_tokens
        ),
        top_p=overrides.top_p,
        presence_penalty=overrides.presence_penalty,
        frequency_penalty=overrides.frequency_penalty,
    )
    runtime = RuntimeOptions(stop=overrides.stop_sequences)
    return CallOptions(bound=bound, runtime=runtime)
