"""
Provider-facing data models for the request/response cycle.

Everything here is immutable: a ProviderConfig is built once per provider
instance and shared by concurrent calls, and CallOptions are rebuilt per call
instead of binding state onto a reusable client object.
"""

from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from llm_resilience.config import Settings


# Chat-style structured input: [{"role": "system", "content": "..."}, ...]
PromptPayload = Union[str, list[Dict[str, Any]]]


class RetryPolicy(BaseModel):
    """Bounded exponential backoff policy. Delays are in milliseconds."""
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1, description="Total attempts including the first")
    initial_delay_ms: float = Field(default=1000, ge=0, description="Delay before the first retry")
    max_delay_ms: float = Field(default=30000, ge=0, description="Upper bound for any single delay")
    factor: float = Field(default=2.0, ge=1.0, description="Multiplier applied per retry")


class ProviderConfig(BaseModel):
    """
    Immutable per-provider configuration.

    Created once at provider construction and never mutated afterwards,
    so it is safe to read from concurrent calls without locking.
    """
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider_name: str = Field(..., description="Provider identifier used in errors and metrics")
    api_key: str = Field(default="", repr=False)
    model_name: str = Field(..., description="Model identifier sent to the backend")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    default_max_output_tokens: Optional[int] = Field(
        default=None,
        ge=1,
        description="Output tokens reserved per call when no override is given"
    )
    retry: RetryPolicy = Field(default_factory=RetryPolicy)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        """Build the provider config from environment-backed settings."""
        return cls(
            provider_name=settings.LLM_PROVIDER,
            api_key=settings.OPENAI_API_KEY,
            model_name=settings.OPENAI_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            default_max_output_tokens=settings.LLM_MAX_TOKENS,
            retry=RetryPolicy(
                max_attempts=settings.RETRY_MAX_ATTEMPTS,
                initial_delay_ms=settings.RETRY_INITIAL_DELAY_MS,
                max_delay_ms=settings.RETRY_MAX_DELAY_MS,
                factor=settings.RETRY_FACTOR,
            ),
        )


class CompletionOverrides(BaseModel):
    """Per-call overrides. Unset fields fall back to the provider config."""
    model_config = ConfigDict(frozen=True)

    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_output_tokens: Optional[int] = Field(default=None, ge=1)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    presence_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    stop_sequences: Optional[list[str]] = Field(default=None)


class CompletionRequest(BaseModel):
    """A prompt (plain text or chat messages) plus optional overrides."""
    model_config = ConfigDict(frozen=True)

    prompt_payload: PromptPayload = Field(..., description="Text prompt or list of chat messages")
    overrides: Optional[CompletionOverrides] = Field(default=None)


class OutputSchema(BaseModel):
    """
    Expected shape of a structured completion.

    The JSON Schema is forwarded to the backend untouched; the only part
    this layer interprets is the extraction name. When `output_model` is
    set, the parsed result is additionally validated into that model.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    json_schema: Dict[str, Any] = Field(..., description="JSON Schema of the expected result")
    name: Optional[str] = Field(default=None, description="Human-readable extraction name")
    description: Optional[str] = Field(default=None)
    output_model: Optional[type[BaseModel]] = Field(default=None)

    @classmethod
    def from_model(cls, model: type[BaseModel], name: Optional[str] = None) -> "OutputSchema":
        """Derive the schema from a pydantic model class."""
        json_schema = model.model_json_schema()
        return cls(
            json_schema=json_schema,
            name=name,
            description=json_schema.get("description"),
            output_model=model,
        )

    @property
    def extraction_name(self) -> str:
        if self.name:
            return self.name
        if self.output_model is not None:
            return f"extract_{self.output_model.__name__}"
        return "extract_data"


class BoundParameters(BaseModel):
    """Sampling hyperparameters attached to the model call itself."""
    model_config = ConfigDict(frozen=True)

    model: str
    temperature: float
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None


class RuntimeOptions(BaseModel):
    """Options passed with a single invocation only."""
    model_config = ConfigDict(frozen=True)

    stop: Optional[list[str]] = None

    @field_validator("stop")
    @classmethod
    def empty_stop_is_none(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return value or None


class CallOptions(BaseModel):
    """Complete options for one backend invocation."""
    model_config = ConfigDict(frozen=True)

    bound: BoundParameters
    runtime: RuntimeOptions = Field(default_factory=RuntimeOptions)
