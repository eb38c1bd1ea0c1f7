"""Unit tests for provider configuration and request models."""

import pytest
from pydantic import BaseModel, Field, ValidationError

from llm_resilience.models.llm_models import (
    CompletionOverrides,
    OutputSchema,
    ProviderConfig,
    RetryPolicy,
    RuntimeOptions,
)


class Invoice(BaseModel):
    """Invoice header fields."""

    number: str
    total: float = Field(..., ge=0)


class TestProviderConfig:

    def test_from_settings(self, test_settings):
        config = ProviderConfig.from_settings(test_settings)

        assert config.provider_name == "openai"
        assert config.model_name == "gpt-4"
        assert config.api_key == "sk-test"
        assert config.default_max_output_tokens == 2048
        assert config.retry == RetryPolicy(
            max_attempts=3, initial_delay_ms=1000, max_delay_ms=30000, factor=2.0
        )

    def test_api_key_hidden_from_repr(self, provider_config):
        assert "sk-test" not in repr(provider_config)

    def test_frozen(self, provider_config):
        with pytest.raises(ValidationError):
            provider_config.temperature = 0.9

    def test_retry_policy_requires_an_attempt(self):
        with pytest.raises(ValidationError):
            RetryPolicy(max_attempts=0)


class TestOverrides:

    def test_all_unset_by_default(self):
        overrides = CompletionOverrides()
        assert overrides.model_dump(exclude_none=True) == {}

    def test_temperature_range(self):
        with pytest.raises(ValidationError):
            CompletionOverrides(temperature=2.5)

    def test_empty_stop_sequences_become_none(self):
        assert RuntimeOptions(stop=[]).stop is None


class TestOutputSchema:

    def test_from_model(self):
        schema = OutputSchema.from_model(Invoice)

        assert schema.output_model is Invoice
        assert schema.description == "Invoice header fields."
        # The docstring is sent as the schema description, never as the name
        assert schema.extraction_name == "extract_Invoice"
        assert set(schema.json_schema["required"]) == {"number", "total"}

    @pytest.mark.parametrize(
        "kwargs, expected",
        [
            ({"name": "invoice_header"}, "invoice_header"),
            ({}, "extract_Invoice"),
        ],
    )
    def test_extraction_name_from_model(self, kwargs, expected):
        assert OutputSchema.from_model(Invoice, **kwargs).extraction_name == expected

    def test_extraction_name_default(self):
        schema = OutputSchema(json_schema={"type": "object"})
        assert schema.extraction_name == "extract_data"
