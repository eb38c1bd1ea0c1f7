"""
Structured output parsing.

Two hard-fail stages, run on the message content of a successful response:
1. JSON parse: content must be a JSON object
2. Schema: object must satisfy the caller's JSON Schema (and pydantic
   model, when one was given)

Either failure is an INVALID_RESPONSE ProviderError; neither is retried.
"""

import json
from typing import Any

import structlog
from jsonschema import Draft7Validator
from pydantic import ValidationError as PydanticValidationError

from llm_resilience.llm.exceptions import ProviderError
from llm_resilience.models.enums import ErrorKind
from llm_resilience.models.llm_models import OutputSchema

logger = structlog.get_logger(__name__)


def parse_json_object(content: str, provider_name: str) -> dict:
    """
    Parse message content into a dict.

    Raises:
        ProviderError: INVALID_RESPONSE for empty, malformed or non-object JSON
    """
    if not content or not content.strip():
        raise ProviderError(
            "Structured response content is empty or whitespace-only",
            ErrorKind.INVALID_RESPONSE,
            provider_name,
        )

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise ProviderError(
            f"Failed to parse structured response as JSON: {e.msg} at line {e.lineno} col {e.colno}",
            ErrorKind.INVALID_RESPONSE,
            provider_name,
            cause=e,
        ) from e

    if not isinstance(parsed, dict):
        raise ProviderError(
            f"Structured response is not a JSON object (got {type(parsed).__name__})",
            ErrorKind.INVALID_RESPONSE,
            provider_name,
        )
    return parsed


def validate_against_schema(data: dict, schema: OutputSchema, provider_name: str) -> Any:
    """
    Validate parsed data against the caller's schema.

    Returns:
        The pydantic model instance when `schema.output_model` is set,
        otherwise the validated dict

    Raises:
        ProviderError: INVALID_RESPONSE listing up to 10 violations
    """
    validator = Draft7Validator(schema.json_schema)
    errors = list(validator.iter_errors(data))
    if errors:
        error_messages = []
        for error in errors[:10]:
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            error_messages.append(f"{path}: {error.message}")
        logger.warning(
            "Structured response violates schema",
            provider=provider_name,
            schema_name=schema.extraction_name,
            errors=error_messages,
        )
        raise ProviderError(
            f"Structured response failed JSON Schema validation with {len(errors)} error(s): "
            + "; ".join(error_messages),
            ErrorKind.INVALID_RESPONSE,
            provider_name,
        )

    if schema.output_model is None:
        return data

    try:
        return schema.output_model.model_validate(data)
    except PydanticValidationError as e:
        raise ProviderError(
            f"Structured response does not match {schema.output_model.__name__}: {e.error_count()} error(s)",
            ErrorKind.INVALID_RESPONSE,
            provider_name,
            cause=e,
        ) from e


def parse_structured_output(content: str, schema: OutputSchema, provider_name: str) -> Any:
    """Parse and validate structured output in one step."""
    data = parse_json_object(content, provider_name)
    return validate_against_schema(data, schema, provider_name)
