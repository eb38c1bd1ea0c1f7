"""Unit tests for structured output parsing and schema validation."""

import pytest
from pydantic import BaseModel

from llm_resilience.llm.exceptions import ProviderError
from llm_resilience.llm.output_parser import (
    parse_json_object,
    parse_structured_output,
    validate_against_schema,
)
from llm_resilience.models.enums import ErrorKind
from llm_resilience.models.llm_models import OutputSchema


class Report(BaseModel):
    """Report summary."""

    title: str
    priority: int
    tags: list[str] = []


REPORT_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "priority": {"type": "integer", "minimum": 1, "maximum": 5},
    },
    "required": ["title", "priority"],
}


class TestParseJsonObject:
    def test_valid_object(self):
        assert parse_json_object('{"a": 1}', "openai") == {"a": 1}

    @pytest.mark.parametrize("content", ["", "   \n"])
    def test_empty_content(self, content):
        with pytest.raises(ProviderError) as exc_info:
            parse_json_object(content, "openai")
        assert exc_info.value.kind == ErrorKind.INVALID_RESPONSE

    def test_malformed_json_keeps_cause(self):
        with pytest.raises(ProviderError) as exc_info:
            parse_json_object('{"title": "cut off', "openai")
        assert exc_info.value.kind == ErrorKind.INVALID_RESPONSE
        assert exc_info.value.cause is not None

    def test_array_is_rejected(self):
        with pytest.raises(ProviderError) as exc_info:
            parse_json_object("[1, 2]", "openai")
        assert "list" in exc_info.value.message


class TestValidateAgainstSchema:
    def test_dict_schema_returns_dict(self):
        schema = OutputSchema(json_schema=REPORT_SCHEMA)
        data = {"title": "Q3", "priority": 2}
        assert validate_against_schema(data, schema, "openai") == data

    def test_schema_violations_listed(self):
        schema = OutputSchema(json_schema=REPORT_SCHEMA)

        with pytest.raises(ProviderError) as exc_info:
            validate_against_schema({"priority": 9}, schema, "openai")

        error = exc_info.value
        assert error.kind == ErrorKind.INVALID_RESPONSE
        assert "2 error(s)" in error.message
        assert "'title' is a required property" in error.message

    def test_model_schema_returns_instance(self):
        schema = OutputSchema.from_model(Report)
        result = validate_against_schema({"title": "Q3", "priority": 2}, schema, "openai")
        assert isinstance(result, Report)
        assert result.tags == []


class TestParseStructuredOutput:
    def test_end_to_end(self):
        schema = OutputSchema.from_model(Report)
        result = parse_structured_output(
            '{"title": "Quarterly report", "priority": 2, "tags": ["finance"]}', schema, "openai"
        )
        assert result == Report(title="Quarterly report", priority=2, tags=["finance"])

    def test_wrong_type_is_invalid_response(self):
        schema = OutputSchema.from_model(Report)
        with pytest.raises(ProviderError) as exc_info:
            parse_structured_output('{"title": "x", "priority": "high"}', schema, "openai")
        assert exc_info.value.kind == ErrorKind.INVALID_RESPONSE
