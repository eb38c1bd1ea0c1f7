"""
Unit tests for failure classification.

Covers rule precedence, cause retention and ProviderError pass-through.
"""

import pytest

from llm_resilience.llm.classifier import classify, classify_failure
from llm_resilience.llm.exceptions import (
    ProviderError,
    TransportError,
    TransportErrorSignal,
)
from llm_resilience.models.enums import ErrorKind


def signal(**kwargs) -> TransportErrorSignal:
    kwargs.setdefault("message", "failure")
    return TransportErrorSignal(**kwargs)


class TestClassifyPrecedence:
    """Rules are evaluated in order, first match wins."""

    def test_401_is_authentication_error(self):
        assert classify(signal(status_code=401)) == ErrorKind.AUTHENTICATION_ERROR

    def test_401_wins_over_rate_limit_code(self):
        s = signal(status_code=401, provider_error_code="rate_limit_exceeded")
        assert classify(s) == ErrorKind.AUTHENTICATION_ERROR

    def test_429_is_rate_limit(self):
        assert classify(signal(status_code=429)) == ErrorKind.RATE_LIMIT_ERROR

    def test_429_with_insufficient_quota(self):
        s = signal(status_code=429, provider_error_code="insufficient_quota")
        assert classify(s) == ErrorKind.RATE_LIMIT_ERROR

    @pytest.mark.parametrize("code", ["rate_limit_exceeded", "insufficient_quota"])
    def test_rate_limit_code_without_status(self, code):
        assert classify(signal(provider_error_code=code)) == ErrorKind.RATE_LIMIT_ERROR

    def test_rate_limit_code_wins_over_server_error(self):
        s = signal(status_code=503, provider_error_code="rate_limit_exceeded")
        assert classify(s) == ErrorKind.RATE_LIMIT_ERROR

    def test_500_with_context_length_code_is_validation(self):
        """Rule 3 precedes rule 5."""
        s = signal(status_code=500, provider_error_code="context_length_exceeded")
        assert classify(s) == ErrorKind.VALIDATION_ERROR

    def test_invalid_request_type_is_validation(self):
        s = signal(status_code=404, provider_error_type="invalid_request_error")
        assert classify(s) == ErrorKind.VALIDATION_ERROR

    def test_context_length_in_message_case_insensitive(self):
        s = signal(status_code=502, message="Upstream said CONTEXT_LENGTH_EXCEEDED")
        assert classify(s) == ErrorKind.VALIDATION_ERROR

    def test_400_is_validation(self):
        assert classify(signal(status_code=400)) == ErrorKind.VALIDATION_ERROR

    @pytest.mark.parametrize("status", [500, 502, 503, 504, 529])
    def test_5xx_is_api_error(self, status):
        assert classify(signal(status_code=status)) == ErrorKind.API_ERROR

    def test_no_response_is_network_error(self):
        s = signal(response_received=False)
        assert classify(s) == ErrorKind.NETWORK_ERROR

    def test_unrecognized_status_is_unknown(self):
        assert classify(signal(status_code=404)) == ErrorKind.UNKNOWN_ERROR

    def test_response_without_status_is_unknown(self):
        assert classify(signal()) == ErrorKind.UNKNOWN_ERROR

    def test_classification_is_idempotent(self):
        s = signal(status_code=429, provider_error_code="insufficient_quota")
        assert classify(s) == classify(s)


class TestClassifyFailure:
    """Turning raised failures into ProviderErrors."""

    def test_provider_error_passes_through_unchanged(self):
        original = ProviderError("bad payload", ErrorKind.INVALID_RESPONSE, "openai")
        assert classify_failure(original, "openai") is original

    def test_transport_error_keeps_cause_and_status(self):
        cause = RuntimeError("HTTP 429")
        exc = TransportError(
            signal(
                status_code=429,
                provider_error_code="rate_limit_exceeded",
                message="Rate limit reached",
                cause=cause,
            )
        )

        error = classify_failure(exc, "openai")

        assert error.kind == ErrorKind.RATE_LIMIT_ERROR
        assert error.status_code == 429
        assert error.provider_name == "openai"
        assert error.cause is cause
        assert "Rate limit reached" in error.message
        assert "rate_limit_exceeded" in error.message

    def test_transport_error_without_cause_uses_exception(self):
        exc = TransportError(signal(status_code=500))
        assert classify_failure(exc, "openai").cause is exc

    def test_arbitrary_exception_is_unknown(self):
        exc = ValueError("boom")

        error = classify_failure(exc, "openai")

        assert error.kind == ErrorKind.UNKNOWN_ERROR
        assert error.cause is exc
        assert error.status_code is None
        assert not error.retryable

    def test_arbitrary_exception_mentioning_context_length(self):
        error = classify_failure(RuntimeError("context_length_exceeded"), "openai")
        assert error.kind == ErrorKind.VALIDATION_ERROR
