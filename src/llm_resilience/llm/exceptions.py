"""
Exceptions and failure signals for the provider layer.

Transports raise TransportError carrying a normalized TransportErrorSignal;
the classifier turns that signal into a ProviderError, which is the only
error type that leaves the layer (inside an Outcome).
"""

from dataclasses import dataclass
from typing import Optional

from llm_resilience.models.enums import ErrorKind


class LLMClientError(Exception):
    """
    Base exception for all provider layer errors.

    All layer-specific exceptions inherit from this to allow catching
    any of them with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


@dataclass(frozen=True)
class TransportErrorSignal:
    """
    Normalized view of a raw remote failure.

    Produced by the transport adapter so the classifier never has to probe
    arbitrary attributes of third-party exceptions.

    Attributes:
        message: Human-readable failure description
        status_code: HTTP status, when a response was received
        provider_error_code: `error.code` from the provider error body
        provider_error_type: `error.type` from the provider error body
        response_received: False for connection-level failures (DNS,
            refused connection, timeout before any response)
        cause: The original exception
    """

    message: str
    status_code: Optional[int] = None
    provider_error_code: Optional[str] = None
    provider_error_type: Optional[str] = None
    response_received: bool = True
    cause: Optional[BaseException] = None


class TransportError(LLMClientError):
    """
    Raised by a transport when the remote call fails.

    Always carries a TransportErrorSignal; never surfaced to callers
    directly, only after classification.
    """
    def __init__(self, signal: TransportErrorSignal):
        super().__init__(
            signal.message,
            details={
                "status_code": signal.status_code,
                "provider_error_code": signal.provider_error_code,
                "provider_error_type": signal.provider_error_type,
                "response_received": signal.response_received,
            },
        )
        self.signal = signal


class ProviderError(LLMClientError):
    """
    Classified provider failure.

    Carried as the error of a failed Outcome; raised only by
    `Outcome.unwrap()` or by transports reporting malformed payloads
    (INVALID_RESPONSE, NO_MODELS_FOUND), which need no classification.
    """
    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        provider_name: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            details={
                "kind": kind.value,
                "provider": provider_name,
                "status_code": status_code,
            },
        )
        self.kind = kind
        self.provider_name = provider_name
        self.status_code = status_code
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"kind={self.kind.value}, "
            f"provider={self.provider_name}, "
            f"status_code={self.status_code}, "
            f"message={self.message!r})"
        )


class ModelNotFoundError(ProviderError):
    """Strict context window lookup for a model missing from the table."""
    def __init__(self, message: str, provider_name: str, cause: Optional[BaseException] = None):
        super().__init__(message, ErrorKind.MODEL_NOT_FOUND, provider_name, cause=cause)
