"""
Remote failure classification.

`classify` is a pure function over a TransportErrorSignal; rules are
evaluated in order and the first match wins. Order matters: a 500 that
carries `context_length_exceeded` is a VALIDATION_ERROR, not an API_ERROR.
"""

import structlog

from llm_resilience.llm.exceptions import (
    ProviderError,
    TransportError,
    TransportErrorSignal,
)
from llm_resilience.models.enums import ErrorKind


logger = structlog.get_logger(__name__)

RATE_LIMIT_CODES = frozenset({"rate_limit_exceeded", "insufficient_quota"})
CONTEXT_LENGTH_CODE = "context_length_exceeded"
INVALID_REQUEST_TYPE = "invalid_request_error"


def classify(signal: TransportErrorSignal) -> ErrorKind:
    """
    Map a failure signal to its canonical ErrorKind.

    Precedence:
        1. 401 -> AUTHENTICATION_ERROR
        2. 429 or rate limit/quota code -> RATE_LIMIT_ERROR
        3. invalid_request_error type or context length code/message -> VALIDATION_ERROR
        4. 400 -> VALIDATION_ERROR
        5. >= 500 -> API_ERROR
        6. no response received -> NETWORK_ERROR
        7. anything else -> UNKNOWN_ERROR
    """
    status = signal.status_code

    if status == 401:
        return ErrorKind.AUTHENTICATION_ERROR
    if status == 429 or signal.provider_error_code in RATE_LIMIT_CODES:
        return ErrorKind.RATE_LIMIT_ERROR
    if (
        signal.provider_error_type == INVALID_REQUEST_TYPE
        or signal.provider_error_code == CONTEXT_LENGTH_CODE
        or CONTEXT_LENGTH_CODE in (signal.message or "").lower()
    ):
        return ErrorKind.VALIDATION_ERROR
    if status == 400:
        return ErrorKind.VALIDATION_ERROR
    if status is not None and status >= 500:
        return ErrorKind.API_ERROR
    if not signal.response_received:
        return ErrorKind.NETWORK_ERROR
    return ErrorKind.UNKNOWN_ERROR


def signal_from_exception(exc: BaseException) -> TransportErrorSignal:
    """Signal for a failure that did not come from a transport adapter."""
    return TransportErrorSignal(
        message=str(exc) or type(exc).__name__,
        cause=exc,
    )


def classify_failure(exc: BaseException, provider_name: str) -> ProviderError:
    """
    Turn any failure into a ProviderError.

    ProviderErrors pass through unchanged. TransportErrors are classified
    from their signal; anything else is classified from a signal built
    around it. The original failure is kept as `cause`.
    """
    if isinstance(exc, ProviderError):
        return exc

    signal = exc.signal if isinstance(exc, TransportError) else signal_from_exception(exc)
    kind = classify(signal)

    detail = []
    if signal.provider_error_type:
        detail.append(f"Type: {signal.provider_error_type}")
    if signal.provider_error_code:
        detail.append(f"Code: {signal.provider_error_code}")
    message = f"{provider_name} API error: {signal.message}"
    if detail:
        message = f"{message} ({', '.join(detail)})"

    logger.debug(
        "Classified provider failure",
        provider=provider_name,
        error_kind=kind.value,
        status_code=signal.status_code,
        provider_error_code=signal.provider_error_code,
        provider_error_type=signal.provider_error_type,
        response_received=signal.response_received,
    )

    return ProviderError(
        message,
        kind,
        provider_name,
        status_code=signal.status_code,
        cause=signal.cause if signal.cause is not None else exc,
    )
