"""
Enumerations for the provider resilience layer.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """
    Canonical classification of every failure surfaced by a provider.
    
    Only RATE_LIMIT_ERROR and API_ERROR are considered transient and
    retried by the executor; every other kind propagates immediately.
    """
    
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    NO_MODELS_FOUND = "NO_MODELS_FOUND"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    
    @property
    def retryable(self) -> bool:
        """True for kinds expected to succeed on a later attempt."""
        return self in RETRYABLE_KINDS


RETRYABLE_KINDS = frozenset({ErrorKind.RATE_LIMIT_ERROR, ErrorKind.API_ERROR})


class LookupMode(str, Enum):
    """
    Context window lookup behaviour for unknown model names.
    
    PERMISSIVE returns the table default and warns (construction time).
    STRICT fails with MODEL_NOT_FOUND (explicit caller queries).
    """
    
    PERMISSIVE = "permissive"
    STRICT = "strict"
