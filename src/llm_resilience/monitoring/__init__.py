"""Monitoring and metrics instrumentation for the provider resilience layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from llm_resilience.monitoring.metrics import (
    context_window_fallback_total,
    llm_latency_seconds,
    llm_tokens_total,
    provider_errors_total,
    retries_total,
    token_count_fallback_total,
)

__all__ = [
    "provider_errors_total",
    "retries_total",
    "token_count_fallback_total",
    "context_window_fallback_total",
    "llm_latency_seconds",
    "llm_tokens_total",
]
