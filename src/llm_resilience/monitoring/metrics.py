"""Custom Prometheus metrics for the provider resilience layer.

These metrics are registered on the default prometheus_client registry.
Alert rules should be configured for:
- provider_errors_total (authentication or validation spikes)
- retries_total (sustained rate limiting or backend instability)
- context_window_fallback_total (configured model missing from the table)
"""

from prometheus_client import Counter, Histogram

# === Error Metrics ===

provider_errors_total = Counter(
    "provider_errors_total",
    "Final provider failures by provider and error kind",
    ["provider", "error_kind"],
)
"""
Failures surfaced to callers after classification and retries.

Labels:
- provider: Provider name (e.g., openai)
- error_kind: ErrorKind value (AUTHENTICATION_ERROR, RATE_LIMIT_ERROR, ...)

Alert thresholds:
- WARN: any AUTHENTICATION_ERROR (credentials rotated or revoked)
- CRITICAL: RATE_LIMIT_ERROR rate > 5% of total requests
"""

# === Retry Metrics ===

retries_total = Counter(
    "retries_total",
    "Retry attempts scheduled by provider and error kind",
    ["provider", "error_kind"],
)
"""
Retries scheduled by the executor.

Labels:
- provider: Provider name
- error_kind: Classified kind of the failure that triggered the retry
  (only RATE_LIMIT_ERROR and API_ERROR are ever retried)
"""

# === Budget Metrics ===

token_count_fallback_total = Counter(
    "token_count_fallback_total",
    "Prompt token counts computed with the chars/4 approximation",
    ["provider"],
)

context_window_fallback_total = Counter(
    "context_window_fallback_total",
    "Permissive context window lookups that fell back to the default capacity",
    ["model"],
)
"""
A non-zero value means budget checks for that model run against the default
capacity, which is usually smaller than the real window.
"""

# === LLM Performance Metrics ===

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "LLM invocation latency in seconds",
    ["model", "success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)
"""
Per-invocation latency (one sample per attempt, retries included).

Labels:
- model: Model name (e.g., gpt-4-turbo)
- success: true / false
"""

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)
"""
Token consumption counter.

Labels:
- model: Model name
- token_type: prompt (input tokens), completion (output tokens)
"""
