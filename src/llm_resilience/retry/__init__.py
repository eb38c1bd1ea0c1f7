"""
Retry execution for transient provider failures.

Components:
- RetryExecutor: Generic bounded exponential backoff around an async operation
- compute_backoff_delay: Delay before the n-th retry under a RetryPolicy
"""

from llm_resilience.retry.executor import RetryExecutor, compute_backoff_delay

__all__ = [
    "RetryExecutor",
    "compute_backoff_delay",
]
