"""
Bounded exponential backoff executor.

The executor is generic: it knows nothing about LLMs. The caller supplies
the operation, the policy and a classifier mapping a raised failure to a
ProviderError; the classifier's ErrorKind decides retry eligibility.

Usage:
    executor = RetryExecutor(classify=lambda e: classify_failure(e, "openai"))
    outcome = await executor.execute(lambda: transport.invoke(payload, options), policy)
"""

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, Generic, Optional, TypeVar

import structlog

from llm_resilience.models.llm_models import RetryPolicy
from llm_resilience.models.outcome import Outcome
from llm_resilience.monitoring.metrics import retries_total

if TYPE_CHECKING:
    from llm_resilience.llm.exceptions import ProviderError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
Classifier = Callable[[Exception], "ProviderError"]
Sleep = Callable[[float], Awaitable[None]]


def compute_backoff_delay(retry_number: int, policy: RetryPolicy) -> float:
    """
    Delay in milliseconds before the given retry.

    Args:
        retry_number: 1 for the first retry, 2 for the second, ...
        policy: Retry policy

    Returns:
        min(max_delay, initial_delay * factor ** (retry_number - 1))
    """
    if retry_number < 1:
        raise ValueError("retry_number must be >= 1")
    delay = policy.initial_delay_ms * policy.factor ** (retry_number - 1)
    return min(policy.max_delay_ms, delay)


class RetryExecutor(Generic[T]):
    """
    Runs a fallible async operation with bounded exponential backoff.

    Every failure is classified exactly once. Retryable kinds
    (RATE_LIMIT_ERROR, API_ERROR) are retried until the policy's
    max_attempts is reached; anything else is returned immediately.
    Retry state lives in `execute` locals, so one executor can serve
    concurrent calls.

    Attributes:
        classify: Maps a raised failure to a ProviderError
        sleep: Awaitable sleep taking seconds (asyncio.sleep by default)
        provider_name: Label for logs and metrics
    """

    def __init__(
        self,
        classify: Classifier,
        sleep: Optional[Sleep] = None,
        provider_name: str = "unknown",
    ):
        self.classify = classify
        self.sleep = sleep or asyncio.sleep
        self.provider_name = provider_name

    async def execute(self, operation: Operation[T], policy: RetryPolicy) -> Outcome[T]:
        """
        Run `operation` until it succeeds, fails permanently, or attempts run out.

        Args:
            operation: Zero-argument coroutine factory; called once per attempt
            policy: Attempts and backoff parameters

        Returns:
            Success with the operation's value, or the last classified failure
        """
        last_error: Optional["ProviderError"] = None

        for attempt in range(1, policy.max_attempts + 1):
            try:
                value = await operation()
            except Exception as e:
                last_error = self.classify(e)
            else:
                if attempt > 1:
                    logger.info(
                        "Operation succeeded after retry",
                        provider=self.provider_name,
                        attempt=attempt,
                    )
                return Outcome.success(value)

            if not last_error.retryable:
                logger.warning(
                    "Non-retryable failure",
                    provider=self.provider_name,
                    attempt=attempt,
                    error_kind=last_error.kind.value,
                    status_code=last_error.status_code,
                    error=last_error.message,
                )
                return Outcome.failure(last_error)

            if attempt == policy.max_attempts:
                break

            delay_ms = compute_backoff_delay(attempt, policy)
            logger.warning(
                "Retryable failure, backing off",
                provider=self.provider_name,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay_ms=delay_ms,
                error_kind=last_error.kind.value,
                status_code=last_error.status_code,
            )
            retries_total.labels(
                provider=self.provider_name, error_kind=last_error.kind.value
            ).inc()
            await self.sleep(delay_ms / 1000.0)

        logger.error(
            "Retry attempts exhausted",
            provider=self.provider_name,
            attempts=policy.max_attempts,
            error_kind=last_error.kind.value if last_error else None,
        )
        return Outcome.failure(last_error)  # type: ignore[arg-type]
