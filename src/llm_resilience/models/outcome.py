"""
Explicit success/failure value returned by every public provider operation.

Failures never cross a provider boundary as exceptions; callers inspect
`ok` or call `unwrap()` when they prefer exception flow.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from llm_resilience.llm.exceptions import ProviderError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a provider operation: a value or a classified ProviderError.
    
    Attributes:
        value: Result value (None on failure)
        error: ProviderError describing the failure (None on success)
        warnings: Non-fatal observations, e.g. an approximate token count
            or a default context window used for an unknown model
    """

    value: Optional[T] = None
    error: Optional["ProviderError"] = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.error is not None and self.value is not None:
            raise ValueError("Outcome cannot carry both a value and an error")

    @classmethod
    def success(cls, value: T, warnings: tuple[str, ...] | list[str] = ()) -> "Outcome[T]":
        return cls(value=value, warnings=tuple(warnings))

    @classmethod
    def failure(cls, error: "ProviderError") -> "Outcome[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the carried ProviderError."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
