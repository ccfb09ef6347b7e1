from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureClass(str, Enum):
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass(frozen=True)
class RetryPolicy:
    """How many times a Steam call is attempted and how long to wait in between.

    Backoff is linear in the 1-based attempt number, with a longer step for
    rate-limited responses than for other failures.
    """

    max_attempts: int = 3
    rate_limit_backoff: float = 1.0
    failure_backoff: float = 0.5

    @staticmethod
    def classify(status_code: int | None) -> FailureClass:
        """``None`` stands for a transport error with no response."""
        if status_code == 429:
            return FailureClass.RATE_LIMITED
        return FailureClass.FAILED

    def delay_for(self, attempt: int, failure: FailureClass) -> float:
        step = self.rate_limit_backoff if failure is FailureClass.RATE_LIMITED else self.failure_backoff
        return step * attempt

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_attempts
