"""Exponential backoff state for task status polling."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class PollPolicy:
    """Starting point of the poll loop."""

    initial_delay_seconds: float = 3.0
    max_retries: int = 3


@dataclass(frozen=True, slots=True)
class BackoffState:
    """Delay before the next status request and failures still tolerated.

    Owned by a single poll loop; every step returns a new value.
    """

    delay_seconds: float
    retries_remaining: int

    @classmethod
    def initial(cls, policy: PollPolicy) -> BackoffState:
        return cls(
            delay_seconds=policy.initial_delay_seconds,
            retries_remaining=policy.max_retries,
        )

    @property
    def exhausted(self) -> bool:
        return self.retries_remaining <= 0

    def after_failure(self) -> BackoffState:
        return replace(
            self,
            delay_seconds=self.delay_seconds * 2,
            retries_remaining=self.retries_remaining - 1,
        )
