"""Exponential backoff for ledger submissions."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@dataclasses.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded retry envelope for one contributor sync.

    The delay before attempt ``n + 1`` is
    ``min(initial_delay_s * multiplier ** (n - 1) + jitter, max_delay_s)``
    where ``jitter`` is drawn uniformly from ``[0, jitter_s)``.
    """

    max_attempts: int = 3
    initial_delay_s: float = 1.0
    multiplier: float = 2.0
    max_delay_s: float = 10.0
    jitter_s: float = 0.2

    def __post_init__(self) -> None:
        """Reject policies that would never attempt a submission."""
        if self.max_attempts < 1:
            msg = f"max_attempts must be positive, got: {self.max_attempts}"
            raise ValueError(msg)

    def delay_for(self, attempt: int, rng: cabc.Callable[[], float]) -> float:
        """Return the backoff in seconds after failed attempt ``attempt``."""
        base = self.initial_delay_s * self.multiplier ** (attempt - 1)
        return min(base + rng() * self.jitter_s, self.max_delay_s)
