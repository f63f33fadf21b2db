"""Value objects produced by contributor synchronization."""

from __future__ import annotations

import dataclasses
import math


@dataclasses.dataclass(frozen=True, slots=True)
class SyncDelta:
    """XP movement between the ledger's view and the leaderboard's view.

    ``xp_delta`` is negative when the leaderboard regresses a score; it is
    reported as-is and never clamped.
    """

    previous_xp: int
    new_xp: int
    conversion_ratio: int

    @classmethod
    def compute(cls, previous_xp: int, new_xp: int, ratio: int) -> SyncDelta:
        """Return the delta from ``previous_xp`` to ``new_xp``."""
        return cls(previous_xp=previous_xp, new_xp=new_xp, conversion_ratio=ratio)

    @property
    def xp_delta(self) -> int:
        """Return the XP gained (or lost) since the previous sync."""
        return self.new_xp - self.previous_xp

    @property
    def credit_earned(self) -> int:
        """Return the credit attributable to ``xp_delta``."""
        return math.floor(self.xp_delta * self.conversion_ratio)


@dataclasses.dataclass(frozen=True, slots=True)
class SyncReceipt:
    """Outcome of a successful contributor sync."""

    username: str
    transaction_id: str
    delta: SyncDelta


@dataclasses.dataclass(frozen=True, slots=True)
class SyncError:
    """A contributor the cycle failed to sync, with the reason."""

    username: str
    message: str


@dataclasses.dataclass(frozen=True, slots=True)
class BatchResult:
    """Summary of one sync cycle over the whole leaderboard.

    Attributes
    ----------
    successful
        Contributors whose sync write was accepted.
    failed
        Contributors that exhausted retries or raised.
    total_xp_synced
        Sum of ``xp_delta`` over successful contributors only.
    total_credit_earned
        Sum of ``credit_earned`` over successful contributors only.
    errors
        Failures in the order they were folded into the result.

    """

    successful: int = 0
    failed: int = 0
    total_xp_synced: int = 0
    total_credit_earned: int = 0
    errors: tuple[SyncError, ...] = ()

    @property
    def total(self) -> int:
        """Return the number of contributors the cycle attempted."""
        return self.successful + self.failed


@dataclasses.dataclass(slots=True)
class BatchResultBuilder:
    """Accumulator used while a cycle is running."""

    successful: int = 0
    failed: int = 0
    total_xp_synced: int = 0
    total_credit_earned: int = 0
    errors: list[SyncError] = dataclasses.field(default_factory=list)

    def record_success(self, receipt: SyncReceipt) -> None:
        """Fold a successful sync into the running totals."""
        self.successful += 1
        self.total_xp_synced += receipt.delta.xp_delta
        self.total_credit_earned += receipt.delta.credit_earned

    def record_failure(self, username: str, message: str) -> None:
        """Count a failed contributor and keep its error message."""
        self.failed += 1
        self.errors.append(SyncError(username=username, message=message))

    def build(self) -> BatchResult:
        """Freeze the accumulated state into a :class:`BatchResult`."""
        return BatchResult(
            successful=self.successful,
            failed=self.failed,
            total_xp_synced=self.total_xp_synced,
            total_credit_earned=self.total_credit_earned,
            errors=tuple(self.errors),
        )
