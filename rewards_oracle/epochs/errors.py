"""Epoch lifecycle errors."""

from __future__ import annotations

from rewards_oracle.ledger.errors import LedgerStateError


class EpochError(LedgerStateError):
    """Base class for epoch lifecycle failures."""


class EpochStillOpenError(EpochError):
    """Raised when a new epoch is requested while the current one is open."""

    def __init__(self, epoch_number: int) -> None:
        """Initialise with the number of the still-open epoch."""
        self.epoch_number = epoch_number
        super().__init__(
            f"Epoch {epoch_number} is not finalized; refusing to open another"
        )
