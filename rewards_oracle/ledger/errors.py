"""Ledger gateway errors."""

from __future__ import annotations


class LedgerError(RuntimeError):
    """Base class for failures talking to the remote ledger."""


class LedgerTransportError(LedgerError):
    """Raised when the ledger endpoint cannot be reached or times out."""

    @classmethod
    def request_failed(cls, method: str, reason: object) -> LedgerTransportError:
        """Return an error for a request that never produced a response."""
        return cls(f"Ledger request {method} failed: {reason}")


class LedgerAPIError(LedgerError):
    """Raised when the ledger returns an error response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        rpc_code: int | None = None,
    ) -> None:
        """Initialise with a message and optional HTTP or RPC codes."""
        self.status_code = status_code
        self.rpc_code = rpc_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> LedgerAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"Ledger RPC HTTP {status_code}", status_code=status_code)

    @classmethod
    def rpc_error(cls, code: int | None, message: object) -> LedgerAPIError:
        """Return an error for JSON-RPC `error` payloads."""
        return cls(f"Ledger RPC error {code}: {message}", rpc_code=code)


class LedgerResponseShapeError(LedgerError):
    """Raised when ledger responses are missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> LedgerResponseShapeError:
        """Return an error for a missing or malformed response field."""
        return cls(f"Ledger response missing expected field: {field}")


class LedgerStateError(LedgerError):
    """Raised when ledger state required by a cycle does not exist."""

    @classmethod
    def missing_config(cls) -> LedgerStateError:
        """Return an error when the program config account is absent."""
        return cls("Ledger config not found; is the program initialised?")

    @classmethod
    def missing_epoch(cls, epoch_number: int) -> LedgerStateError:
        """Return an error when the current epoch account is absent."""
        return cls(f"Ledger epoch {epoch_number} not found")
