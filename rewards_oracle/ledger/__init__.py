"""Ledger gateway protocol, wire models, and JSON-RPC client."""

from __future__ import annotations

from .address import is_valid_address
from .errors import (
    LedgerAPIError,
    LedgerError,
    LedgerResponseShapeError,
    LedgerStateError,
    LedgerTransportError,
)
from .models import (
    CategoryAmount,
    ContributorState,
    EpochState,
    LedgerConfig,
    SlotEvent,
    XpSyncedEvent,
)
from .protocol import LedgerEventSource, LedgerGateway
from .rpc import JsonRpcLedgerGateway, LedgerRPCConfig

__all__ = [
    "CategoryAmount",
    "ContributorState",
    "EpochState",
    "JsonRpcLedgerGateway",
    "LedgerAPIError",
    "LedgerConfig",
    "LedgerError",
    "LedgerEventSource",
    "LedgerGateway",
    "LedgerRPCConfig",
    "LedgerResponseShapeError",
    "LedgerStateError",
    "LedgerTransportError",
    "SlotEvent",
    "XpSyncedEvent",
    "is_valid_address",
]
