"""JSON-RPC implementation of the ledger gateway."""

from __future__ import annotations

import dataclasses
import itertools
import typing as typ

import httpx
import msgspec

from .errors import (
    LedgerAPIError,
    LedgerResponseShapeError,
    LedgerTransportError,
)
from .models import ContributorState, EpochState, LedgerConfig, SlotEvent

if typ.TYPE_CHECKING:
    from rewards_oracle.leaderboard.models import XpBreakdown, XpCategory

_HTTP_ERROR_STATUS_THRESHOLD = 400

_T = typ.TypeVar("_T")


@dataclasses.dataclass(frozen=True, slots=True)
class LedgerRPCConfig:
    """Configuration for the ledger JSON-RPC endpoint."""

    endpoint: str
    token: str | None = None
    timeout_s: float = 30.0
    user_agent: str = "rewards-oracle/0.1"


def _category_payload(categories: tuple[XpCategory, ...]) -> list[dict[str, typ.Any]]:
    return [{"name": cat.name, "amount": cat.amount} for cat in categories]


def _decode(result: object, model: type[_T], *, field: str) -> _T:
    """Convert an RPC result into ``model`` or raise a shape error."""
    try:
        return msgspec.convert(result, type=model)
    except msgspec.ValidationError as exc:
        raise LedgerResponseShapeError.missing(field) from exc


def _transaction_id(result: object, *, method: str) -> str:
    if isinstance(result, str) and result:
        return result
    raise LedgerResponseShapeError.missing(f"{method}.result")


def _parse_rpc_payload(payload_raw: object) -> object:
    """Validate a JSON-RPC response envelope and return its result."""
    if not isinstance(payload_raw, dict):
        raise LedgerResponseShapeError.missing("response")

    error = payload_raw.get("error")
    if error:
        if isinstance(error, dict):
            code = error.get("code")
            raise LedgerAPIError.rpc_error(
                code if isinstance(code, int) else None,
                error.get("message"),
            )
        raise LedgerAPIError.rpc_error(None, error)

    if "result" not in payload_raw:
        raise LedgerResponseShapeError.missing("result")
    return payload_raw["result"]


class JsonRpcLedgerGateway:
    """JSON-RPC 2.0 client implementing :class:`LedgerGateway`.

    The oracle signs nothing itself: the RPC service behind ``endpoint`` holds
    the oracle authority and derives program addresses for each call.
    """

    def __init__(
        self,
        config: LedgerRPCConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the gateway with endpoint configuration."""
        self._config = config
        self._ids = itertools.count(1)
        self._owns_client = http_client is None
        headers = {
            "User-Agent": config.user_agent,
            "Accept": "application/json",
        }
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers=headers,
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def get_config(self) -> LedgerConfig | None:
        """Return the program configuration account."""
        result = await self._call("getConfig", {})
        if result is None:
            return None
        return _decode(result, LedgerConfig, field="getConfig.result")

    async def get_epoch(self, epoch_number: int) -> EpochState | None:
        """Return the epoch account for ``epoch_number``."""
        result = await self._call("getEpoch", {"epochNumber": epoch_number})
        if result is None:
            return None
        return _decode(result, EpochState, field="getEpoch.result")

    async def get_contributor(self, wallet: str) -> ContributorState | None:
        """Return the contributor account for ``wallet``."""
        result = await self._call("getContributor", {"wallet": wallet})
        if result is None:
            return None
        return _decode(result, ContributorState, field="getContributor.result")

    async def submit_sync(
        self,
        wallet: str,
        username: str,
        total_xp: int,
        categories: XpBreakdown,
    ) -> str:
        """Submit a contributor XP sync for the current epoch."""
        params = {
            "wallet": wallet,
            "githubUsername": username,
            "totalXp": total_xp,
            "roleXp": _category_payload(categories.role),
            "domainXp": _category_payload(categories.domain),
            "skillXp": _category_payload(categories.skill),
        }
        result = await self._call("syncContributorXp", params)
        return _transaction_id(result, method="syncContributorXp")

    async def submit_create_epoch(self, reward_amount: int) -> str:
        """Submit creation of the next epoch."""
        result = await self._call("createEpoch", {"rewardAmount": reward_amount})
        return _transaction_id(result, method="createEpoch")

    async def submit_finalize_epoch(self, epoch_number: int) -> str:
        """Submit finalization of ``epoch_number``."""
        result = await self._call("finalizeEpoch", {"epochNumber": epoch_number})
        return _transaction_id(result, method="finalizeEpoch")

    async def fetch_sync_events(
        self, *, after_slot: int, limit: int
    ) -> list[SlotEvent]:
        """Return sync events observed after ``after_slot``, oldest first."""
        result = await self._call(
            "getSyncEvents", {"afterSlot": after_slot, "limit": limit}
        )
        if result is None:
            return []
        return _decode(result, list[SlotEvent], field="getSyncEvents.result")

    async def _call(self, method: str, params: dict[str, typ.Any]) -> object:
        """Execute a JSON-RPC call and return the validated result."""
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._client.post(self._config.endpoint, json=body)
        except httpx.HTTPError as exc:
            raise LedgerTransportError.request_failed(method, exc) from exc
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise LedgerAPIError.http_error(response.status_code)
        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise LedgerResponseShapeError.missing("response") from exc
        return _parse_rpc_payload(payload_raw)
