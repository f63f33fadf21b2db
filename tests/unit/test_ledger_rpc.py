"""Unit tests for the JSON-RPC ledger gateway.

Run with:
    pytest tests/unit/test_ledger_rpc.py
"""

from __future__ import annotations

import json
import typing as typ

import httpx
import pytest

from rewards_oracle.leaderboard import XpBreakdown, XpCategory
from rewards_oracle.ledger import (
    JsonRpcLedgerGateway,
    LedgerAPIError,
    LedgerConfig,
    LedgerGateway,
    LedgerResponseShapeError,
    LedgerRPCConfig,
    LedgerTransportError,
    is_valid_address,
)
from tests.helpers.fakes import make_address

ENDPOINT = "http://ledger.test/rpc"

Handler = typ.Callable[[httpx.Request], httpx.Response]


def _result(value: object) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(
            200, json={"jsonrpc": "2.0", "id": body["id"], "result": value}
        )

    return handler


def _gateway(handler: Handler) -> JsonRpcLedgerGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return JsonRpcLedgerGateway(LedgerRPCConfig(endpoint=ENDPOINT), http_client=client)


class TestAddressGrammar:
    """Base58 address validation."""

    @pytest.mark.parametrize("seed", [0, 1, 200, 255])
    def test_thirty_two_byte_keys_are_valid(self, seed: int) -> None:
        """Any 32-byte key encodes to a valid address."""
        assert is_valid_address(make_address(seed))

    @pytest.mark.parametrize(
        "value",
        [None, 42, "", "abc", "1" * 31, "1" * 45, "0" * 32, make_address(3)[:-1] + "l"],
    )
    def test_invalid_values(self, value: object) -> None:
        """Wrong types, lengths, and alphabets are rejected."""
        assert not is_valid_address(value)

    def test_wrong_decoded_length(self) -> None:
        """An address must decode to exactly 32 bytes."""
        assert not is_valid_address("2" * 33)

    @pytest.mark.parametrize(
        "padded",
        ["1" * 32 + " ", "\t" + "1" * 32, "1" * 32 + "\n", make_address(9) + " "],
        ids=["trailing-space", "leading-tab", "trailing-newline", "seed-9-space"],
    )
    def test_surrounding_whitespace_is_rejected(self, padded: str) -> None:
        """Padding is not stripped into a valid key."""
        assert is_valid_address(padded.strip())
        assert not is_valid_address(padded)


class TestReads:
    """Account reads and their "not found" mapping."""

    @pytest.mark.asyncio
    async def test_get_config_decodes_camel_case(self) -> None:
        """Config fields decode from camelCase."""
        gateway = _gateway(_result({"currentEpoch": 4, "totalEpochs": 4}))

        config = await gateway.get_config()

        assert config == LedgerConfig(current_epoch=4, total_epochs=4)

    @pytest.mark.asyncio
    async def test_null_result_is_not_found(self) -> None:
        """A null result maps to None rather than an error."""
        gateway = _gateway(_result(None))

        assert await gateway.get_contributor(make_address(1)) is None
        assert await gateway.get_epoch(9) is None
        assert await gateway.get_config() is None

    @pytest.mark.asyncio
    async def test_get_epoch_sends_params(self) -> None:
        """getEpoch carries the epoch number in camelCase params."""
        seen: list[dict[str, typ.Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return _result(
                {"epochNumber": 2, "startTime": 10, "endTime": 20, "finalized": True}
            )(request)

        epoch = await _gateway(handler).get_epoch(2)

        assert epoch is not None
        assert epoch.finalized is True
        assert epoch.end_time == 20
        assert seen[0]["method"] == "getEpoch"
        assert seen[0]["params"] == {"epochNumber": 2}
        assert seen[0]["jsonrpc"] == "2.0"

    @pytest.mark.asyncio
    async def test_malformed_result_is_schema_error(self) -> None:
        """A result that does not match the model raises a shape error."""
        gateway = _gateway(_result({"epochNumber": "two"}))

        with pytest.raises(LedgerResponseShapeError, match=r"getEpoch\.result"):
            await gateway.get_epoch(2)

    @pytest.mark.asyncio
    async def test_fetch_sync_events(self) -> None:
        """Sync events decode into slot-tagged structs."""
        wallet = make_address(5)
        gateway = _gateway(
            _result(
                [
                    {
                        "slot": 77,
                        "event": {
                            "wallet": wallet,
                            "githubUsername": "alice",
                            "epoch": 1,
                            "totalXp": 10,
                            "roleXp": [{"name": "developer", "amount": 10}],
                        },
                    }
                ]
            )
        )

        [item] = await gateway.fetch_sync_events(after_slot=0, limit=10)

        assert item.slot == 77
        assert item.event.wallet == wallet
        assert item.event.role_xp[0].amount == 10


class TestWrites:
    """Write submissions return transaction identifiers."""

    @pytest.mark.asyncio
    async def test_submit_sync_payload(self) -> None:
        """syncContributorXp carries the full category breakdown."""
        seen: list[dict[str, typ.Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return _result("tx-1")(request)

        wallet = make_address(6)
        categories = XpBreakdown(
            role=(XpCategory("developer", 5),), skill=(XpCategory("rust", 2),)
        )

        tx = await _gateway(handler).submit_sync(wallet, "alice", 7, categories)

        assert tx == "tx-1"
        assert seen[0]["method"] == "syncContributorXp"
        assert seen[0]["params"] == {
            "wallet": wallet,
            "githubUsername": "alice",
            "totalXp": 7,
            "roleXp": [{"name": "developer", "amount": 5}],
            "domainXp": [],
            "skillXp": [{"name": "rust", "amount": 2}],
        }

    @pytest.mark.asyncio
    async def test_write_without_transaction_id_is_schema_error(self) -> None:
        """A write must return a non-empty transaction id."""
        gateway = _gateway(_result(None))

        with pytest.raises(LedgerResponseShapeError, match="createEpoch"):
            await gateway.submit_create_epoch(100)

    @pytest.mark.asyncio
    async def test_finalize_epoch(self) -> None:
        """finalizeEpoch returns the transaction id."""
        assert await _gateway(_result("tx-f")).submit_finalize_epoch(3) == "tx-f"


class TestFailures:
    """Transport, HTTP, and RPC failures."""

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        """HTTP >= 400 raises an API error carrying the status."""
        gateway = _gateway(lambda _request: httpx.Response(503))

        with pytest.raises(LedgerAPIError) as excinfo:
            await gateway.get_config()

        assert excinfo.value.status_code == 503

    @pytest.mark.asyncio
    async def test_rpc_error_payload(self) -> None:
        """A JSON-RPC error object raises with its code."""
        gateway = _gateway(
            lambda _request: httpx.Response(
                200, json={"error": {"code": -32000, "message": "EpochNotFinalized"}}
            )
        )

        with pytest.raises(LedgerAPIError, match="EpochNotFinalized") as excinfo:
            await gateway.submit_create_epoch(1)

        assert excinfo.value.rpc_code == -32000

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        """Connection failures surface as transport errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(LedgerTransportError, match="getConfig"):
            await _gateway(handler).get_config()

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        """A non-JSON body is a shape error."""
        gateway = _gateway(lambda _request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(LedgerResponseShapeError):
            await gateway.get_config()

    @pytest.mark.asyncio
    async def test_missing_result_key(self) -> None:
        """An envelope with neither result nor error is a shape error."""
        gateway = _gateway(lambda _request: httpx.Response(200, json={"id": 1}))

        with pytest.raises(LedgerResponseShapeError, match="result"):
            await gateway.get_config()


class TestClientOwnership:
    """HTTP client lifecycle."""

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self) -> None:
        """aclose leaves a caller-provided client open."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(_result(None)))
        gateway = JsonRpcLedgerGateway(
            LedgerRPCConfig(endpoint=ENDPOINT), http_client=client
        )

        await gateway.aclose()

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_sends_bearer_token(self) -> None:
        """A configured token is sent as a bearer credential."""
        gateway = JsonRpcLedgerGateway(
            LedgerRPCConfig(endpoint=ENDPOINT, token="s3cret")
        )
        try:
            assert gateway._client.headers["Authorization"] == "Bearer s3cret"
        finally:
            await gateway.aclose()
        assert gateway._client.is_closed

    def test_gateway_satisfies_protocol(self) -> None:
        """The JSON-RPC gateway is a LedgerGateway."""
        gateway = JsonRpcLedgerGateway(LedgerRPCConfig(endpoint=ENDPOINT))
        assert isinstance(gateway, LedgerGateway)
