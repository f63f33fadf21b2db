"""Unit tests for the rewards_oracle.runtime module."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from rewards_oracle.config import ConfigError, OracleConfig
from rewards_oracle.factory import build_runtime
from rewards_oracle.runtime import _validate_port
from tests.helpers.fakes import FakeLedgerGateway, StaticLeaderboardSource

if typ.TYPE_CHECKING:
    from rewards_oracle.factory import OracleRuntime


@pytest.fixture
def in_memory_runtime(
    monkeypatch: pytest.MonkeyPatch, oracle_env: dict[str, str]
) -> list[OracleRuntime]:
    """Make ``create_app`` build a runtime over in-memory collaborators."""
    built: list[OracleRuntime] = []

    def fake_build_runtime(config: OracleConfig) -> OracleRuntime:
        runtime = build_runtime(
            config,
            gateway=FakeLedgerGateway(),
            source=StaticLeaderboardSource([]),
        )
        built.append(runtime)
        return runtime

    monkeypatch.setattr("rewards_oracle.factory.build_runtime", fake_build_runtime)
    return built


@pytest.fixture
def client(in_memory_runtime: list[OracleRuntime]) -> falcon.testing.TestClient:
    """Create a test client for the oracle runtime app."""
    from rewards_oracle.runtime import create_app

    return falcon.testing.TestClient(create_app())


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    def test_health_returns_200(self, client: falcon.testing.TestClient) -> None:
        """GET /health returns HTTP 200."""
        result = client.simulate_get("/health")
        assert result.status_code == HTTPStatus.OK

    def test_health_returns_json_status_ok(
        self, client: falcon.testing.TestClient
    ) -> None:
        """GET /health returns JSON with status ok."""
        result = client.simulate_get("/health")
        assert result.json == {"status": "ok"}

    def test_health_content_type_is_json(
        self, client: falcon.testing.TestClient
    ) -> None:
        """GET /health has application/json content type."""
        result = client.simulate_get("/health")
        content_type = result.headers.get("content-type", "")
        assert content_type.startswith("application/json")


class TestReadyAndStats:
    """Tests for /ready and /stats on the runtime app."""

    def test_ready_returns_json_status_ready(
        self, client: falcon.testing.TestClient
    ) -> None:
        """GET /ready returns JSON with status ready."""
        result = client.simulate_get("/ready")
        assert result.status_code == HTTPStatus.OK
        assert result.json == {"status": "ready"}

    def test_stats_is_served(self, client: falcon.testing.TestClient) -> None:
        """The runtime app wires /stats to the monitoring service."""
        result = client.simulate_get("/stats")
        assert result.status_code == HTTPStatus.OK
        assert "monitoring" in result.json


class TestCreateApp:
    """Tests for the create_app factory function."""

    def test_create_app_returns_falcon_app(
        self, in_memory_runtime: list[OracleRuntime]
    ) -> None:
        """create_app returns a Falcon ASGI App instance."""
        from rewards_oracle.runtime import create_app

        app = create_app()
        assert isinstance(app, falcon.asgi.App)
        [runtime] = in_memory_runtime
        assert runtime.config.ledger_url == "http://ledger.test/rpc"

    def test_create_app_requires_ledger_url(
        self, monkeypatch: pytest.MonkeyPatch, oracle_env: dict[str, str]
    ) -> None:
        """The runtime app refuses to start without a ledger endpoint."""
        from rewards_oracle.runtime import create_app

        monkeypatch.delenv("REWARDS_ORACLE_LEDGER_URL")

        with pytest.raises(ConfigError, match="LEDGER_URL"):
            create_app()


class TestValidatePort:
    """Tests for _validate_port."""

    @pytest.mark.parametrize("port", [1, 8080, 65535])
    def test_accepts_valid_ports(self, port: int) -> None:
        """Ports inside 1-65535 are returned unchanged."""
        assert _validate_port(port) == port

    @pytest.mark.parametrize("port", [0, 65536])
    def test_rejects_out_of_range(self, port: int) -> None:
        """Ports outside the TCP range exit with status 1."""
        with pytest.raises(SystemExit) as excinfo:
            _validate_port(port)
        assert excinfo.value.code == 1


class TestMain:
    """Tests for the Granian entrypoint."""

    def test_main_serves_factory(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """main() points Granian at the app factory with the configured bind."""
        import granian

        served: list[dict[str, object]] = []

        class _FakeGranian:
            def __init__(self, target: str, **kwargs: object) -> None:
                served.append({"target": target, **kwargs})

            def serve(self) -> None:
                served.append({"served": True})

        monkeypatch.setattr(granian, "Granian", _FakeGranian)
        monkeypatch.setattr(
            "rewards_oracle.runtime.configure_logging",
            lambda level: (level, False),
        )
        from rewards_oracle.runtime import main

        main(OracleConfig(ledger_url="http://ledger.test/rpc", port=9090))

        assert served[0]["target"] == "rewards_oracle.runtime:create_app"
        assert served[0]["port"] == 9090
        assert served[0]["factory"] is True
        assert served[-1] == {"served": True}
