"""
Integration tests for netbeez-mcp-server.

These tests exercise the full stack: MCP tool -> NetBeez client -> real
BeezKeeper API. They are skipped automatically when credentials are not
configured, and they only read data; no ad-hoc tests are started.

Run with:
    NETBEEZ_BASE_URL=https://demo1.netbeezcloud.net \
    NETBEEZ_API_KEY=secret \
    pytest tests/integration/ -m integration -v
"""

from __future__ import annotations

import os

import pytest

# ---------------------------------------------------------------------------
# Skip guard -- skip all tests in this module when credentials absent
# ---------------------------------------------------------------------------

# Captured at import time; the autouse fixture in conftest clears NETBEEZ_*.
_BASE_URL = os.environ.get("NETBEEZ_BASE_URL", "")
_API_KEY = os.environ.get("NETBEEZ_API_KEY", "")
_SSL_VERIFY = os.environ.get("NETBEEZ_SSL_VERIFY", "true").lower() not in ("0", "false", "no")

requires_netbeez = pytest.mark.skipif(
    not (_BASE_URL and _API_KEY),
    reason="Skipped: NETBEEZ_BASE_URL and NETBEEZ_API_KEY must be set",
)

pytestmark = [pytest.mark.integration, requires_netbeez]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def client():
    """Real NetBeez client connected to the configured instance."""
    from netbeez_agent.config import NetBeezAgentConfig

    cfg = NetBeezAgentConfig(base_url=_BASE_URL, api_key=_API_KEY, ssl_verify=_SSL_VERIFY)
    netbeez_client = cfg.create_client()
    yield netbeez_client
    netbeez_client.close()


@pytest.fixture()
def wired_server(client, monkeypatch: pytest.MonkeyPatch):
    """Point the server module at the real client so tools can run."""
    from netbeez_agent import server

    monkeypatch.setattr(server, "_client", client)
    return server


# ---------------------------------------------------------------------------
# Client connectivity
# ---------------------------------------------------------------------------


class TestClientConnectivity:
    """Verify the REST client can reach the BeezKeeper instance."""

    def test_list_agents_returns_envelope(self, client):
        from netbeez_agent.query import Pagination, QueryOptions

        envelope = client.list_agents(QueryOptions(pagination=Pagination(page=1, page_size=1)))
        assert isinstance(envelope.resources(), list)

    def test_client_uses_configured_instance(self, client):
        assert client.base_url == _BASE_URL.rstrip("/")


# ---------------------------------------------------------------------------
# Tools end to end
# ---------------------------------------------------------------------------


class TestToolsIntegration:
    """Integration tests for the read-only tools."""

    def test_list_agents_tool(self, wired_server):
        from netbeez_agent.tools.agents import list_agents

        result = list_agents(page_size=5)
        assert result["success"] is True
        assert isinstance(result["data"]["data"], list)

    def test_list_targets_tool(self, wired_server):
        from netbeez_agent.tools.targets import list_targets

        result = list_targets(page_size=5)
        assert result["success"] is True

    def test_list_alerts_tool(self, wired_server):
        from netbeez_agent.tools.alerts import list_alerts

        result = list_alerts(filter_status="open", page_size=5)
        assert result["success"] is True

    def test_list_incidents_tool(self, wired_server):
        from netbeez_agent.tools.incidents import list_incidents

        result = list_incidents(page_size=5)
        assert result["success"] is True

    def test_unknown_agent_is_not_found(self, wired_server):
        from netbeez_agent.tools.agents import get_agent

        result = get_agent(agent_id=999999999)
        assert result["success"] is False
        assert result["error"] == "NOT_FOUND"
