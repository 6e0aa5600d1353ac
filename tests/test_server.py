"""Tests for the FastMCP server module."""

from __future__ import annotations

import asyncio
import json
import time
from unittest.mock import MagicMock

import pytest

from netbeez_agent import __version__
from netbeez_agent.config import _reset_config
from netbeez_agent.exceptions import NetBeezAuthError, NetBeezError, NetBeezNotFoundError
from netbeez_agent.models import JobOutcome

# ---------------------------------------------------------------------------
# Helper to reset server state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_server_state():
    """Reset server module state and config singleton between tests."""
    _reset_config()

    from netbeez_agent import server

    server._config = None
    server._client = None
    server._config_error = None

    yield

    _reset_config()
    server._config = None
    server._client = None
    server._config_error = None


@pytest.fixture()
def _set_netbeez_env(monkeypatch: pytest.MonkeyPatch):
    """Set valid NetBeez env vars for tests that need config."""
    monkeypatch.setenv("NETBEEZ_BASE_URL", "https://demo1.netbeezcloud.net")
    monkeypatch.setenv("NETBEEZ_API_KEY", "test-api-key")


EXPECTED_TOOLS = {
    "list_agents",
    "get_agent",
    "search_agents",
    "get_agent_logs",
    "get_agent_performance_metrics",
    "get_agent_access_point_connections",
    "list_targets",
    "get_target",
    "list_tests",
    "get_test_results",
    "list_incidents",
    "list_alerts",
    "list_wifi_profiles",
    "get_scheduled_test_results",
    "get_test_statistics",
    "get_agent_statistics",
    "get_access_point_metrics",
    "get_path_analysis_results",
    "run_adhoc_test",
    "get_server_info",
}


# ===========================================================================
# Test: MCP server instantiation
# ===========================================================================


class TestMCPServerInstance:
    """Verify the FastMCP server instance is configured correctly."""

    def test_mcp_name(self):
        from netbeez_agent.server import mcp

        assert mcp.name == "netbeez-mcp-server"

    def test_mcp_is_fastmcp_instance(self):
        from fastmcp import FastMCP

        from netbeez_agent.server import mcp

        assert isinstance(mcp, FastMCP)


# ===========================================================================
# Test: registrations
# ===========================================================================


class TestRegistrations:
    def test_all_tools_registered(self):
        from netbeez_agent.server import mcp

        tools = asyncio.run(mcp.get_tools())
        assert set(tools) == EXPECTED_TOOLS

    def test_tools_have_descriptions(self):
        from netbeez_agent.server import mcp

        tools = asyncio.run(mcp.get_tools())
        for name, tool in tools.items():
            assert tool.description, f"{name} has no description"

    def test_resources_registered(self):
        from netbeez_agent.server import mcp

        resources = asyncio.run(mcp.get_resources())
        assert {str(uri) for uri in resources} == {
            "netbeez://data-model",
            "netbeez://correlation-guide",
            "netbeez://troubleshooting-guide",
        }

    def test_prompts_registered(self):
        from netbeez_agent.server import mcp

        prompts = asyncio.run(mcp.get_prompts())
        assert set(prompts) == {
            "troubleshoot-target",
            "analyze-agent-health",
            "investigate-incident",
            "network-overview",
        }


# ===========================================================================
# Test: server initialization
# ===========================================================================


class TestInitServer:
    def test_degraded_without_config(self):
        from netbeez_agent import server

        server._init_server()

        assert server._config is None
        assert server._client is None
        assert "base_url" in server._config_error

    def test_configured(self, _set_netbeez_env):
        from netbeez_agent import server
        from netbeez_agent.client import NetBeezClient

        server._init_server()

        assert server._config is not None
        assert isinstance(server._client, NetBeezClient)
        assert server._config_error is None
        assert server.get_server_config() is server._config
        server._client.close()


# ===========================================================================
# Test: get_client
# ===========================================================================


class TestGetClient:
    def test_raises_when_not_configured(self):
        from netbeez_agent.server import get_client

        with pytest.raises(NetBeezError) as exc_info:
            get_client()

        assert exc_info.value.error_code == "CLIENT_NOT_CONFIGURED"

    def test_raises_with_config_error_message(self):
        from netbeez_agent import server

        server._config_error = "NETBEEZ_API_KEY missing"

        with pytest.raises(NetBeezError, match="NETBEEZ_API_KEY missing"):
            server.get_client()

    def test_returns_client(self):
        from netbeez_agent import server

        mock_client = MagicMock()
        server._client = mock_client
        assert server.get_client() is mock_client


# ===========================================================================
# Test: get_server_info tool
# ===========================================================================


class TestGetServerInfo:
    def test_degraded_mode(self):
        from netbeez_agent import server

        server._config_error = "missing config"
        info = server.get_server_info.fn()

        assert info["server_name"] == "netbeez-mcp-server"
        assert info["version"] == __version__
        assert info["status"] == "running"
        assert info["config_loaded"] is False
        assert info["instance_hostname"] is None
        assert info["config_error"] == "missing config"
        assert info["client_ready"] is False

    def test_configured_mode(self, _set_netbeez_env):
        from netbeez_agent import server

        server._init_server()
        info = server.get_server_info.fn()

        assert info["config_loaded"] is True
        assert info["instance_hostname"] == "demo1.netbeezcloud.net"
        assert info["log_level"] == "INFO"
        assert info["timeout"] == 30
        assert info["ssl_verify"] is True
        assert info["max_retries"] == 2
        assert info["transport"] == "stdio"
        assert info["client_ready"] is True
        assert "config_error" not in info
        server._client.close()

    def test_never_exposes_api_key(self, _set_netbeez_env):
        from netbeez_agent import server

        server._init_server()
        info = server.get_server_info.fn()

        assert "test-api-key" not in json.dumps(info)
        server._client.close()


# ===========================================================================
# Test: handle_tool_error
# ===========================================================================


class TestHandleToolError:
    def test_netbeez_error_uses_to_dict(self):
        from netbeez_agent.server import handle_tool_error

        result = handle_tool_error(NetBeezAuthError(401, "Unauthorized", "bad key"))

        assert result["error_code"] == "AUTHENTICATION_ERROR"
        assert result["status_code"] == 401

    def test_not_found(self):
        from netbeez_agent.server import handle_tool_error

        result = handle_tool_error(NetBeezNotFoundError(404))
        assert result["error_code"] == "NOT_FOUND"

    def test_unexpected_error(self):
        from netbeez_agent.server import handle_tool_error

        result = handle_tool_error(RuntimeError("boom"))
        assert result == {"error": "boom", "error_code": "UNEXPECTED_ERROR"}


# ===========================================================================
# Test: concurrent tool calls
# ===========================================================================


class TestConcurrentToolCalls:
    def test_adhoc_run_does_not_block_other_tools(self, patch_get_client):
        from fastmcp import Client

        from netbeez_agent import server

        def slow_run(payload):
            time.sleep(0.6)
            return JobOutcome(job_id="42", status="completed", state="completed")

        patch_get_client.run_adhoc_test_and_wait.side_effect = slow_run

        async def scenario():
            async with Client(server.mcp) as client:

                async def adhoc():
                    await client.call_tool("run_adhoc_test", {"agent_ids": [1], "test_type_id": 7})
                    return time.monotonic()

                async def info():
                    await asyncio.sleep(0.05)
                    await client.call_tool("get_server_info", {})
                    return time.monotonic()

                start = time.monotonic()
                adhoc_done, info_done = await asyncio.gather(adhoc(), info())
                return adhoc_done - start, info_done - start

        adhoc_elapsed, info_elapsed = asyncio.run(scenario())

        assert adhoc_elapsed >= 0.6
        assert info_elapsed < 0.4
        patch_get_client.run_adhoc_test_and_wait.assert_called_once()


# ===========================================================================
# Test: health check route
# ===========================================================================


class TestHealthCheck:
    def test_health_body(self):
        from netbeez_agent.server import health_check

        response = asyncio.run(health_check(MagicMock()))

        assert response.status_code == 200
        assert json.loads(response.body) == {
            "status": "ok",
            "server": "netbeez-mcp-server",
            "version": __version__,
        }


# ===========================================================================
# Test: main entry point
# ===========================================================================


class TestMain:
    def test_exits_without_config(self, monkeypatch: pytest.MonkeyPatch):
        from netbeez_agent import server

        run = MagicMock()
        monkeypatch.setattr(server.mcp, "run", run)

        with pytest.raises(SystemExit) as exc_info:
            server.main()

        assert exc_info.value.code == 1
        run.assert_not_called()

    def test_stdio_transport(self, _set_netbeez_env, monkeypatch: pytest.MonkeyPatch):
        from netbeez_agent import server

        run = MagicMock()
        monkeypatch.setattr(server.mcp, "run", run)

        server.main()

        run.assert_called_once_with(transport="stdio")
        server._client.close()

    def test_http_transport(self, _set_netbeez_env, monkeypatch: pytest.MonkeyPatch):
        from netbeez_agent import server

        monkeypatch.setenv("MCP_TRANSPORT", "http")
        monkeypatch.setenv("MCP_HTTP_PORT", "8123")
        run = MagicMock()
        monkeypatch.setattr(server.mcp, "run", run)

        server.main()

        run.assert_called_once_with(transport="http", host="0.0.0.0", port=8123, path="/mcp")
        server._client.close()

    def test_both_transports(self, _set_netbeez_env, monkeypatch: pytest.MonkeyPatch):
        from netbeez_agent import server

        monkeypatch.setenv("MCP_TRANSPORT", "both")
        anyio_run = MagicMock()
        monkeypatch.setattr(server.anyio, "run", anyio_run)

        server.main()

        anyio_run.assert_called_once_with(server._run_both, 3000)
        server._client.close()
