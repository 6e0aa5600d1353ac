"""FastMCP server for the NetBeez MCP agent.

Entry point for the MCP server that exposes NetBeez network monitoring
data via the Model Context Protocol.  Initializes the FastMCP server
instance, loads configuration, creates a ``NetBeezClient``, and registers
the tools, reference resources and investigation prompts.

Tools degrade gracefully: when configuration is missing they return
structured ``CLIENT_NOT_CONFIGURED`` errors and ``get_server_info`` reports
the configuration problem.  The ``main()`` entry point itself refuses to
start without a valid configuration.

Usage::

    # Via entry point
    netbeez-mcp-server

    # Via module
    python -m netbeez_agent.server

    # HTTP transport on port 3000 (MCP at /mcp, health check at /health)
    MCP_TRANSPORT=http MCP_HTTP_PORT=3000 netbeez-mcp-server
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import anyio
from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from . import __version__, prompts
from .config import NetBeezAgentConfig, get_config
from .exceptions import NetBeezError
from .resources import MARKDOWN_MIME, RESOURCES, ResourceDocument
from .tools import (
    get_access_point_metrics,
    get_agent,
    get_agent_access_point_connections,
    get_agent_logs,
    get_agent_performance_metrics,
    get_agent_statistics,
    get_path_analysis_results,
    get_scheduled_test_results,
    get_target,
    get_test_results,
    get_test_statistics,
    list_agents,
    list_alerts,
    list_incidents,
    list_targets,
    list_tests,
    list_wifi_profiles,
    run_adhoc_test,
    search_agents,
)

if TYPE_CHECKING:
    from .client import NetBeezClient

logger = logging.getLogger(__name__)

SERVER_NAME = "netbeez-mcp-server"
HTTP_HOST = "0.0.0.0"
HTTP_PATH = "/mcp"

# ---------------------------------------------------------------------------
# Server instance
# ---------------------------------------------------------------------------

mcp: FastMCP = FastMCP(
    SERVER_NAME,
    instructions=(
        "NetBeez MCP server -- read access to a NetBeez network monitoring "
        "instance: agents, targets, tests and their results, alerts, "
        "incidents, WiFi profiles, path analysis and aggregated statistics, "
        "plus on-demand Iperf, Network Speed and VoIP tests. Read the "
        "netbeez://troubleshooting-guide resource to pick the right tools."
    ),
)

# ---------------------------------------------------------------------------
# Server state -- populated during startup
# ---------------------------------------------------------------------------

_config: NetBeezAgentConfig | None = None
_client: NetBeezClient | None = None
_config_error: str | None = None


def _init_server() -> None:
    """Load configuration and create the NetBeez client.

    If configuration is missing or invalid, the error is captured and the
    server module stays usable in degraded mode.  The ``get_server_info``
    tool reports the configuration status so callers can understand why
    operations fail.
    """
    global _config, _client, _config_error

    try:
        _config = get_config()
    except Exception as exc:
        _config_error = str(exc)
        logger.warning(
            "Configuration not available -- server running in degraded mode: %s",
            _config_error,
        )
        return

    log_level = getattr(logging, _config.log_level, logging.INFO)
    logging.getLogger("netbeez_agent").setLevel(log_level)

    try:
        _client = _config.create_client()
        logger.info("NetBeez client created for instance: %s", _config.base_url)
    except Exception as exc:
        _config_error = f"Client creation failed: {exc}"
        logger.warning("Failed to create NetBeez client: %s", exc)


def get_client() -> NetBeezClient:
    """Return the server-wide ``NetBeezClient``.

    Raises:
        NetBeezError: If no client is available (configuration missing
            or client creation failed).
    """
    if _client is None:
        msg = _config_error or "NetBeez client not initialized -- check configuration"
        raise NetBeezError(
            message=msg,
            error_code="CLIENT_NOT_CONFIGURED",
        )
    return _client


def get_server_config() -> NetBeezAgentConfig | None:
    """Return the server-wide ``NetBeezAgentConfig``, or None if unavailable."""
    return _config


# ---------------------------------------------------------------------------
# Error handling helper
# ---------------------------------------------------------------------------


def handle_tool_error(exc: Exception) -> dict[str, Any]:
    """Convert an exception into a structured MCP tool error response.

    ``NetBeezError`` subclasses keep their own ``to_dict()`` shape; any
    other exception becomes a generic ``UNEXPECTED_ERROR``.
    """
    if isinstance(exc, NetBeezError):
        return exc.to_dict()

    logger.exception("Unexpected error in tool execution: %s", exc)
    return {
        "error": str(exc),
        "error_code": "UNEXPECTED_ERROR",
    }


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

TOOL_FUNCTIONS = (
    list_agents,
    get_agent,
    search_agents,
    get_agent_logs,
    get_agent_performance_metrics,
    get_agent_access_point_connections,
    list_targets,
    get_target,
    list_tests,
    get_test_results,
    list_incidents,
    list_alerts,
    list_wifi_profiles,
    get_scheduled_test_results,
    get_test_statistics,
    get_agent_statistics,
    get_access_point_metrics,
    get_path_analysis_results,
    run_adhoc_test,
)

for _tool_fn in TOOL_FUNCTIONS:
    mcp.tool()(_tool_fn)


@mcp.tool()
def get_server_info() -> dict[str, Any]:
    """Return server metadata and configuration status.

    Provides the server name, version, the configured BeezKeeper hostname
    (sanitized -- never the API key), and whether the configuration is
    loaded and the client is ready.

    Returns:
        A dict with server name, version, instance hostname,
        configuration status, and client readiness.
    """
    info: dict[str, Any] = {
        "server_name": SERVER_NAME,
        "version": __version__,
        "status": "running",
    }

    if _config is not None:
        parsed = urlparse(_config.base_url)
        info["instance_hostname"] = parsed.hostname or "unknown"
        info["config_loaded"] = True
        info["log_level"] = _config.log_level
        info["timeout"] = _config.timeout
        info["ssl_verify"] = _config.ssl_verify
        info["max_retries"] = _config.max_retries
        info["transport"] = _config.transport
    else:
        info["instance_hostname"] = None
        info["config_loaded"] = False
        info["config_error"] = _config_error

    info["client_ready"] = _client is not None

    return info


# ---------------------------------------------------------------------------
# Resources and prompts
# ---------------------------------------------------------------------------


def _document_reader(document: ResourceDocument) -> Callable[[], str]:
    def read_document() -> str:
        return document.content

    return read_document


for _document in RESOURCES:
    mcp.resource(
        _document.uri,
        name=_document.name,
        description=_document.description,
        mime_type=MARKDOWN_MIME,
    )(_document_reader(_document))

mcp.prompt(
    name="troubleshoot-target",
    description=(
        "Diagnose a monitoring target reported as down or slow: alerts across "
        "agents, failing test types, path and trend analysis."
    ),
)(prompts.troubleshoot_target)
mcp.prompt(
    name="analyze-agent-health",
    description=(
        "Health check for one agent: status, connection history, system "
        "resources, uptime, alerts and WiFi quality."
    ),
)(prompts.analyze_agent_health)
mcp.prompt(
    name="investigate-incident",
    description="Reconstruct one incident: timeline, related alerts, affected agents and root cause.",
)(prompts.investigate_incident)
mcp.prompt(
    name="network-overview",
    description="Summarize fleet status, open incidents, active alerts and affected targets.",
)(prompts.network_overview)


# ---------------------------------------------------------------------------
# HTTP health check
# ---------------------------------------------------------------------------


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "server": SERVER_NAME, "version": __version__})


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _run_both(port: int) -> None:
    """Serve stdio and HTTP from the same process until either exits."""
    async with anyio.create_task_group() as tg:
        tg.start_soon(partial(mcp.run_async, transport="stdio"))
        tg.start_soon(
            partial(
                mcp.run_async,
                transport="http",
                host=HTTP_HOST,
                port=port,
                path=HTTP_PATH,
                show_banner=False,
            )
        )


def main() -> None:
    """Start the NetBeez MCP server.

    Loads configuration, creates the NetBeez client and starts FastMCP on
    the configured transport: ``stdio``, ``http`` or ``both``.  Exits with
    status 1 when configuration is missing or invalid.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    logger.info("Starting %s v%s", SERVER_NAME, __version__)

    _init_server()

    if _config is None or _client is None:
        logger.error("Cannot start without a valid configuration: %s", _config_error)
        raise SystemExit(1)

    logger.info(
        "Server initialized: base_url=%s, transport=%s, log_level=%s",
        _config.base_url,
        _config.transport,
        _config.log_level,
    )

    if _config.transport == "stdio":
        mcp.run(transport="stdio")
    elif _config.transport == "http":
        logger.info("MCP endpoint: http://localhost:%d%s", _config.http_port, HTTP_PATH)
        mcp.run(transport="http", host=HTTP_HOST, port=_config.http_port, path=HTTP_PATH)
    else:
        logger.info("MCP endpoint: http://localhost:%d%s (plus stdio)", _config.http_port, HTTP_PATH)
        anyio.run(_run_both, _config.http_port)


if __name__ == "__main__":
    main()
