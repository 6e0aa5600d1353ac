"""NetBeez MCP Agent -- MCP server for NetBeez network monitoring.

Exposes NetBeez agents, targets, tests, alerts, incidents, WiFi data,
statistics and ad-hoc test runs via the Model Context Protocol (MCP),
backed by a resilient HTTP transport and a submit-then-poll job runner.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .client import NetBeezClient
from .config import NetBeezAgentConfig, get_config
from .exceptions import (
    NetBeezAuthError,
    NetBeezClientError,
    NetBeezConnectionError,
    NetBeezError,
    NetBeezHTTPError,
    NetBeezJobError,
    NetBeezNotFoundError,
    NetBeezPermissionError,
    NetBeezRateLimitError,
    NetBeezResponseError,
    NetBeezServerError,
)
from .jobs import JobOrchestrator
from .models import JobConfig, JobOutcome, RequestSpec, ResponseEnvelope
from .query import FilterOperator, OperatorFilter, Ordering, Pagination, QueryOptions, render
from .server import get_client, get_server_config, handle_tool_error, mcp
from .transport import Transport, backoff_delay_ms

__all__ = [
    "FilterOperator",
    "JobConfig",
    "JobOrchestrator",
    "JobOutcome",
    "NetBeezAgentConfig",
    "NetBeezAuthError",
    "NetBeezClient",
    "NetBeezClientError",
    "NetBeezConnectionError",
    "NetBeezError",
    "NetBeezHTTPError",
    "NetBeezJobError",
    "NetBeezNotFoundError",
    "NetBeezPermissionError",
    "NetBeezRateLimitError",
    "NetBeezResponseError",
    "NetBeezServerError",
    "OperatorFilter",
    "Ordering",
    "Pagination",
    "QueryOptions",
    "RequestSpec",
    "ResponseEnvelope",
    "Transport",
    "backoff_delay_ms",
    "get_client",
    "get_config",
    "get_server_config",
    "handle_tool_error",
    "mcp",
    "render",
]
