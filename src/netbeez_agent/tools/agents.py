"""MCP tools for NetBeez monitoring agents.

Provides ``list_agents``, ``get_agent``, ``search_agents``,
``get_agent_logs``, ``get_agent_performance_metrics`` and
``get_agent_access_point_connections``, all backed by the ``/agents``
JSON:API endpoints.
"""

from __future__ import annotations

import logging
from typing import Any

from ..query import QueryOptions, build_operator_filter
from .utils import build_pagination, run_tool

logger = logging.getLogger(__name__)


def list_agents(
    filter_name: str | None = None,
    filter_name_regex: str | None = None,
    filter_categories: str | None = None,
    filter_agent_classes: str | None = None,
    filter_active: bool | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    """List NetBeez monitoring agents with optional filtering.

    Returns agent name, active status, class, software version, network
    interfaces and associated test ids.

    Args:
        filter_name: Exact agent name.
        filter_name_regex: Agent name regex pattern.
        filter_categories: ``network_agent`` or ``remote_worker_agent``
            (comma-separated).
        filter_agent_classes: container, faste, wireless, gige, virtual,
            external, software, mac, windows (comma-separated).
        filter_active: True for online agents, False for offline ones.
        page: Page offset.
        page_size: Results per page (max 100).

    Returns:
        A dict with success status, data, message, action, and error fields.
    """
    logger.info("Listing agents (active=%s, classes=%s)", filter_active, filter_agent_classes)

    def call(client: Any) -> Any:
        return client.list_agents(
            QueryOptions(
                filters={
                    "name": filter_name,
                    "name[regex]": filter_name_regex,
                    "categories": filter_categories,
                    "agent_classes": filter_agent_classes,
                    "active": filter_active,
                },
                pagination=build_pagination(page, page_size),
            )
        )

    return run_tool("list_agents", call, "agent(s)")


def get_agent(agent_id: int, include: str | None = None) -> dict[str, Any]:
    """Get one agent by id, optionally side-loading relationships.

    Args:
        agent_id: Numeric agent id.
        include: ``network_interfaces``, ``agent_groups`` (comma-separated).

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        return client.get_agent(agent_id, QueryOptions(include=include))

    return run_tool("get_agent", call, f"agent {agent_id}")


def search_agents(
    query: str,
    use_regex: bool = False,
    filter_categories: str | None = None,
    filter_agent_classes: str | None = None,
    filter_active: bool | None = None,
) -> dict[str, Any]:
    """Search agents by exact name or by regex pattern.

    Args:
        query: Agent name, or a regex when ``use_regex`` is set.
        use_regex: Treat ``query`` as a regex pattern.
        filter_categories: Category filter (comma-separated).
        filter_agent_classes: Agent class filter (comma-separated).
        filter_active: Active status filter.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """
    name_key = "name[regex]" if use_regex else "name"

    def call(client: Any) -> Any:
        if not query or not query.strip():
            raise ValueError("query must not be empty")
        return client.list_agents(
            QueryOptions(
                filters={
                    "categories": filter_categories,
                    "agent_classes": filter_agent_classes,
                    "active": filter_active,
                    name_key: query.strip(),
                }
            )
        )

    return run_tool("search_agents", call, "matching agent(s)")


def get_agent_logs(
    agent_id: int,
    filter_types: str | None = None,
    filter_ts_operator: str | None = None,
    filter_ts_value1: str | None = None,
    filter_ts_value2: str | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    """Get connect/disconnect event logs for an agent.

    Wireless agents also report wpa_supplicant and DHCP events.

    Args:
        agent_id: Numeric agent id.
        filter_types: Log types such as DISCONNECT, CONNECT (comma-separated).
        filter_ts_operator: One of ``=``, ``<``, ``>``, ``<=``, ``>=``, ``<=>``.
        filter_ts_value1: Timestamp (ISO 8601 or Unix).
        filter_ts_value2: Upper bound, required with ``<=>``.
        page: Page offset.
        page_size: Results per page.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        return client.get_agent_logs(
            agent_id,
            QueryOptions(
                filters={"types": filter_types},
                operator_filters={
                    "ts": build_operator_filter(filter_ts_operator, filter_ts_value1, filter_ts_value2),
                },
                pagination=build_pagination(page, page_size),
            ),
        )

    return run_tool("get_agent_logs", call, "log entr(ies)")


def get_agent_performance_metrics(
    agent_id: int,
    from_ts: str | None = None,
    to_ts: str | None = None,
) -> dict[str, Any]:
    """Get CPU, memory and disk usage samples for an agent.

    Args:
        agent_id: Numeric agent id.
        from_ts: Start timestamp (ISO 8601 or Unix).
        to_ts: End timestamp (ISO 8601 or Unix).

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        return client.get_agent_performance_metrics(
            agent_id,
            QueryOptions(extra_params={"from": from_ts, "to": to_ts}),
        )

    return run_tool("get_agent_performance_metrics", call, "performance sample(s)")


def get_agent_access_point_connections(
    agent_id: int,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    """Get the WiFi access point association history of a wireless agent.

    Returns BSSID, SSID, signal strength and DHCP status per connection.

    Args:
        agent_id: Numeric agent id.
        page: Page offset.
        page_size: Results per page.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        return client.get_agent_access_point_connections(
            agent_id,
            QueryOptions(pagination=build_pagination(page, page_size)),
        )

    return run_tool("get_agent_access_point_connections", call, "access point connection(s)")
