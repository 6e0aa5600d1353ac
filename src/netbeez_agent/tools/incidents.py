"""MCP tool for NetBeez incidents.

An incident groups the related alerts of one agent, target or WiFi scope.
It is open while ``end_ts`` is unset and acknowledged once ``ack_ts`` is.
"""

from __future__ import annotations

from typing import Any

from ..query import QueryOptions, build_operator_filter
from .utils import build_pagination, run_tool


def list_incidents(
    filter_ids: str | None = None,
    filter_agents: str | None = None,
    filter_categories: str | None = None,
    filter_agent_classes: str | None = None,
    filter_targets: str | None = None,
    filter_wifi_profile: str | None = None,
    filter_ack_ts_operator: str | None = None,
    filter_ack_ts_value1: str | None = None,
    filter_ack_ts_value2: str | None = None,
    filter_end_ts_operator: str | None = None,
    filter_end_ts_value1: str | None = None,
    filter_end_ts_value2: str | None = None,
    filter_start_ts_operator: str | None = None,
    filter_start_ts_value1: str | None = None,
    filter_start_ts_value2: str | None = None,
    include: str | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    """List incidents, optionally with their event timeline.

    Severity is inherited from the worst alert inside the incident. Use
    ``include='incident_logs'`` to side-load the timeline.

    Args:
        filter_ids: Incident ids (comma-separated).
        filter_agents: Agent ids (comma-separated).
        filter_categories: Agent category (comma-separated).
        filter_agent_classes: Agent class (comma-separated).
        filter_targets: Target ids (comma-separated).
        filter_wifi_profile: WiFi profile ids (comma-separated).
        filter_ack_ts_operator: Acknowledgement time operator.
        filter_ack_ts_value1: Acknowledgement time value.
        filter_ack_ts_value2: Acknowledgement time upper bound (``<=>``).
        filter_end_ts_operator: End time operator.
        filter_end_ts_value1: End time value.
        filter_end_ts_value2: End time upper bound (``<=>``).
        filter_start_ts_operator: Start time operator.
        filter_start_ts_value1: Start time value.
        filter_start_ts_value2: Start time upper bound (``<=>``).
        include: ``incident_logs``.
        page: Page offset.
        page_size: Results per page.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        return client.list_incidents(
            QueryOptions(
                filters={
                    "ids": filter_ids,
                    "agents": filter_agents,
                    "categories": filter_categories,
                    "agent_classes": filter_agent_classes,
                    "targets": filter_targets,
                    "wifi_profile": filter_wifi_profile,
                },
                operator_filters={
                    "ack_ts": build_operator_filter(
                        filter_ack_ts_operator, filter_ack_ts_value1, filter_ack_ts_value2
                    ),
                    "end_ts": build_operator_filter(
                        filter_end_ts_operator, filter_end_ts_value1, filter_end_ts_value2
                    ),
                    "start_ts": build_operator_filter(
                        filter_start_ts_operator, filter_start_ts_value1, filter_start_ts_value2
                    ),
                },
                include=include,
                pagination=build_pagination(page, page_size),
            )
        )

    return run_tool("list_incidents", call, "incident(s)")
