"""MCP tools for NetBeez monitoring targets.

A target is a host, URL or IP address being monitored; each carries the
test templates that define how agents probe it.
"""

from __future__ import annotations

from typing import Any

from ..query import QueryOptions
from .utils import build_pagination, run_tool


def list_targets(
    filter_name_regex: str | None = None,
    filter_agents: str | None = None,
    filter_categories: str | None = None,
    filter_agent_classes: str | None = None,
    filter_agent_groups: str | None = None,
    filter_open_incident: bool | None = None,
    filter_wifi: bool | None = None,
    filter_wired: bool | None = None,
    include: str | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    """List monitoring targets with their test templates and alert counts.

    Args:
        filter_name_regex: Target name regex pattern.
        filter_agents: Agent ids (comma-separated).
        filter_categories: Agent category (comma-separated).
        filter_agent_classes: Agent class (comma-separated).
        filter_agent_groups: Agent group ids (comma-separated).
        filter_open_incident: Only targets with (True) or without (False)
            open incidents.
        filter_wifi: Only targets monitored over WiFi.
        filter_wired: Only targets monitored over wired links.
        include: ``test_templates``.
        page: Page offset.
        page_size: Results per page.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        return client.list_targets(
            QueryOptions(
                filters={
                    "name[regex]": filter_name_regex,
                    "agents": filter_agents,
                    "categories": filter_categories,
                    "agent_classes": filter_agent_classes,
                    "agent_groups": filter_agent_groups,
                    "open_incident": filter_open_incident,
                    "wifi": filter_wifi,
                    "wired": filter_wired,
                },
                include=include,
                pagination=build_pagination(page, page_size),
            )
        )

    return run_tool("list_targets", call, "target(s)")


def get_target(target_id: int, include: str | None = None) -> dict[str, Any]:
    """Get one target by id.

    The targets API has no single-resource route; the collection is
    filtered with ``filter[ids]`` instead.

    Args:
        target_id: Numeric target id.
        include: ``test_templates``.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        return client.list_targets(QueryOptions(filters={"ids": str(target_id)}, include=include))

    return run_tool("get_target", call, "target(s)")
