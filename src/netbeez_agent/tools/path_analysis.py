"""MCP tool for path analysis (hop-by-hop traceroute) results.

Each result lists per-hop RTT, IP address, NAT detection, destination,
port and hop number, plus any error codes.
"""

from __future__ import annotations

from typing import Any

from ..query import QueryOptions, build_operator_filter
from .utils import build_pagination, run_tool


def get_path_analysis_results(
    filter_agents: str | None = None,
    filter_tests: str | None = None,
    filter_test_templates: str | None = None,
    filter_ip_address: str | None = None,
    filter_ts_operator: str | None = None,
    filter_ts_value1: str | None = None,
    filter_ts_value2: str | None = None,
    timestamp: str | None = None,
    include: str | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    """Get path analysis results, or the single result at ``timestamp``.

    When ``timestamp`` is given only ``include`` applies; the other filters
    and pagination are ignored.

    Args:
        filter_agents: Agent ids (comma-separated).
        filter_tests: Test ids (comma-separated).
        filter_test_templates: Test template ids (comma-separated).
        filter_ip_address: An IP address that appears in the path.
        filter_ts_operator: One of ``=``, ``<``, ``>``, ``<=``, ``>=``, ``<=>``.
        filter_ts_value1: Timestamp value.
        filter_ts_value2: Upper bound, required with ``<=>``.
        timestamp: Exact timestamp of a single result.
        include: ``supplemental`` for extra hop metadata.
        page: Page offset.
        page_size: Results per page.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        if timestamp:
            return client.get_path_analysis_result_by_timestamp(timestamp, QueryOptions(include=include))
        return client.get_path_analysis_results(
            QueryOptions(
                filters={
                    "agents": filter_agents,
                    "tests": filter_tests,
                    "test_templates": filter_test_templates,
                    "ip_address": filter_ip_address,
                },
                operator_filters={
                    "ts": build_operator_filter(filter_ts_operator, filter_ts_value1, filter_ts_value2),
                },
                include=include,
                pagination=build_pagination(page, page_size),
            )
        )

    return run_tool("get_path_analysis_results", call, "path analysis result(s)")
