"""MCP tool for NetBeez alerts.

Alerts are raised by alert detectors (up-down, baseline, watermark).
Severity levels: 1 failure, 4 warning, 6 cleared.
"""

from __future__ import annotations

from typing import Any

from ..query import QueryOptions, build_operator_filter
from .errors import InvalidParameterError
from .utils import build_pagination, run_tool

_VALID_STATUSES = frozenset({"open", "closed"})


def list_alerts(
    filter_agents: str | None = None,
    filter_categories: str | None = None,
    filter_agent_classes: str | None = None,
    filter_agent_groups: str | None = None,
    filter_targets: str | None = None,
    filter_tests: str | None = None,
    filter_test_templates: str | None = None,
    filter_alert_detectors: str | None = None,
    filter_severity_operator: str | None = None,
    filter_severity_value1: str | None = None,
    filter_ts_operator: str | None = None,
    filter_ts_value1: str | None = None,
    filter_ts_value2: str | None = None,
    filter_closed_ts_operator: str | None = None,
    filter_closed_ts_value1: str | None = None,
    filter_closed_ts_value2: str | None = None,
    filter_message: str | None = None,
    filter_status: str | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    """List alerts with filtering by scope, severity, time and status.

    Args:
        filter_agents: Agent ids (comma-separated).
        filter_categories: Agent category (comma-separated).
        filter_agent_classes: Agent class (comma-separated).
        filter_agent_groups: Agent group ids (comma-separated).
        filter_targets: Target ids (comma-separated).
        filter_tests: Test ids (comma-separated).
        filter_test_templates: Test template ids (comma-separated).
        filter_alert_detectors: Alert detector ids (comma-separated).
        filter_severity_operator: Severity operator (``=``, ``<``, ``>``,
            ``<=``, ``>=``).
        filter_severity_value1: Severity value.
        filter_ts_operator: Alert time operator.
        filter_ts_value1: Alert time value.
        filter_ts_value2: Alert time upper bound (``<=>``).
        filter_closed_ts_operator: Closed time operator.
        filter_closed_ts_value1: Closed time value.
        filter_closed_ts_value2: Closed time upper bound (``<=>``).
        filter_message: Alert message text.
        filter_status: 'open' or 'closed'.
        page: Page offset.
        page_size: Results per page.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        if filter_status is not None and filter_status not in _VALID_STATUSES:
            raise InvalidParameterError(
                f"Invalid filter_status: '{filter_status}'. Valid values: {sorted(_VALID_STATUSES)}",
                parameter="filter_status",
                value=filter_status,
                valid=_VALID_STATUSES,
            )
        return client.list_alerts(
            QueryOptions(
                filters={
                    "agents": filter_agents,
                    "categories": filter_categories,
                    "agent_classes": filter_agent_classes,
                    "agent_groups": filter_agent_groups,
                    "targets": filter_targets,
                    "tests": filter_tests,
                    "test_templates": filter_test_templates,
                    "alert_detectors": filter_alert_detectors,
                    "message": filter_message,
                    "status": filter_status,
                },
                operator_filters={
                    "severity": build_operator_filter(filter_severity_operator, filter_severity_value1),
                    "ts": build_operator_filter(filter_ts_operator, filter_ts_value1, filter_ts_value2),
                    "closed_ts": build_operator_filter(
                        filter_closed_ts_operator, filter_closed_ts_value1, filter_closed_ts_value2
                    ),
                },
                pagination=build_pagination(page, page_size),
            )
        )

    return run_tool("list_alerts", call, "alert(s)")
