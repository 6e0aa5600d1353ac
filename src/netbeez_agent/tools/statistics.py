"""MCP tools backed by the legacy NetBeez statistics API.

These endpoints (``/apis/*.json``) return pre-aggregated time series as
bare objects rather than JSON:API documents:

- ``get_test_statistics``: ``{"nb_test_statistics": [...]}``
- ``get_agent_statistics``: ``{"agent_stats": [...]}``
- ``get_access_point_metrics``: ``{"metrics": [...]}``

``from`` and ``to`` are reserved words in Python, so the tools take
``from_ts`` and ``to_ts`` and send them under the API's names.
"""

from __future__ import annotations

import logging
from typing import Any

from .utils import run_tool

logger = logging.getLogger(__name__)


def get_test_statistics(
    nb_test_id: int | None = None,
    agent_id: int | None = None,
    nb_test_template_id: int | None = None,
    nb_target_id: int | None = None,
    window_size: int | None = None,
    granularity: str | None = None,
    from_ts: str | None = None,
    to_ts: str | None = None,
    last: int | None = None,
    metric_type: str | None = None,
    grouping: str | None = None,
    test_type_id: int | None = None,
    ts_order: str | None = None,
    sort_by: str | None = None,
    sort_by_order: str | None = None,
    value_operator: str | None = None,
    value_watermark: float | None = None,
) -> dict[str, Any]:
    """Get aggregated test statistics over time.

    Best suited to long-range trends: each point carries an aggregated
    value, window size, datapoint count and error count.

    Args:
        nb_test_id: Test id.
        agent_id: Agent id.
        nb_test_template_id: Test template id.
        nb_target_id: Target id.
        window_size: Aggregation window in seconds.
        granularity: Aggregation granularity.
        from_ts: Start time (Unix or ISO 8601).
        to_ts: End time (Unix or ISO 8601).
        last: Return only the last N points.
        metric_type: Metric to retrieve.
        grouping: Aggregation grouping.
        test_type_id: Test type id.
        ts_order: 'asc' or 'desc' by timestamp.
        sort_by: Sort field.
        sort_by_order: 'asc' or 'desc'.
        value_operator: Comparison operator for watermark filtering.
        value_watermark: Watermark threshold.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """
    params: dict[str, Any] = {
        "nb_test_id": nb_test_id,
        "agent_id": agent_id,
        "nb_test_template_id": nb_test_template_id,
        "nb_target_id": nb_target_id,
        "window_size": window_size,
        "granularity": granularity,
        "from": from_ts,
        "to": to_ts,
        "last": last,
        "metric_type": metric_type,
        "grouping": grouping,
        "test_type_id": test_type_id,
        "ts_order": ts_order,
        "sort_by": sort_by,
        "sort_by_order": sort_by_order,
        "value_operator": value_operator,
        "value_watermark": value_watermark,
    }

    def call(client: Any) -> Any:
        return client.get_test_statistics(**params)

    return run_tool("get_test_statistics", call, "test statistics")


def get_agent_statistics(
    agent_id: int,
    from_ts: str | None = None,
    to_ts: str | None = None,
    window_size: int | None = None,
    last: int | None = None,
) -> dict[str, Any]:
    """Get uptime statistics for one agent.

    Args:
        agent_id: Agent id (required).
        from_ts: Start time (Unix or ISO 8601).
        to_ts: End time (Unix or ISO 8601).
        window_size: Aggregation window in seconds.
        last: Return only the last N points.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """
    params: dict[str, Any] = {"from": from_ts, "to": to_ts, "window_size": window_size, "last": last}

    def call(client: Any) -> Any:
        return client.get_agent_statistics(agent_id, **params)

    return run_tool("get_agent_statistics", call, f"agent {agent_id} statistics")


def get_access_point_metrics(
    agent_id: int | None = None,
    access_point_id: int | None = None,
    from_ts: str | None = None,
    to_ts: str | None = None,
    cardinality: int | None = None,
) -> dict[str, Any]:
    """Get WiFi access point signal metrics over time.

    Each sample carries bit rate, channel, link quality (0.0 to 1.0),
    signal level (dBm) and receive/transmit rates.

    Args:
        agent_id: Agent id.
        access_point_id: Access point id.
        from_ts: Start time (Unix or ISO 8601).
        to_ts: End time (Unix or ISO 8601).
        cardinality: When set, fetch this many downsampled points from
            the sample endpoint instead of every raw sample.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """
    params: dict[str, Any] = {
        "agent_id": agent_id,
        "access_point_id": access_point_id,
        "from": from_ts,
        "to": to_ts,
    }

    def call(client: Any) -> Any:
        if cardinality is not None:
            logger.debug("Using downsampled access point metrics (cardinality=%d)", cardinality)
            return client.get_access_point_metrics_sample(**params, cardinality=cardinality)
        return client.get_access_point_metrics(**params)

    return run_tool("get_access_point_metrics", call, "access point metrics")
