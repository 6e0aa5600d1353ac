"""NetBeez tools package for the NetBeez MCP agent.

Provides MCP tool functions organized by NetBeez domain. Each module
implements plain functions that ``server.py`` registers with FastMCP; they
talk to BeezKeeper through the shared ``NetBeezClient``.

Module layout:
    agents.py           -- Agents, agent logs, performance, AP connections
    targets.py          -- Monitoring targets
    nb_tests.py         -- Continuous tests and raw results
    incidents.py        -- Incidents
    alerts.py           -- Alerts
    wifi.py             -- WiFi profiles
    scheduled_tests.py  -- Scheduled test template results
    statistics.py       -- Legacy statistics API
    path_analysis.py    -- Path analysis results
    actions.py          -- Ad-hoc test runs
    utils.py            -- Shared helpers and error handling
    errors.py           -- Tool-specific error types
"""

from __future__ import annotations

from .actions import run_adhoc_test
from .agents import (
    get_agent,
    get_agent_access_point_connections,
    get_agent_logs,
    get_agent_performance_metrics,
    list_agents,
    search_agents,
)
from .alerts import list_alerts
from .incidents import list_incidents
from .nb_tests import get_test_results, list_tests
from .path_analysis import get_path_analysis_results
from .scheduled_tests import get_scheduled_test_results
from .statistics import get_access_point_metrics, get_agent_statistics, get_test_statistics
from .targets import get_target, list_targets
from .wifi import list_wifi_profiles

__all__ = [
    "get_access_point_metrics",
    "get_agent",
    "get_agent_access_point_connections",
    "get_agent_logs",
    "get_agent_performance_metrics",
    "get_agent_statistics",
    "get_path_analysis_results",
    "get_scheduled_test_results",
    "get_target",
    "get_test_results",
    "get_test_statistics",
    "list_agents",
    "list_alerts",
    "list_incidents",
    "list_targets",
    "list_tests",
    "list_wifi_profiles",
    "run_adhoc_test",
    "search_agents",
]
