"""Guided investigation prompts exposed over MCP.

Each function renders the user message for one workflow; ``server.py``
registers them under their hyphenated prompt names.
"""

from __future__ import annotations


def troubleshoot_target(target_name: str | None = None, target_id: str | None = None) -> str:
    """Walk through diagnosing a target reported as down or slow."""
    if target_id:
        subject = f"target ID {target_id}"
        locate = f"- Use list_targets to find target ID {target_id}"
    elif target_name:
        subject = f'target named "{target_name}"'
        locate = f'- Use list_targets with filter_name_regex to find "{target_name}"'
    else:
        subject = "the specified target"
        locate = "- Use list_targets to identify the target"

    return f"""Please troubleshoot {subject} with this workflow:

## 1. Identify the target
{locate}
- Include test_templates to see which tests are configured

## 2. Open incidents
- Use list_incidents filtered to this target; note start time and acknowledgement

## 3. Current alerts
- Use list_alerts with filter_targets for this target and filter_status=open
- Group them by agent, by test type and by severity

## 4. Read the pattern
- Ping, DNS and HTTP all failing: connectivity loss
- Only DNS failing: name resolution
- Only HTTP failing: application
- Intermittent: check path analysis and statistics

## 5. Raw results
- Use get_test_results for the failing test types and compare agents

## 6. Path
- Use get_path_analysis_results to look for slow hops, path changes or error hops

## 7. Trend
- Use get_test_statistics to see whether the change is sudden or gradual

## Summary
Report the symptoms, how many agents are affected, which test types fail,
the most likely root cause and the next steps."""


def analyze_agent_health(agent_name: str | None = None, agent_id: str | None = None) -> str:
    """Run a full health check on one monitoring agent."""
    if agent_id:
        subject = f"agent ID {agent_id}"
        locate = f"- Use get_agent with agent_id={agent_id} and include=network_interfaces,agent_groups"
    elif agent_name:
        subject = f'agent named "{agent_name}"'
        locate = f'- Use search_agents to find "{agent_name}", then get_agent with its id'
    else:
        subject = "the specified agent"
        locate = "- Use search_agents to find the agent, then get_agent with its id"

    return f"""Please analyze the health of {subject}:

## 1. Status
{locate}
- Is it active? Which software version and agent class?

## 2. Connection history
- Use get_agent_logs for recent connect and disconnect events

## 3. System resources
- Use get_agent_performance_metrics for CPU, memory and disk usage

## 4. Uptime
- Use get_agent_statistics for the uptime trend

## 5. Alerts
- Use list_alerts with filter_agents for this agent and filter_status=open

## 6. Test results
- Use get_test_results for recent ping results from this agent

## 7. WiFi (wireless agents only)
- Use get_access_point_metrics; link_quality should stay above 0.5 and
  signal_level above -75 dBm
- Check get_agent_logs for wpa_supplicant and DHCP events

## Summary
Assess status, stability, resources, monitoring health, WiFi quality
where relevant, and recommend actions."""


def investigate_incident(incident_id: str) -> str:
    """Dig into one incident and reconstruct what happened."""
    return f"""Please investigate incident ID {incident_id}:

## 1. Overview
- Use list_incidents with filter_ids={incident_id} and include=incident_logs
- Note start_ts, end_ts (still open?), ack_ts and the affected agents and targets

## 2. Timeline
- Walk the incident_logs in order: start, changes, end

## 3. Related alerts
- Use list_alerts for the same agents and targets within the incident window
- Which test types alerted, at which severities?

## 4. Agents
- For each affected agent use get_agent and get_agent_logs

## 5. Results during the incident
- Use get_test_results for the affected test types over the incident window

## 6. Scope
- Use list_alerts with filter_targets to see whether other agents were affected

## 7. Path
- Use get_path_analysis_results over the incident window for path changes

## Summary
Report impact, root cause, timeline, scope, current status and how to
prevent a recurrence."""


def network_overview() -> str:
    """Summarize overall network health for a check-in or handoff."""
    return """Please produce a network health overview:

## 1. Agent fleet
- Use list_agents; count active and inactive agents by agent class

## 2. Open incidents
- Use list_incidents and keep those without end_ts
- Count unacknowledged ones and list the longest-running

## 3. Active alerts
- Use list_alerts with filter_status=open
- Count by severity (1 failure, 4 warning) and group by agent, target and test type

## 4. Targets
- Use list_targets with filter_open_incident=true

## 5. WiFi
- Use list_wifi_profiles with filter_open_incident=true

## Report
- Agents: active / total
- Open incidents (unacknowledged)
- Active alerts by severity
- Affected targets and WiFi networks
- Top issues ranked by severity and duration
- Recommendations"""
