"""Static reference documents served as MCP resources.

Three markdown guides help an assistant choose tools and interpret
NetBeez data:

- ``netbeez://data-model``: entities, relationships and where each time
  series lives.
- ``netbeez://correlation-guide``: comparing results across agents and
  reading alert severities.
- ``netbeez://troubleshooting-guide``: step-by-step diagnosis workflows.
"""

from __future__ import annotations

from typing import NamedTuple

MARKDOWN_MIME = "text/markdown"


class ResourceDocument(NamedTuple):
    uri: str
    name: str
    description: str
    content: str


DATA_MODEL = """\
# NetBeez Data Model

## Entities

**Agent**: a monitoring probe. Fields: id, name, active, agent_class
(container, faste, wireless, gige, virtual, external, software, mac,
windows), category (network_agent, remote_worker_agent), software_version,
ip_address, mac_address, location. An agent owns tests, network interfaces,
tags and agent groups, and reports performance metrics, connection logs
and (when wireless) access point connections.

**Target**: something being monitored (hostname, IP or URL). Owns test
templates; each template sets test_type_id, interval and alert detectors.

**Test (nb_test)**: one check from one agent to one target, created from
a template. Fields: id, test_type (ping, dns, http, traceroute,
path_analysis), schedule_type, current_state, alert_mode.

**Alert**: raised by an alert detector (up-down, baseline, watermark) on a
test. Fields: id, severity (1 failure, 4 warning, 6 cleared), message, ts,
closed_ts, status (open, closed).

**Incident**: groups the alerts of one agent/target or agent/WiFi scope.
Fields: id, start_ts, end_ts (null while open), ack_ts. Side-load the
event timeline with include=incident_logs.

**WiFi profile**: ssid, description, encryption_method,
authentication_method.

## Where the time series live

| Data | Endpoint | Tool |
|------|----------|------|
| Ping/DNS/HTTP results | `/nb_tests/{type}/results` | `get_test_results` |
| Traceroute results | `/nb_tests/traceroutes/results` | `get_test_results` |
| Path analysis | `/nb_tests/path_analysis/results` | `get_path_analysis_results` |
| Aggregated test statistics | `/apis/nb_test_statistics.json` | `get_test_statistics` |
| Agent uptime | `/apis/nb_agent_statistics.json` | `get_agent_statistics` |
| Agent CPU/memory/disk | `/agents/{id}/performance_metrics` | `get_agent_performance_metrics` |
| Agent connect/disconnect logs | `/agents/{id}/logs` | `get_agent_logs` |
| Access point metrics | `/apis/access_point_metrics.json` | `get_access_point_metrics` |
| Access point metrics, downsampled | `/apis/access_point_metrics/sample.json` | `get_access_point_metrics` with `cardinality` |
| Access point connections | `/agents/{id}/access_point_connections` | `get_agent_access_point_connections` |
| Scheduled Iperf/Speed/VoIP results | `/scheduled_nb_test_templates/{id}/results` | `get_scheduled_test_results` |

## Identifiers

- agent_id: the agent running the test
- nb_target_id: the monitored target
- nb_test_template_id: the template linking target and test type; shared
  by every agent running it
- nb_test_id: one agent's instance of a template
- alert_detector_id: the rule evaluating a test's results
"""

CORRELATION_GUIDE = """\
# Cross-Agent Correlation

Many agents run the same tests against the same targets. Comparing them
tells a local problem (one agent or site) from a widespread one (target,
service or backbone).

## Scope the problem

1. `list_alerts` with `filter_status=open`.
2. Same target alerting from many agents: suspect the target or service.
3. One agent alerting on many targets: suspect the agent or its site.
4. One agent and one target: investigate both sides.

## Compare test types for one target

- Ping and DNS both failing: general connectivity loss. Check the agent
  with `get_agent` and `get_agent_logs`.
- Ping failing, HTTP fine: the target probably blocks ICMP.
- Ping fine, DNS slow: name resolution problem; check whether the DNS
  server is shared across agents.
- Ping and DNS fine, HTTP slow: application problem; check the path with
  `get_path_analysis_results`.
- Everything fine now: look for intermittent trends with
  `get_test_statistics`.

## Line up the timeline

Alert `ts`/`closed_ts`, agent log events, raw test values, path changes
and WiFi signal samples share timestamps. Align them before drawing
conclusions.

## Severities and detectors

| Severity | Meaning |
|----------|---------|
| 1 | Failure: loss of reachability, DNS failure, HTTP timeout |
| 4 | Warning: degraded latency, partial loss, slow responses |
| 6 | Cleared: the test recovered |

Up-down detectors are binary; baseline detectors compare against history;
watermark detectors compare against a fixed threshold.

## Incidents

An incident covers one agent/target (or agent/WiFi profile) pair and rolls
up alerts of every test type for it. start_ts is the first alert, end_ts
is set once everything cleared, ack_ts once an operator acknowledged it.
Open and unacknowledged incidents need attention first; long-open ones
point at persistent faults; many incident logs point at flapping.

## WiFi agents

Signal is poor when link_quality drops below 0.5 or signal_level below
-75 dBm. Frequent access point changes mean roaming. wpa_supplicant and
DHCP events in the agent logs explain association and addressing
failures. If wired agents reach the same target fine, the fault is WiFi.

## Comparing agents on one test

Query `get_test_statistics` with the shared `nb_test_template_id` and
each `agent_id`. One agent consistently worse means a local path issue;
all agents worse together means the target or backbone.
"""

TROUBLESHOOTING_GUIDE = """\
# Troubleshooting Workflows

## Network, DNS or application?

1. Find the target (`list_targets` with `filter_name_regex`).
2. Look for open incidents on it (`list_incidents` with `filter_targets`).
3. List its open alerts (`list_alerts` with `filter_targets` and
   `filter_status=open`) and group them by test type.

| Ping | DNS | HTTP | Likely cause |
|------|-----|------|--------------|
| Fail | Fail | Fail | Agent offline or network down |
| Fail | OK | Fail | ICMP blocked plus an application or routing fault |
| OK | Fail | Fail | DNS resolution |
| OK | OK | Fail | Application down |
| OK | OK | Slow | Application performance or routing |
| Slow | OK | Slow | Network latency; find the slow hop |

4. Read the raw values with `get_test_results`, the path with
   `get_path_analysis_results` and the trend with `get_test_statistics`.

## One agent or all agents?

Group open alerts for the target by agent. All agents: target problem.
One agent: check `get_agent`, `get_agent_logs`,
`get_agent_performance_metrics` and `get_agent_statistics`. Some agents:
compare their paths for a shared hop.

## WiFi or wired?

If only wireless agents alert, check `get_access_point_metrics`,
wpa_supplicant and DHCP events in `get_agent_logs`, and
`list_wifi_profiles` with `filter_open_incident=true`.

## Hop-by-hop

In `get_path_analysis_results` look for the hop with the largest RTT
jump, hops with error codes, a different IP at the same hop number
between samples, and NAT boundaries.

## Agent health

Check status and version (`get_agent`), disconnect history
(`get_agent_logs`), CPU/memory/disk (`get_agent_performance_metrics`) and
uptime trend (`get_agent_statistics`).

## Tool picker

| Question | Start with |
|----------|------------|
| What is monitored? | `list_targets`, `list_agents`, `list_tests` |
| What is alerting now? | `list_alerts` (status open), `list_incidents` |
| Is an agent healthy? | `get_agent`, `get_agent_statistics` |
| What are the raw values? | `get_test_results` |
| What does the path look like? | `get_path_analysis_results` |
| How is WiFi doing? | `get_access_point_metrics` |
| Run a speed, VoIP or Iperf test now | `run_adhoc_test` |
| Long-term trends | `get_test_statistics` |
"""

RESOURCES: tuple[ResourceDocument, ...] = (
    ResourceDocument(
        uri="netbeez://data-model",
        name="NetBeez Data Model",
        description="Entity relationships, data shapes and the time series catalog",
        content=DATA_MODEL,
    ),
    ResourceDocument(
        uri="netbeez://correlation-guide",
        name="NetBeez Correlation Guide",
        description="Cross-agent correlation, alert severities and incident aggregation",
        content=CORRELATION_GUIDE,
    ),
    ResourceDocument(
        uri="netbeez://troubleshooting-guide",
        name="NetBeez Troubleshooting Guide",
        description="Diagnosis workflows for network, DNS, application, WiFi and agent issues",
        content=TROUBLESHOOTING_GUIDE,
    ),
)


def get_resource(uri: str) -> ResourceDocument:
    """Return the document registered under ``uri``.

    Raises:
        KeyError: If no document has that URI.
    """
    for document in RESOURCES:
        if document.uri == uri:
            return document
    raise KeyError(uri)
