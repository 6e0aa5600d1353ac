"""MCP tool for running ad-hoc NetBeez tests.

Only Iperf, Network Speed and VoIP tests can be started ad hoc; regular
ping/DNS/HTTP/traceroute tests cannot. A run is a two-phase operation: the
test run is created, then polled until every agent has finished or the
configured wait ceiling passes.

Test type ids: 5 Iperf, 7 Network Speed, 10 VoIP.
Speed test types: 2 NDT, 3 fast.com.
"""

from __future__ import annotations

import logging
from typing import Any

import anyio.to_thread

from ..models import JobOutcome
from .errors import InvalidParameterError
from .utils import make_response, run_tool

logger = logging.getLogger(__name__)

TEST_TYPE_IPERF = 5
TEST_TYPE_NETWORK_SPEED = 7
TEST_TYPE_VOIP = 10

_VALID_TEST_TYPES = frozenset({TEST_TYPE_IPERF, TEST_TYPE_NETWORK_SPEED, TEST_TYPE_VOIP})
_VALID_SPEEDTEST_TYPES = frozenset({2, 3})
_VALID_IPERF_TYPES = frozenset({1, 2})
_VALID_IPERF_VERSIONS = frozenset({2, 3})

# Iperf defaults: 10 s TCP run against port 5001 with iperf3, one stream
IPERF_DEFAULTS: dict[str, Any] = {
    "iperf_time": 10,
    "iperf_type": 1,
    "iperf_port": 5001,
    "iperf_version": 3,
    "parallel_streams": 1,
    "reverse": False,
    "tcp_window": 1,
}


def _check_choice(name: str, value: int | None, valid: frozenset[int]) -> None:
    if value is not None and value not in valid:
        raise InvalidParameterError(
            f"Invalid {name}: {value}. Valid values: {sorted(valid)}",
            parameter=name,
            value=value,
            valid=valid,
        )


def build_adhoc_payload(
    agent_ids: list[int],
    test_type_id: int,
    *,
    speedtest_type: int | None = None,
    target: str | None = None,
    secure: bool | None = None,
    destination_agent_id: int | None = None,
    iperf_time: int | None = None,
    iperf_type: int | None = None,
    iperf_port: int | None = None,
    iperf_version: int | None = None,
    parallel_streams: int | None = None,
    reverse: bool | None = None,
    bandwidth: float | None = None,
) -> dict[str, Any]:
    """Build the JSON:API document that creates an ad-hoc test run.

    Raises:
        InvalidParameterError: If a parameter is out of range, or an Iperf
            test has no ``destination_agent_id``.
    """
    if not agent_ids:
        raise InvalidParameterError(
            "agent_ids must contain at least one agent id", parameter="agent_ids", value=agent_ids
        )
    _check_choice("test_type_id", test_type_id, _VALID_TEST_TYPES)
    _check_choice("speedtest_type", speedtest_type, _VALID_SPEEDTEST_TYPES)

    attributes: dict[str, Any] = {
        "agent_ids": list(agent_ids),
        "test_type_id": test_type_id,
    }

    if test_type_id == TEST_TYPE_IPERF:
        if not destination_agent_id:
            raise InvalidParameterError(
                "destination_agent_id is required for Iperf tests (test_type_id 5)",
                parameter="destination_agent_id",
            )
        _check_choice("iperf_type", iperf_type, _VALID_IPERF_TYPES)
        _check_choice("iperf_version", iperf_version, _VALID_IPERF_VERSIONS)
        if iperf_port is not None and not 1 <= iperf_port <= 65535:
            raise InvalidParameterError(
                f"iperf_port must be between 1 and 65535, got {iperf_port}",
                parameter="iperf_port",
                value=iperf_port,
            )
        if parallel_streams is not None and not 1 <= parallel_streams <= 16:
            raise InvalidParameterError(
                f"parallel_streams must be between 1 and 16, got {parallel_streams}",
                parameter="parallel_streams",
                value=parallel_streams,
            )

        configuration: dict[str, Any] = {"target_is_agent": destination_agent_id, **IPERF_DEFAULTS}
        overrides = {
            "iperf_time": iperf_time,
            "iperf_type": iperf_type,
            "iperf_port": iperf_port,
            "iperf_version": iperf_version,
            "parallel_streams": parallel_streams,
            "reverse": reverse,
        }
        configuration.update({key: value for key, value in overrides.items() if value is not None})
        if bandwidth is not None:
            configuration["bandwidth"] = bandwidth
        attributes["configuration"] = configuration

    if speedtest_type is not None:
        attributes["speedtest_type"] = speedtest_type
    if target:
        attributes["target"] = target
    if secure is not None:
        attributes["secure"] = secure

    return {"data": {"type": "multiagent_nb_test_runs", "attributes": attributes}}


def _outcome_response(outcome: JobOutcome) -> dict[str, Any]:
    if outcome.succeeded:
        return make_response(
            success=True,
            data=outcome.to_dict(),
            message=f"Ad-hoc test run {outcome.job_id} completed after {outcome.polls} poll(s)",
            action="run_adhoc_test",
        )
    if outcome.timed_out:
        return make_response(
            success=False,
            data=outcome.to_dict(),
            message=(
                f"Ad-hoc test run {outcome.job_id} did not complete within the wait limit. "
                f"Last state: {outcome.state}. Results can be checked later using the test run id."
            ),
            action="run_adhoc_test",
            error="JOB_TIMED_OUT",
        )
    return make_response(
        success=False,
        data=outcome.to_dict(),
        message=f"Ad-hoc test run {outcome.job_id} finished with state '{outcome.state}'",
        action="run_adhoc_test",
        error="JOB_FAILED",
    )


async def run_adhoc_test(
    agent_ids: list[int],
    test_type_id: int,
    speedtest_type: int | None = None,
    target: str | None = None,
    secure: bool | None = None,
    destination_agent_id: int | None = None,
    iperf_time: int | None = None,
    iperf_type: int | None = None,
    iperf_port: int | None = None,
    iperf_version: int | None = None,
    parallel_streams: int | None = None,
    reverse: bool | None = None,
    bandwidth: float | None = None,
) -> dict[str, Any]:
    """Run an ad-hoc Iperf, Network Speed or VoIP test and wait for it.

    - **Iperf** (5): throughput between two agents; requires
      ``destination_agent_id``, which runs the iperf server.
    - **Network Speed** (7): download/upload speed and latency.
    - **VoIP** (10): latency, jitter, packet loss and MOS score.

    A run that fails remotely or outlives the wait limit is reported with
    ``success=False`` and the last status payload, not as an exception.
    The blocking poll loop runs in a worker thread so other requests keep
    being served while the test is in progress.

    Args:
        agent_ids: Agents to run the test on (at least one).
        test_type_id: 5 Iperf, 7 Network Speed, 10 VoIP.
        speedtest_type: 2 NDT or 3 fast.com (Network Speed only).
        target: Target hostname or IP (VoIP).
        secure: Use a secure connection (VoIP).
        destination_agent_id: Iperf server agent (required for Iperf).
        iperf_time: Duration in seconds (default 10).
        iperf_type: 1 TCP (default) or 2 UDP.
        iperf_port: Server port (default 5001).
        iperf_version: 2 or 3 (default 3).
        parallel_streams: 1 to 16 (default 1).
        reverse: Server sends, client receives (default False).
        bandwidth: Bandwidth limit in Mbps (UDP only).

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        payload = build_adhoc_payload(
            agent_ids,
            test_type_id,
            speedtest_type=speedtest_type,
            target=target,
            secure=secure,
            destination_agent_id=destination_agent_id,
            iperf_time=iperf_time,
            iperf_type=iperf_type,
            iperf_port=iperf_port,
            iperf_version=iperf_version,
            parallel_streams=parallel_streams,
            reverse=reverse,
            bandwidth=bandwidth,
        )
        logger.info("Starting ad-hoc test type %d on agents %s", test_type_id, agent_ids)
        return _outcome_response(client.run_adhoc_test_and_wait(payload))

    return await anyio.to_thread.run_sync(run_tool, "run_adhoc_test", call, "ad-hoc test run")
