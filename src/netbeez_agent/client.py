"""NetBeez REST client for the NetBeez MCP agent.

Provides a reusable ``NetBeezClient`` class that every MCP tool uses to talk
to a BeezKeeper instance. The client speaks to two API surfaces that differ
only in how the API key is attached:

- The JSON:API entity endpoints (agents, targets, tests, alerts, ...):
  ``Authorization: Bearer <API_KEY>``, bracketed filter/include/order/page
  query parameters rendered by ``netbeez_agent.query``.
- The legacy statistics endpoints (``/apis/*.json``):
  ``Authorization: <API_KEY>`` plus ``API-VERSION: v1`` and flat query
  parameters.

All HTTP work (retry, backoff, error classification) is delegated to the
shared ``Transport``; ad-hoc test runs go through a ``JobOrchestrator``.

Usage::

    from netbeez_agent.client import NetBeezClient
    from netbeez_agent.query import QueryOptions

    client = NetBeezClient(
        base_url="https://demo1.netbeezcloud.net",
        api_key="secret",
    )
    agents = client.list_agents(QueryOptions(filters={"active": True}))
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Literal

import requests

from .jobs import JobOrchestrator
from .models import DEFAULT_RETRIES, JobConfig, JobOutcome, RequestSpec, ResponseEnvelope
from .query import QueryOptions, render
from .transport import DEFAULT_TIMEOUT, Transport

logger = logging.getLogger(__name__)

LEGACY_API_VERSION = "v1"

TestResultType = Literal["ping", "dns", "http", "traceroute"]


def _with_beta(options: QueryOptions | None) -> QueryOptions:
    """Return ``options`` with the beta flag on unless the caller set it."""
    if options is None:
        return QueryOptions(beta=True)
    if "beta" in options.model_fields_set:
        return options
    return options.model_copy(update={"beta": True})


def _stringify_legacy(params: dict[str, Any]) -> dict[str, str]:
    """Convert legacy query values to strings, dropping unset ones."""
    result: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            result[key] = "true" if value else "false"
        else:
            result[key] = str(value)
    return result


class NetBeezClient:
    """Client for the NetBeez JSON:API and legacy statistics API.

    Args:
        base_url: BeezKeeper instance URL (e.g. ``https://demo1.netbeezcloud.net``).
        api_key: API key from Dashboard > Settings > API Keys.
        timeout: Request timeout in seconds. Defaults to 30 seconds.
        verify_ssl: Verify TLS certificates. Defaults to True.
        max_retries: Retry budget applied to every request. Defaults to 2.
        job_config: Default polling policy for ad-hoc test runs.
        session: Pre-configured ``requests.Session`` to use.
        transport: Pre-built ``Transport``; when given, ``timeout``,
            ``verify_ssl`` and ``session`` are ignored.
        sleep: Wait function shared by the retry and poll loops.
        clock: Monotonic clock for the poll deadline.

    Example::

        with NetBeezClient("https://demo1.netbeezcloud.net", "secret") as client:
            alerts = client.list_alerts(QueryOptions(filters={"status": "open"}))
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float | tuple[float, float] = DEFAULT_TIMEOUT,
        *,
        verify_ssl: bool = True,
        max_retries: int = DEFAULT_RETRIES,
        job_config: JobConfig | None = None,
        session: requests.Session | None = None,
        transport: Transport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._api_key = api_key
        self._max_retries = max_retries
        self._transport = transport or Transport(
            base_url,
            timeout=timeout,
            verify_ssl=verify_ssl,
            session=session,
            sleep=sleep,
        )
        self._jobs = JobOrchestrator(self._transport, job_config, sleep=sleep, clock=clock)

        logger.info(
            "NetBeezClient initialized: base_url=%s, timeout=%s, verify_ssl=%s, max_retries=%d",
            self._transport.base_url,
            timeout,
            self._transport.verify_ssl,
            max_retries,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def jobs(self) -> JobOrchestrator:
        return self._jobs

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> NetBeezClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Request specs
    # ------------------------------------------------------------------

    def _bearer_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def _legacy_headers(self) -> dict[str, str]:
        return {"Authorization": self._api_key, "API-VERSION": LEGACY_API_VERSION}

    def jsonapi_spec(
        self,
        path: str,
        options: QueryOptions | None = None,
        *,
        method: str = "GET",
        body: Any = None,
    ) -> RequestSpec:
        """Build a bearer-authenticated JSON:API ``RequestSpec``."""
        return RequestSpec(
            method=method,
            path=path,
            headers=self._bearer_headers(),
            body=body,
            params=render(options),
            retries=self._max_retries,
        )

    def legacy_spec(self, path: str, params: dict[str, Any] | None = None) -> RequestSpec:
        """Build a legacy-API ``RequestSpec`` with raw-token auth."""
        return RequestSpec(
            path=path,
            headers=self._legacy_headers(),
            params=_stringify_legacy(params or {}),
            retries=self._max_retries,
        )

    # ------------------------------------------------------------------
    # Public HTTP methods
    # ------------------------------------------------------------------

    def get(self, path: str, options: QueryOptions | None = None) -> ResponseEnvelope:
        """GET a JSON:API endpoint.

        Raises:
            NetBeezError: On any API or network error.
        """
        return self._transport.execute(self.jsonapi_spec(path, options))

    def post(self, path: str, body: Any, options: QueryOptions | None = None) -> ResponseEnvelope:
        """POST a JSON:API document.

        Raises:
            NetBeezError: On any API or network error.
        """
        return self._transport.execute(self.jsonapi_spec(path, options, method="POST", body=body))

    def legacy_get(self, path: str, params: dict[str, Any] | None = None) -> ResponseEnvelope:
        """GET a legacy statistics endpoint.

        The legacy API returns bare objects (``{"agent_stats": [...]}``);
        their keys are available via ``ResponseEnvelope.to_dict()``.

        Raises:
            NetBeezError: On any API or network error.
        """
        return self._transport.execute(self.legacy_spec(path, params))

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def list_agents(self, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get("/agents", _with_beta(options))

    def get_agent(self, agent_id: str | int, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get(f"/agents/{agent_id}", _with_beta(options))

    def get_agent_logs(self, agent_id: str | int, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get(f"/agents/{agent_id}/logs", _with_beta(options))

    def get_agent_performance_metrics(
        self, agent_id: str | int, options: QueryOptions | None = None
    ) -> ResponseEnvelope:
        return self.get(f"/agents/{agent_id}/performance_metrics", _with_beta(options))

    def get_agent_access_point_connections(
        self, agent_id: str | int, options: QueryOptions | None = None
    ) -> ResponseEnvelope:
        return self.get(f"/agents/{agent_id}/access_point_connections", _with_beta(options))

    # ------------------------------------------------------------------
    # Targets, tests and results
    # ------------------------------------------------------------------

    def list_targets(self, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get("/targets", _with_beta(options))

    def list_tests(self, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get("/nb_tests", _with_beta(options))

    def get_test_results(
        self, test_type: TestResultType, options: QueryOptions | None = None
    ) -> ResponseEnvelope:
        """Fetch raw results for one continuous test type.

        Traceroute results live under the plural ``traceroutes`` path.
        """
        if test_type == "traceroute":
            path = "/nb_tests/traceroutes/results"
        else:
            path = f"/nb_tests/{test_type}/results"
        return self.get(path, _with_beta(options))

    def get_path_analysis_results(self, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get("/nb_tests/path_analysis/results", _with_beta(options))

    def get_path_analysis_result_by_timestamp(
        self, timestamp: str, options: QueryOptions | None = None
    ) -> ResponseEnvelope:
        return self.get(f"/nb_tests/path_analysis/results/{timestamp}", _with_beta(options))

    def get_scheduled_test_results(
        self, template_id: str | int, options: QueryOptions | None = None
    ) -> ResponseEnvelope:
        return self.get(f"/scheduled_nb_test_templates/{template_id}/results", _with_beta(options))

    # ------------------------------------------------------------------
    # Alerts, incidents, WiFi
    # ------------------------------------------------------------------

    def list_alerts(self, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get("/alerts", _with_beta(options))

    def list_incidents(self, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get("/incidents", _with_beta(options))

    def list_wifi_profiles(self, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self.get("/wifi_profiles", _with_beta(options))

    # ------------------------------------------------------------------
    # Ad-hoc test runs
    # ------------------------------------------------------------------

    def adhoc_test_create_spec(self, body: dict[str, Any]) -> RequestSpec:
        return self.jsonapi_spec(
            "/multiagent_nb_test_runs/ad_hoc",
            QueryOptions(beta=True),
            method="POST",
            body=body,
        )

    def adhoc_test_poll_spec(self, test_run_id: str, options: QueryOptions | None = None) -> RequestSpec:
        """Build the status request for one ad-hoc test run.

        The run is re-fetched from the collection endpoint, filtered by its
        id, with its results side-loaded.
        """
        options = _with_beta(options)
        filters = {**options.filters, "multiagent_nb_test_runs": test_run_id}
        return self.jsonapi_spec(
            "/multiagent_nb_test_runs",
            options.model_copy(update={"filters": filters, "include": "results"}),
        )

    def run_adhoc_test(self, body: dict[str, Any]) -> ResponseEnvelope:
        """Create an ad-hoc test run without waiting for it."""
        return self._transport.execute(self.adhoc_test_create_spec(body))

    def get_adhoc_test_run(self, test_run_id: str, options: QueryOptions | None = None) -> ResponseEnvelope:
        return self._transport.execute(self.adhoc_test_poll_spec(test_run_id, options))

    def run_adhoc_test_and_wait(self, body: dict[str, Any], config: JobConfig | None = None) -> JobOutcome:
        """Create an ad-hoc test run and poll it until it finishes or times out."""
        return self._jobs.run_and_await(
            self.adhoc_test_create_spec(body),
            self.adhoc_test_poll_spec,
            config,
        )

    # ------------------------------------------------------------------
    # Legacy statistics API
    # ------------------------------------------------------------------

    def get_test_statistics(self, **params: Any) -> ResponseEnvelope:
        """Return ``{"nb_test_statistics": [...]}`` aggregated test data."""
        return self.legacy_get("/apis/nb_test_statistics.json", params)

    def get_agent_statistics(self, agent_id: int, **params: Any) -> ResponseEnvelope:
        """Return ``{"agent_stats": [...]}`` uptime data for one agent."""
        return self.legacy_get("/apis/nb_agent_statistics.json", {"agent_id": agent_id, **params})

    def get_access_point_metrics(self, **params: Any) -> ResponseEnvelope:
        """Return ``{"metrics": [...]}`` WiFi access point samples."""
        return self.legacy_get("/apis/access_point_metrics.json", params)

    def get_access_point_metrics_sample(self, **params: Any) -> ResponseEnvelope:
        """Downsampled variant of ``get_access_point_metrics`` (takes ``cardinality``)."""
        return self.legacy_get("/apis/access_point_metrics/sample.json", params)
