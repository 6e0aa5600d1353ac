"""Resilient HTTP transport for the NetBeez REST APIs.

The ``Transport`` executes one ``RequestSpec`` against the configured
BeezKeeper instance: it assembles the URL and headers, serializes the
body, decodes the JSON response into a ``ResponseEnvelope`` and classifies
failures into the ``NetBeezError`` hierarchy.

Retry policy
------------
Each spec is attempted up to ``retries + 1`` times:

- 2xx responses are decoded and returned.
- 4xx responses raise a ``NetBeezClientError`` immediately.
- 5xx responses and network failures are retried after an exponential
  backoff of ``min(1000 * 2**attempt, 10000)`` milliseconds, where
  ``attempt`` is the zero-based index of the attempt that failed.

Retries happen here and only here: the ``requests`` session is mounted with
an adapter that never retries on its own, so the number of physical
attempts is exactly ``retries + 1``.

Usage::

    from netbeez_agent.models import RequestSpec
    from netbeez_agent.transport import Transport

    transport = Transport("https://demo1.netbeezcloud.net")
    envelope = transport.execute(
        RequestSpec(path="/agents", headers={"Authorization": "Bearer <key>"})
    )
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from .exceptions import (
    NetBeezAuthError,
    NetBeezClientError,
    NetBeezConnectionError,
    NetBeezError,
    NetBeezHTTPError,
    NetBeezNotFoundError,
    NetBeezPermissionError,
    NetBeezRateLimitError,
    NetBeezResponseError,
    NetBeezServerError,
)
from .models import RequestSpec, ResponseEnvelope

logger = logging.getLogger(__name__)

# Default settings
DEFAULT_TIMEOUT = 30
DEFAULT_POOL_SIZE = 10

ACCEPT_HEADER = "application/json"
JSONAPI_CONTENT_TYPE = "application/vnd.api+json"

# Backoff schedule, milliseconds
BACKOFF_BASE_MS = 1000
BACKOFF_CAP_MS = 10_000


def backoff_delay_ms(attempt: int) -> int:
    """Return the delay to wait after zero-based ``attempt`` failed."""
    return min(BACKOFF_BASE_MS * 2**attempt, BACKOFF_CAP_MS)


def _create_session(
    pool_connections: int = DEFAULT_POOL_SIZE,
    pool_maxsize: int = DEFAULT_POOL_SIZE,
) -> requests.Session:
    """Create a ``requests.Session`` with connection pooling and no adapter retries.

    Args:
        pool_connections: Number of connection pools to cache.
        pool_maxsize: Maximum number of connections per pool.

    Returns:
        A configured ``requests.Session``.
    """
    adapter = HTTPAdapter(
        max_retries=0,
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
    )

    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


def _error_for_response(response: requests.Response, url: str) -> NetBeezHTTPError:
    """Build the most specific error for a non-success response.

    The full body is kept on the error; only its message is truncated.
    """
    status = response.status_code
    status_text = response.reason or ""
    body = response.text or ""

    if 400 <= status < 500:
        if status == 401:
            return NetBeezAuthError(status, status_text, body, url)
        if status == 403:
            return NetBeezPermissionError(status, status_text, body, url)
        if status == 404:
            return NetBeezNotFoundError(status, status_text, body, url)
        if status == 429:
            return NetBeezRateLimitError(
                status, status_text, body, url, retry_after=response.headers.get("Retry-After")
            )
        return NetBeezClientError(status, status_text, body, url)

    return NetBeezServerError(status, status_text, body, url)


def _connection_error(exc: requests.exceptions.RequestException, url: str) -> NetBeezConnectionError:
    """Convert a ``requests`` library exception into a ``NetBeezConnectionError``."""
    if isinstance(exc, requests.exceptions.Timeout):
        message = f"Request timed out: {exc}"
    elif isinstance(exc, requests.exceptions.ConnectionError):
        message = f"Connection failed: {exc}"
    else:
        message = f"Request failed: {exc}"
    return NetBeezConnectionError(
        message=message,
        details={"url": url, "original_error": str(exc)},
    )


class Transport:
    """Executes ``RequestSpec``s against one NetBeez base URL.

    The transport holds only read-only settings and the pooled session, so
    one instance can serve concurrent, independent requests.

    Args:
        base_url: BeezKeeper instance URL (e.g. ``https://demo1.netbeezcloud.net``).
        timeout: Per-attempt network timeout in seconds, or a
            ``(connect, read)`` tuple. Defaults to 30 seconds.
        verify_ssl: Whether to verify TLS certificates. Disable only for
            instances with self-signed certificates.
        session: Pre-configured ``requests.Session`` to send requests with.
        sleep: Callable used to wait between attempts, taking seconds.
            Defaults to ``time.sleep``; tests inject a recorder.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | tuple[float, float] = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._session = session if session is not None else _create_session()
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def verify_ssl(self) -> bool:
        return self._verify_ssl

    @property
    def session(self) -> requests.Session:
        """Return the underlying ``requests.Session`` for inspection."""
        return self._session

    def close(self) -> None:
        """Close the underlying session and release connection pool resources."""
        self._session.close()
        logger.debug("Transport session closed")

    # ------------------------------------------------------------------
    # Request assembly
    # ------------------------------------------------------------------

    def build_url(self, path: str) -> str:
        """Join the base URL and a relative path."""
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}{path}"

    @staticmethod
    def build_headers(spec: RequestSpec) -> dict[str, str]:
        """Compose request headers; caller-supplied headers win on conflicts."""
        headers: dict[str, str] = {"Accept": ACCEPT_HEADER}
        if spec.body is not None:
            headers["Content-Type"] = JSONAPI_CONTENT_TYPE
        headers.update(spec.headers)
        return headers

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, spec: RequestSpec) -> ResponseEnvelope:
        """Execute ``spec`` with retry and return the decoded envelope.

        Args:
            spec: The request to perform.

        Returns:
            The decoded ``ResponseEnvelope``.

        Raises:
            NetBeezClientError: On any 4xx response (never retried).
            NetBeezServerError: When every attempt ended in a 5xx response
                (or the last one did, after earlier network failures).
            NetBeezConnectionError: When the last attempt failed at the
                network level.
            NetBeezResponseError: When a 2xx body is not valid JSON.
        """
        url = self.build_url(spec.path)
        headers = self.build_headers(spec)
        params = spec.param_pairs()
        data = json.dumps(spec.body) if spec.body is not None else None

        last_error: NetBeezError | None = None
        for attempt in range(spec.retries + 1):
            try:
                response = self._send(spec.method, url, headers=headers, params=params, data=data)
            except NetBeezConnectionError as exc:
                last_error = exc
            else:
                if 200 <= response.status_code < 300:
                    return self._decode(response, url)

                error = _error_for_response(response, url)
                if isinstance(error, NetBeezClientError):
                    logger.debug("Client error, not retrying: %s %s -> %d", spec.method, url, response.status_code)
                    raise error
                last_error = error

            if attempt < spec.retries:
                delay_ms = backoff_delay_ms(attempt)
                logger.warning(
                    "Attempt %d/%d for %s %s failed (%s); retrying in %dms",
                    attempt + 1,
                    spec.retries + 1,
                    spec.method,
                    spec.path,
                    last_error.message,
                    delay_ms,
                )
                self._sleep(delay_ms / 1000)

        if last_error is not None:
            logger.error("Request %s %s failed after %d attempt(s)", spec.method, spec.path, spec.retries + 1)
            raise last_error
        raise NetBeezError(message="Request failed after retries", error_code="RETRIES_EXHAUSTED")

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        params: list[tuple[str, str]],
        data: str | None,
    ) -> requests.Response:
        """Perform one physical attempt.

        Raises:
            NetBeezConnectionError: On network-level failures.
        """
        logger.debug("API request: %s %s", method, url)
        if params:
            logger.debug("Request params: %s", params)

        kwargs: dict[str, Any] = {
            "headers": headers,
            "timeout": self._timeout,
            "verify": self._verify_ssl,
        }
        if params:
            kwargs["params"] = params
        if data is not None:
            kwargs["data"] = data

        try:
            response = self._session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as exc:
            logger.debug("Network failure for %s %s: %s", method, url, exc)
            raise _connection_error(exc, url) from exc

        logger.debug(
            "API response: %s %s -> %d",
            method,
            url.rsplit("/", 1)[-1],
            response.status_code,
        )
        return response

    @staticmethod
    def _decode(response: requests.Response, url: str) -> ResponseEnvelope:
        """Decode a successful response body into a ``ResponseEnvelope``.

        Raises:
            NetBeezResponseError: If the body is not valid JSON.
        """
        text = response.text
        if not text:
            return ResponseEnvelope()
        try:
            body = json.loads(text)
        except ValueError as exc:
            raise NetBeezResponseError(
                message=f"Invalid JSON in response: {exc}",
                status_code=response.status_code,
                details={"url": url, "response_text": text[:500]},
            ) from exc
        return ResponseEnvelope.from_body(body)
