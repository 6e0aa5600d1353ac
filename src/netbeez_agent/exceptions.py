"""Custom exception hierarchy for the NetBeez MCP agent.

Provides structured error handling that maps to NetBeez HTTP status codes
and common failure modes. Exceptions are raised by the ``Transport`` and
``NetBeezClient`` and caught at the tools layer boundary to return
structured error dicts to MCP callers.

Exception Hierarchy:
    NetBeezError (base)
    +-- NetBeezHTTPError (any non-success HTTP response)
    |   +-- NetBeezClientError (4xx, never retried)
    |   |   +-- NetBeezAuthError (401)
    |   |   +-- NetBeezPermissionError (403)
    |   |   +-- NetBeezNotFoundError (404)
    |   |   +-- NetBeezRateLimitError (429)
    |   +-- NetBeezServerError (5xx, retried)
    +-- NetBeezConnectionError (timeouts, DNS, refused connections; retried)
    +-- NetBeezResponseError (success status with an undecodable body)
    +-- NetBeezJobError (ad-hoc job could not be started)
"""

from __future__ import annotations

from typing import Any

# Maximum number of body characters shown in messages and error dicts
BODY_DISPLAY_LIMIT = 500


class NetBeezError(Exception):
    """Base exception for all NetBeez client errors.

    All custom exceptions in this module inherit from this class, allowing
    callers to catch any NetBeez-related error with a single except clause.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code string.
        status_code: HTTP status code from NetBeez, if applicable.
        details: Additional context about the error (optional).
    """

    def __init__(
        self,
        message: str = "NetBeez error",
        error_code: str = "NETBEEZ_ERROR",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details: dict[str, Any] = details or {}

    @property
    def retryable(self) -> bool:
        """Whether the transport may retry the request that raised this error."""
        return False

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a structured error dict.

        Returns a dict compatible with the MCP tool response format,
        including the error message, error_code, and optionally
        status_code and details.
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.status_code is not None:
            result["status_code"] = self.status_code
        if self.details:
            result["details"] = self.details
        return result


class NetBeezHTTPError(NetBeezError):
    """Raised for any HTTP response outside the 2xx range.

    Carries the full error information of the exchange: status code,
    status text, the raw response body and the originating URL. The body is
    kept intact on the exception and only truncated for display.
    """

    def __init__(
        self,
        status_code: int,
        status_text: str = "",
        body: str = "",
        url: str = "",
        error_code: str = "HTTP_ERROR",
    ) -> None:
        self.status_text = status_text
        self.body = body
        self.url = url
        message = f"HTTP {status_code} {status_text} from {url}: {body[:BODY_DISPLAY_LIMIT]}"
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status_code,
            details={
                "url": url,
                "status_text": status_text,
                "body": body[:BODY_DISPLAY_LIMIT],
            },
        )


class NetBeezClientError(NetBeezHTTPError):
    """Raised when NetBeez returns a 4xx response.

    Client errors are terminal: the request is malformed, unauthorized or
    refers to something that does not exist, so repeating it cannot help.
    """

    def __init__(
        self,
        status_code: int = 400,
        status_text: str = "",
        body: str = "",
        url: str = "",
        error_code: str = "CLIENT_ERROR",
    ) -> None:
        super().__init__(status_code, status_text, body, url, error_code=error_code)


class NetBeezAuthError(NetBeezClientError):
    """Raised when NetBeez returns 401 Unauthorized (bad or revoked API key)."""

    def __init__(self, status_code: int = 401, status_text: str = "", body: str = "", url: str = "") -> None:
        super().__init__(status_code, status_text, body, url, error_code="AUTHENTICATION_ERROR")


class NetBeezPermissionError(NetBeezClientError):
    """Raised when NetBeez returns 403 Forbidden."""

    def __init__(self, status_code: int = 403, status_text: str = "", body: str = "", url: str = "") -> None:
        super().__init__(status_code, status_text, body, url, error_code="PERMISSION_ERROR")


class NetBeezNotFoundError(NetBeezClientError):
    """Raised when NetBeez returns 404 Not Found."""

    def __init__(self, status_code: int = 404, status_text: str = "", body: str = "", url: str = "") -> None:
        super().__init__(status_code, status_text, body, url, error_code="NOT_FOUND")


class NetBeezRateLimitError(NetBeezClientError):
    """Raised when NetBeez returns 429 Too Many Requests.

    Not retried by the transport. The ``details`` dict includes a
    ``retry_after`` key when the server sent a ``Retry-After`` header.
    """

    def __init__(
        self,
        status_code: int = 429,
        status_text: str = "",
        body: str = "",
        url: str = "",
        retry_after: str | None = None,
    ) -> None:
        super().__init__(status_code, status_text, body, url, error_code="RATE_LIMIT_ERROR")
        if retry_after is not None:
            self.details["retry_after"] = retry_after


class NetBeezServerError(NetBeezHTTPError):
    """Raised for NetBeez server errors (5xx) and other non-success statuses.

    Server errors are transient as far as the client can tell and are
    retried by the transport up to the request's retry budget.
    """

    def __init__(
        self,
        status_code: int = 500,
        status_text: str = "",
        body: str = "",
        url: str = "",
    ) -> None:
        super().__init__(status_code, status_text, body, url, error_code="SERVER_ERROR")

    @property
    def retryable(self) -> bool:
        return True


class NetBeezConnectionError(NetBeezError):
    """Raised for network-level failures: timeouts, DNS resolution, refused connections.

    Maps to ``requests.exceptions.ConnectionError``,
    ``requests.exceptions.Timeout``, and similar transport-layer errors
    where no HTTP response was received.
    """

    def __init__(
        self,
        message: str = "Connection failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="CONNECTION_ERROR",
            status_code=None,
            details=details,
        )

    @property
    def retryable(self) -> bool:
        return True


class NetBeezResponseError(NetBeezError):
    """Raised when a successful response carries a body that is not valid JSON."""

    def __init__(
        self,
        message: str = "Invalid JSON in response",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INVALID_RESPONSE",
            status_code=status_code,
            details=details,
        )


class NetBeezJobError(NetBeezError):
    """Raised when a remote job cannot be started or identified.

    A job that starts and then reports ``failed`` is not an error; this
    exception covers the case where the create call succeeded but the
    response carries no job identifier to poll.
    """

    def __init__(
        self,
        message: str = "Job could not be started",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="JOB_CREATE_FAILED",
            status_code=None,
            details=details,
        )
