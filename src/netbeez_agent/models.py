"""Pydantic v2 models for the NetBeez MCP agent core.

Defines the request contract consumed by the ``Transport``
(``RequestSpec``), the decoded JSON:API response shape it returns
(``ResponseEnvelope``), and the records used by the ad-hoc job orchestrator
(``JobConfig``, ``JobRun``, ``JobOutcome``).

JSON:API envelope
-----------------
Entity endpoints answer with ``{"data": ..., "included": [...], "meta":
{...}}`` where ``data`` is a single resource object or a list of them. The
legacy statistics endpoints answer with bare objects such as
``{"nb_test_statistics": [...]}``; those keys are preserved as extra fields
so both surfaces decode into the same envelope type.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Request contract
# ---------------------------------------------------------------------------

DEFAULT_RETRIES = 2
"""Retry budget for a request when the caller does not set one."""


class RequestSpec(BaseModel):
    """One logical HTTP operation against the NetBeez API.

    Immutable once constructed. A single spec may be attempted several
    times by the transport, but always describes exactly one operation.
    """

    model_config = ConfigDict(frozen=True)

    method: str = Field(default="GET", description="HTTP method.")
    path: str = Field(..., min_length=1, description="Path relative to the base URL.")
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = Field(default=None, description="JSON-serializable request body.")
    params: dict[str, str | None] | list[tuple[str, str]] | None = Field(
        default=None,
        description="Query parameters; a list of pairs preserves rendering order.",
    )
    retries: int = Field(default=DEFAULT_RETRIES, ge=0)

    @field_validator("method")
    @classmethod
    def _normalize_method(cls, value: str) -> str:
        return value.strip().upper()

    def param_pairs(self) -> list[tuple[str, str]]:
        """Return the query parameters as ordered pairs.

        Parameters whose value is ``None`` or the empty string are dropped.
        """
        if not self.params:
            return []
        items = self.params.items() if isinstance(self.params, dict) else self.params
        return [(key, value) for key, value in items if value is not None and value != ""]


# ---------------------------------------------------------------------------
# Response envelope
# ---------------------------------------------------------------------------


class ResponseEnvelope(BaseModel):
    """Decoded body of a successful NetBeez response.

    ``data`` holds the primary payload (one resource dict or a list of
    them), ``included`` the side-loaded related resources and ``meta`` any
    metadata such as pagination cursors (``{"page": {"next": ..., "offset":
    ..., "limit": ...}}``). An empty response body decodes to an envelope
    with none of these set.
    """

    model_config = ConfigDict(extra="allow")

    data: Any = None
    included: list[dict[str, Any]] | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def from_body(cls, body: Any) -> Self:
        """Build an envelope from a decoded JSON body.

        Non-object bodies (a bare list, say) become the primary ``data``.
        """
        if isinstance(body, dict):
            return cls.model_validate(body)
        return cls(data=body)

    @property
    def is_empty(self) -> bool:
        """True when the response body was empty."""
        return not self.model_fields_set and not self.model_extra

    def resources(self) -> list[Any]:
        """Return the primary data as a list, whatever its shape."""
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data]

    def first(self) -> Any:
        """Return the first primary resource, or None when there is none."""
        resources = self.resources()
        return resources[0] if resources else None

    def to_dict(self) -> dict[str, Any]:
        """Return the envelope exactly as the server sent it."""
        return self.model_dump(mode="json", exclude_unset=True)


# ---------------------------------------------------------------------------
# Ad-hoc job orchestration
# ---------------------------------------------------------------------------

DEFAULT_POLL_INTERVAL_MS = 5000
DEFAULT_MAX_WAIT_MS = 300_000
DEFAULT_TERMINAL_STATES: frozenset[str] = frozenset({"completed", "failed", "error"})

JOB_STATE_SUBMITTED = "submitted"
JOB_STATE_UNKNOWN = "unknown"
JOB_STATUS_TIMED_OUT = "timed_out"
JOB_STATE_COMPLETED = "completed"


class JobConfig(BaseModel):
    """Polling policy for a submit-then-poll job."""

    model_config = ConfigDict(frozen=True)

    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)
    max_wait_ms: int = Field(default=DEFAULT_MAX_WAIT_MS, ge=0)
    terminal_states: frozenset[str] = Field(default=DEFAULT_TERMINAL_STATES, min_length=1)


class JobRun(BaseModel):
    """Live state of one job while the orchestrator polls it."""

    job_id: str
    state: str = JOB_STATE_SUBMITTED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deadline: float = Field(..., description="Clock reading after which polling stops.")
    polls: int = 0


class JobOutcome(BaseModel):
    """Result of a submit-then-poll job.

    ``status`` is the terminal state the job reached, or ``timed_out``
    when the deadline passed first; in that case ``state`` holds the last
    state observed. ``payload`` is the last successfully fetched status
    response, if any.
    """

    model_config = ConfigDict(frozen=True)

    job_id: str
    status: str
    state: str
    payload: ResponseEnvelope | None = None
    polls: int = 0
    elapsed_ms: int = 0

    @property
    def timed_out(self) -> bool:
        return self.status == JOB_STATUS_TIMED_OUT

    @property
    def succeeded(self) -> bool:
        return self.status == JOB_STATE_COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "status": self.status,
            "state": self.state,
            "polls": self.polls,
            "elapsed_ms": self.elapsed_ms,
            "payload": self.payload.to_dict() if self.payload is not None else None,
        }
