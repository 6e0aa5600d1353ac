"""Submit-then-poll orchestration for long-running NetBeez jobs.

NetBeez ad-hoc test runs (Iperf, Network Speed, VoIP) are started with a
POST and then finish asynchronously; there is no completion callback, so
the only way to learn the result is to re-fetch the run until its
``state`` attribute reaches a terminal value.

``JobOrchestrator.run_and_await`` drives that loop::

    submitted -> polling -> completed | failed | error | timed_out

A job that ends in ``failed`` or ``error`` is a legitimate result and is
returned, not raised. Running out of time is also returned, as a
``timed_out`` outcome carrying the last state seen, because the job may
still finish and can be checked later by id. Only infrastructure failures
(the create call or a poll call failing after the transport's retries)
raise.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from .exceptions import NetBeezJobError
from .models import (
    JOB_STATE_SUBMITTED,
    JOB_STATE_UNKNOWN,
    JOB_STATUS_TIMED_OUT,
    JobConfig,
    JobOutcome,
    JobRun,
    RequestSpec,
    ResponseEnvelope,
)

logger = logging.getLogger(__name__)


class RequestExecutor(Protocol):
    def execute(self, spec: RequestSpec) -> ResponseEnvelope: ...


def extract_job_id(envelope: ResponseEnvelope) -> str | None:
    """Return the id of the first primary resource, or None."""
    resource = envelope.first()
    if not isinstance(resource, dict):
        return None
    job_id = resource.get("id")
    if job_id is None or job_id == "":
        return None
    return str(job_id)


def extract_job_state(envelope: ResponseEnvelope | None) -> str:
    """Return ``attributes.state`` of the first primary resource.

    Anything missing or not a non-empty string reads as ``unknown``.
    """
    if envelope is None:
        return JOB_STATE_UNKNOWN
    resource = envelope.first()
    if not isinstance(resource, dict):
        return JOB_STATE_UNKNOWN
    attributes: Any = resource.get("attributes")
    if not isinstance(attributes, dict):
        return JOB_STATE_UNKNOWN
    state = attributes.get("state")
    if not isinstance(state, str) or not state:
        return JOB_STATE_UNKNOWN
    return state


class JobOrchestrator:
    """Runs a job and polls it to completion or until its deadline.

    Args:
        executor: Anything with ``execute(RequestSpec) -> ResponseEnvelope``,
            normally the shared ``Transport``.
        config: Default polling policy; may be overridden per run.
        sleep: Callable used between polls, taking seconds.
        clock: Monotonic clock returning seconds.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        config: JobConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._executor = executor
        self._config = config or JobConfig()
        self._sleep = sleep
        self._clock = clock

    @property
    def config(self) -> JobConfig:
        return self._config

    def run_and_await(
        self,
        create_spec: RequestSpec,
        poll_spec_factory: Callable[[str], RequestSpec],
        config: JobConfig | None = None,
    ) -> JobOutcome:
        """Submit a job and wait for it to reach a terminal state.

        Args:
            create_spec: Request that creates the job.
            poll_spec_factory: Builds the status request for a job id.
            config: Polling policy for this run; defaults to the
                orchestrator's own.

        Returns:
            A ``JobOutcome`` tagged with the terminal state, or with
            ``timed_out`` when the deadline passed first.

        Raises:
            NetBeezJobError: If the create response carries no job id.
            NetBeezError: If the create call or a poll call fails.
        """
        config = config or self._config

        created = self._executor.execute(create_spec)
        job_id = extract_job_id(created)
        if job_id is None:
            raise NetBeezJobError(
                message="Failed to create job: response carries no job id",
                details={"response": created.to_dict()},
            )

        started = self._clock()
        initial_state = extract_job_state(created)
        run = JobRun(
            job_id=job_id,
            state=initial_state if initial_state != JOB_STATE_UNKNOWN else JOB_STATE_SUBMITTED,
            deadline=started + config.max_wait_ms / 1000,
        )
        logger.info("Job %s submitted (state=%s); polling every %dms", job_id, run.state, config.poll_interval_ms)

        payload: ResponseEnvelope | None = None
        terminal = False
        while self._clock() < run.deadline:
            self._sleep(config.poll_interval_ms / 1000)

            payload = self._executor.execute(poll_spec_factory(job_id))
            run.polls += 1
            run.state = extract_job_state(payload)
            logger.debug("Job %s poll %d: state=%s", job_id, run.polls, run.state)

            if run.state in config.terminal_states:
                terminal = True
                break

        elapsed_ms = int((self._clock() - started) * 1000)

        if not terminal:
            logger.warning(
                "Job %s did not finish within %dms (last state: %s)", job_id, config.max_wait_ms, run.state
            )
            return JobOutcome(
                job_id=job_id,
                status=JOB_STATUS_TIMED_OUT,
                state=run.state,
                payload=payload,
                polls=run.polls,
                elapsed_ms=elapsed_ms,
            )

        logger.info("Job %s finished with state %s after %d poll(s)", job_id, run.state, run.polls)
        return JobOutcome(
            job_id=job_id,
            status=run.state,
            state=run.state,
            payload=payload,
            polls=run.polls,
            elapsed_ms=elapsed_ms,
        )
