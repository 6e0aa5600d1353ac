"""Tests for the resilient HTTP transport.

Responses are real ``requests.Response`` objects returned from a mocked
session, so status classification, body decoding and retry accounting are
exercised against the real ``requests`` interface. Backoff sleeps go to a
recorder so no test waits on the wall clock.
"""

from __future__ import annotations

import json

import pytest
import requests
from conftest import SleepRecorder, make_response

from netbeez_agent.exceptions import (
    NetBeezAuthError,
    NetBeezClientError,
    NetBeezConnectionError,
    NetBeezNotFoundError,
    NetBeezPermissionError,
    NetBeezRateLimitError,
    NetBeezResponseError,
    NetBeezServerError,
)
from netbeez_agent.models import RequestSpec, ResponseEnvelope
from netbeez_agent.transport import (
    ACCEPT_HEADER,
    JSONAPI_CONTENT_TYPE,
    Transport,
    backoff_delay_ms,
)

BASE_URL = "https://demo.netbeezcloud.net"


def _transport(session, sleep=None) -> Transport:
    return Transport(BASE_URL, session=session, sleep=sleep or SleepRecorder())


# ---------------------------------------------------------------------------
# Test: backoff schedule
# ---------------------------------------------------------------------------


class TestBackoff:
    @pytest.mark.parametrize(
        ("attempt", "expected"),
        [(0, 1000), (1, 2000), (2, 4000), (3, 8000), (4, 10000), (10, 10000)],
    )
    def test_schedule(self, attempt: int, expected: int) -> None:
        assert backoff_delay_ms(attempt) == expected


# ---------------------------------------------------------------------------
# Test: success paths
# ---------------------------------------------------------------------------


class TestSuccess:
    def test_decodes_jsonapi_envelope(self, mock_session) -> None:
        body = {"data": [{"id": "1", "type": "agent"}], "meta": {"page": {"limit": 25}}}
        mock_session.request.return_value = make_response(200, json_body=body)

        envelope = _transport(mock_session).execute(RequestSpec(path="/agents"))

        assert isinstance(envelope, ResponseEnvelope)
        assert envelope.data == [{"id": "1", "type": "agent"}]
        assert envelope.meta == {"page": {"limit": 25}}
        assert mock_session.request.call_count == 1

    def test_empty_body_is_empty_envelope(self, mock_session) -> None:
        mock_session.request.return_value = make_response(204)

        envelope = _transport(mock_session).execute(RequestSpec(path="/agents"))

        assert envelope.is_empty
        assert envelope.to_dict() == {}

    def test_legacy_body_keeps_top_level_keys(self, mock_session) -> None:
        mock_session.request.return_value = make_response(200, json_body={"agent_stats": [{"uptime": 99.5}]})

        envelope = _transport(mock_session).execute(RequestSpec(path="/apis/nb_agent_statistics.json"))

        assert envelope.to_dict() == {"agent_stats": [{"uptime": 99.5}]}

    def test_invalid_json_raises_response_error(self, mock_session) -> None:
        mock_session.request.return_value = make_response(200, text="<html>oops</html>")

        with pytest.raises(NetBeezResponseError) as exc_info:
            _transport(mock_session).execute(RequestSpec(path="/agents"))

        assert exc_info.value.error_code == "INVALID_RESPONSE"
        assert mock_session.request.call_count == 1

    def test_request_assembly(self, mock_session) -> None:
        mock_session.request.return_value = make_response(200, json_body={"data": []})
        spec = RequestSpec(
            method="post",
            path="multiagent_nb_test_runs/ad_hoc",
            headers={"Authorization": "Bearer key"},
            body={"data": {"type": "multiagent_nb_test_runs"}},
            params=[("type", "beta"), ("filter[x]", "")],
        )

        _transport(mock_session).execute(spec)

        args, kwargs = mock_session.request.call_args
        assert args == ("POST", f"{BASE_URL}/multiagent_nb_test_runs/ad_hoc")
        assert kwargs["headers"] == {
            "Accept": ACCEPT_HEADER,
            "Content-Type": JSONAPI_CONTENT_TYPE,
            "Authorization": "Bearer key",
        }
        assert kwargs["params"] == [("type", "beta")]
        assert json.loads(kwargs["data"]) == {"data": {"type": "multiagent_nb_test_runs"}}
        assert kwargs["verify"] is True

    def test_caller_headers_win(self) -> None:
        spec = RequestSpec(path="/x", body={"a": 1}, headers={"Accept": "text/plain", "Content-Type": "x/y"})
        headers = Transport.build_headers(spec)
        assert headers["Accept"] == "text/plain"
        assert headers["Content-Type"] == "x/y"

    def test_no_content_type_without_body(self) -> None:
        assert "Content-Type" not in Transport.build_headers(RequestSpec(path="/x"))

    def test_verify_ssl_false_applied_per_request(self, mock_session) -> None:
        mock_session.request.return_value = make_response(200, json_body={})
        transport = Transport(BASE_URL, session=mock_session, verify_ssl=False)

        transport.execute(RequestSpec(path="/agents"))

        assert mock_session.request.call_args.kwargs["verify"] is False

    def test_identical_requests_on_reexecution(self, mock_session) -> None:
        mock_session.request.return_value = make_response(200, json_body={"data": []})
        transport = _transport(mock_session)
        spec = RequestSpec(path="/agents", params=[("filter[active]", "true")])

        transport.execute(spec)
        transport.execute(spec)

        first, second = mock_session.request.call_args_list
        assert first == second


# ---------------------------------------------------------------------------
# Test: retry policy
# ---------------------------------------------------------------------------


class TestRetry:
    def test_server_error_attempted_retries_plus_one(self, mock_session, sleep_recorder) -> None:
        mock_session.request.return_value = make_response(503, text="unavailable", reason="Service Unavailable")

        with pytest.raises(NetBeezServerError) as exc_info:
            _transport(mock_session, sleep_recorder).execute(RequestSpec(path="/agents", retries=2))

        assert mock_session.request.call_count == 3
        assert sleep_recorder.calls == [1.0, 2.0]
        assert exc_info.value.status_code == 503
        assert exc_info.value.message.startswith("HTTP 503 Service Unavailable from ")

    def test_zero_retries_single_attempt(self, mock_session, sleep_recorder) -> None:
        mock_session.request.return_value = make_response(500)

        with pytest.raises(NetBeezServerError):
            _transport(mock_session, sleep_recorder).execute(RequestSpec(path="/agents", retries=0))

        assert mock_session.request.call_count == 1
        assert sleep_recorder.calls == []

    def test_recovers_after_server_error(self, mock_session, sleep_recorder) -> None:
        mock_session.request.side_effect = [
            make_response(502),
            make_response(200, json_body={"data": {"id": "7"}}),
        ]

        envelope = _transport(mock_session, sleep_recorder).execute(RequestSpec(path="/agents/7"))

        assert envelope.first() == {"id": "7"}
        assert sleep_recorder.calls == [1.0]

    @pytest.mark.parametrize(
        ("status", "error_cls"),
        [
            (400, NetBeezClientError),
            (401, NetBeezAuthError),
            (403, NetBeezPermissionError),
            (404, NetBeezNotFoundError),
            (422, NetBeezClientError),
            (429, NetBeezRateLimitError),
        ],
    )
    def test_client_errors_never_retried(self, mock_session, sleep_recorder, status, error_cls) -> None:
        mock_session.request.return_value = make_response(status, text='{"errors": []}')

        with pytest.raises(error_cls) as exc_info:
            _transport(mock_session, sleep_recorder).execute(RequestSpec(path="/agents", retries=5))

        assert mock_session.request.call_count == 1
        assert sleep_recorder.calls == []
        assert exc_info.value.status_code == status
        assert not exc_info.value.retryable

    def test_rate_limit_keeps_retry_after(self, mock_session) -> None:
        mock_session.request.return_value = make_response(429, headers={"Retry-After": "30"})

        with pytest.raises(NetBeezRateLimitError) as exc_info:
            _transport(mock_session).execute(RequestSpec(path="/agents"))

        assert exc_info.value.details["retry_after"] == "30"

    def test_connection_errors_retried_then_raised(self, mock_session, sleep_recorder) -> None:
        mock_session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(NetBeezConnectionError) as exc_info:
            _transport(mock_session, sleep_recorder).execute(RequestSpec(path="/agents", retries=3))

        assert mock_session.request.call_count == 4
        assert sleep_recorder.calls == [1.0, 2.0, 4.0]
        assert "Connection failed" in exc_info.value.message

    def test_timeout_is_connection_error(self, mock_session) -> None:
        mock_session.request.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(NetBeezConnectionError) as exc_info:
            _transport(mock_session).execute(RequestSpec(path="/agents", retries=0))

        assert "timed out" in exc_info.value.message

    def test_last_failure_is_raised(self, mock_session) -> None:
        mock_session.request.side_effect = [
            requests.exceptions.ConnectionError("refused"),
            make_response(500, reason="Internal Server Error"),
        ]

        with pytest.raises(NetBeezServerError):
            _transport(mock_session).execute(RequestSpec(path="/agents", retries=1))

    def test_redirect_then_network_failure_keeps_retrying(self, mock_session, sleep_recorder) -> None:
        mock_session.request.side_effect = [
            make_response(302, reason="Found"),
            requests.exceptions.ConnectionError("reset"),
            make_response(200, json_body={"data": []}),
        ]

        envelope = _transport(mock_session, sleep_recorder).execute(RequestSpec(path="/agents", retries=2))

        assert envelope.data == []
        assert mock_session.request.call_count == 3
        assert sleep_recorder.calls == [1.0, 2.0]

    def test_network_failure_after_redirect_is_raised(self, mock_session) -> None:
        mock_session.request.side_effect = [
            make_response(302, reason="Found"),
            requests.exceptions.ConnectionError("reset"),
        ]

        with pytest.raises(NetBeezConnectionError):
            _transport(mock_session).execute(RequestSpec(path="/agents", retries=1))

    def test_error_message_truncates_body(self, mock_session) -> None:
        mock_session.request.return_value = make_response(500, text="x" * 2000)

        with pytest.raises(NetBeezServerError) as exc_info:
            _transport(mock_session).execute(RequestSpec(path="/agents", retries=0))

        assert exc_info.value.message.endswith("x" * 500)
        assert "x" * 501 not in exc_info.value.message
        assert exc_info.value.body == "x" * 2000


class TestSession:
    def test_default_session_created(self) -> None:
        transport = Transport(BASE_URL)
        assert isinstance(transport.session, requests.Session)
        transport.close()

    def test_base_url_trailing_slash_stripped(self) -> None:
        transport = Transport(f"{BASE_URL}/")
        assert transport.build_url("/agents") == f"{BASE_URL}/agents"
        assert transport.build_url("agents") == f"{BASE_URL}/agents"
        transport.close()
