"""Shared pytest fixtures for netbeez-mcp-server tests."""

from __future__ import annotations

import json
import os
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Ensure tests do not leak environment variables.

    Removes NetBeez and MCP transport environment variables, and runs each
    test from an empty directory so no ``.env`` file is picked up, so that
    unit tests never accidentally connect to a real instance unless they
    explicitly set the variables they need.
    """
    for key in list(os.environ):
        if key.startswith(("NETBEEZ_", "MCP_")):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: requires a live NetBeez instance")


def make_response(
    status_code: int = 200,
    json_body: Any = None,
    text: str = "",
    headers: dict[str, str] | None = None,
    reason: str = "",
    url: str = "https://demo.netbeezcloud.net/agents",
) -> requests.Response:
    """Build a real ``requests.Response`` with the given attributes."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = reason
    resp.url = url
    resp.headers.update(headers or {})
    resp.encoding = "utf-8"

    if json_body is not None:
        resp._content = json.dumps(json_body).encode("utf-8")
    else:
        resp._content = text.encode("utf-8")

    return resp


class SleepRecorder:
    """Stand-in for ``time.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    """Monotonic clock advanced only by a paired fake sleep."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def mock_session() -> Any:
    """A ``requests.Session`` mock whose ``request`` the test configures."""
    return MagicMock(spec=requests.Session)


@pytest.fixture()
def mock_client() -> Any:
    return MagicMock()


@pytest.fixture()
def patch_get_client(mock_client: Any) -> Any:
    """Route every tool's ``get_client()`` to ``mock_client``."""
    with patch("netbeez_agent.server.get_client", return_value=mock_client):
        yield mock_client
