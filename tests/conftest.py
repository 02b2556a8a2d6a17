"""Shared test fixtures for oauthflow.

Provides isolated config environments, output state management, token
endpoint fakes built on ``httpx.MockTransport``, and a helper that plays the
browser's part in the redirect callback. These fixtures are automatically
discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import json
import socket
from http.client import HTTPConnection
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from oauthflow.exchange import TokenExchanger
from oauthflow.output import OutputFormat, OutputManager, reset_output, set_output
from oauthflow.transport import HttpxTransport


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. CliRunner swaps those streams, so a fresh manager must
    be created for the next test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of tmp_path,
    forces the XDG layout, and clears every OAUTHFLOW_* variable.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("oauthflow.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    from oauthflow.config import _ENV_FIELDS, _ENV_PREFIX

    for name in _ENV_FIELDS:
        monkeypatch.delenv(_ENV_PREFIX + name.upper(), raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Token endpoint fakes
# ---------------------------------------------------------------------------


class RecordingEndpoint:
    """Fake token endpoint that records requests and replays one response."""

    def __init__(self, status_code: int = 200, payload: Any = None, content: bytes | None = None):
        self.status_code = status_code
        if content is None:
            if payload is None:
                payload = {"access_token": "at-123", "token_type": "Bearer", "expires_in": 3600}
            content = json.dumps(payload).encode("utf-8")
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    @property
    def last_form(self) -> str:
        return self.last_request.content.decode("utf-8")


def _make_exchanger(handler: Callable[[httpx.Request], httpx.Response]) -> TokenExchanger:
    return TokenExchanger(HttpxTransport(transport=httpx.MockTransport(handler)))


@pytest.fixture
def make_exchanger() -> Callable[[Callable[[httpx.Request], httpx.Response]], TokenExchanger]:
    """Factory: build a TokenExchanger whose HTTP traffic goes to a handler."""
    return _make_exchanger


@pytest.fixture
def token_endpoint() -> RecordingEndpoint:
    """A token endpoint that answers every request with a bearer token."""
    return RecordingEndpoint()


# ---------------------------------------------------------------------------
# Redirect callback helpers
# ---------------------------------------------------------------------------


def _free_port() -> int:
    """Return a loopback port that is free at the time of the call."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _simulate_callback(
    port: int, path_and_query: str, host: str = "127.0.0.1"
) -> tuple[int, str]:
    """Play the browser: GET *path_and_query* on the local listener.

    Returns:
        The HTTP status and decoded body of the listener's response.
    """
    conn = HTTPConnection(host, port, timeout=5)
    try:
        conn.request("GET", path_and_query)
        response = conn.getresponse()
        return response.status, response.read().decode("utf-8")
    finally:
        conn.close()


@pytest.fixture
def simulate_callback() -> Callable[..., tuple[int, str]]:
    return _simulate_callback


@pytest.fixture
def redirect_uri() -> str:
    """A loopback redirect URI on a free port."""
    return f"http://127.0.0.1:{_free_port()}/callback"


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
