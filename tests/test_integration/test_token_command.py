"""Integration tests for the ``token`` and ``grants`` commands.

The real Typer app is invoked through CliRunner; the token endpoint is
replaced by an ``httpx.MockTransport`` by patching the exchanger the
default manager creates.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from oauthflow.app import app, main
from oauthflow.exceptions import ConfigurationError
from oauthflow.models import REDACTED


@pytest.fixture()
def patched_endpoint(monkeypatch: pytest.MonkeyPatch, make_exchanger, token_endpoint):
    """Route every token request made by the CLI to *token_endpoint*."""
    monkeypatch.setattr(
        "oauthflow.flows.manager.TokenExchanger", lambda: make_exchanger(token_endpoint)
    )
    return token_endpoint


@pytest.fixture()
def cc_config(isolated_config: Path) -> Path:
    path = isolated_config / "cc.json"
    path.write_text(
        json.dumps(
            {
                "client_id": "c1",
                "client_secret_source": "env:TEST_CLIENT_SECRET",
                "token_endpoint": "https://idp.example.com/token",
            }
        ),
        encoding="utf-8",
    )
    return path


class TestTokenCommand:
    def test_client_credentials_redacted(
        self, cli_runner, patched_endpoint, cc_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_CLIENT_SECRET", "s1")
        result = cli_runner.invoke(
            app, ["--json", "token", "client_credentials", "--config", str(cc_config)]
        )
        assert result.exit_code == 0, result.output
        assert REDACTED in result.stdout
        assert "at-123" not in result.output
        assert patched_endpoint.last_request.headers["Authorization"] == "Basic YzE6czE="

    def test_show_secrets(
        self, cli_runner, patched_endpoint, cc_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_CLIENT_SECRET", "s1")
        result = cli_runner.invoke(
            app,
            ["--plain", "token", "client_credentials", "-c", str(cc_config), "--show-secrets"],
        )
        assert result.exit_code == 0, result.output
        assert "access_token\tat-123" in result.stdout

    def test_access_token_only(
        self, cli_runner, patched_endpoint, cc_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_CLIENT_SECRET", "s1")
        result = cli_runner.invoke(
            app,
            ["-q", "token", "client_credentials", "-c", str(cc_config), "--access-token-only"],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "at-123"

    def test_flags_override_file(
        self, cli_runner, patched_endpoint, cc_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_CLIENT_SECRET", "s1")
        result = cli_runner.invoke(
            app,
            [
                "token",
                "client_credentials",
                "-c",
                str(cc_config),
                "--client-id",
                "other",
                "--scope",
                "read",
                "--scope",
                "write",
            ],
        )
        assert result.exit_code == 0, result.output
        assert patched_endpoint.last_form == "grant_type=client_credentials&scope=read+write"
        assert patched_endpoint.last_request.headers["Authorization"] == "Basic b3RoZXI6czE="

    def test_refresh_token_from_profile(
        self, cli_runner, patched_endpoint, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from oauthflow.config import get_profiles_dir

        (get_profiles_dir() / "dev.yaml").write_text(
            "client_id: c1\n"
            "refresh_token_source: env:TEST_REFRESH_TOKEN\n"
            "token_endpoint: https://idp.example.com/token\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("TEST_REFRESH_TOKEN", "r1")
        result = cli_runner.invoke(app, ["--profile", "dev", "token", "refresh_token"])
        assert result.exit_code == 0, result.output
        assert patched_endpoint.last_form == (
            "grant_type=refresh_token&refresh_token=r1&client_id=c1"
        )

    def test_missing_configuration_exit_code(
        self, cli_runner, patched_endpoint, isolated_config: Path
    ) -> None:
        result = cli_runner.invoke(app, ["--no-color", "token", "client_credentials"])
        assert result.exit_code == 2
        assert "client_credentials requires 'client_id'" in result.output
        assert patched_endpoint.requests == []

    def test_oauth_error_exit_code(
        self, cli_runner, isolated_config: Path, cc_config: Path, make_exchanger,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "invalid_client", "error_description": "bad"})

        monkeypatch.setattr(
            "oauthflow.flows.manager.TokenExchanger", lambda: make_exchanger(handler)
        )
        monkeypatch.setenv("TEST_CLIENT_SECRET", "s1")
        result = cli_runner.invoke(app, ["token", "client_credentials", "-c", str(cc_config)])
        assert result.exit_code == 3
        assert "invalid_client" in result.output

    def test_unknown_grant_rejected_by_cli(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["token", "password"])
        assert result.exit_code != 0


class TestMiscCommands:
    def test_grants(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["grants"])
        assert result.exit_code == 0
        assert result.stdout.split() == [
            "authorization_code",
            "client_credentials",
            "refresh_token",
        ]

    def test_profiles_listed(self, cli_runner, isolated_config: Path) -> None:
        from oauthflow.config import get_profiles_dir

        (get_profiles_dir() / "dev.yaml").write_text(
            "client_id: c1\ntoken_endpoint: https://idp.example.com/token\n", encoding="utf-8"
        )
        (get_profiles_dir() / "broken.json").write_text("{nope", encoding="utf-8")
        result = cli_runner.invoke(app, ["profiles"])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            "broken\terror\t-",
            "dev\tc1\thttps://idp.example.com/token",
        ]

    def test_no_profiles(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "profiles"])
        assert result.exit_code == 0
        assert "No profiles configured." in result.output
        assert "Create one:" in result.output

    def test_version(self, cli_runner) -> None:
        from oauthflow import __version__

        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestMain:
    def test_oauthflow_error_maps_to_exit_code(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail() -> None:
            raise ConfigurationError("broken")

        monkeypatch.setattr("oauthflow.app._setup_signal_handlers", lambda: None)
        monkeypatch.setattr("oauthflow.app.app", fail)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2

    def test_unexpected_error_writes_crash_log(
        self, monkeypatch: pytest.MonkeyPatch, isolated_config: Path
    ) -> None:
        def fail() -> None:
            raise RuntimeError("surprise")

        monkeypatch.setattr("oauthflow.app._setup_signal_handlers", lambda: None)
        monkeypatch.setattr("oauthflow.app.app", fail)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        logs = list((isolated_config / "data" / "oauthflow" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "surprise" in logs[0].read_text()
