"""Tests for oauthflow.authorize -- authorization URL construction."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

import pytest

from oauthflow.authorize import build_authorization_url
from oauthflow.exceptions import InvalidURIError
from oauthflow.models import FlowConfig, SessionSecrets


def _config(**kwargs: object) -> FlowConfig:
    defaults: dict[str, object] = {
        "client_id": "my client",
        "redirect_uri": "http://localhost:8765/callback",
        "authorization_endpoint": "https://idp.example.com/authorize",
        "token_endpoint": "https://idp.example.com/token",
    }
    defaults.update(kwargs)
    return FlowConfig(**defaults)  # type: ignore[arg-type]


def _params(url: str) -> list[tuple[str, str]]:
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


class TestBuildAuthorizationUrl:
    def test_parameters_in_order(self) -> None:
        url = build_authorization_url(_config(), SessionSecrets(state="s-1"))
        assert url.startswith("https://idp.example.com/authorize?")
        assert _params(url) == [
            ("response_type", "code"),
            ("client_id", "my client"),
            ("redirect_uri", "http://localhost:8765/callback"),
            ("state", "s-1"),
        ]

    def test_values_are_percent_encoded(self) -> None:
        url = build_authorization_url(_config(), SessionSecrets(state="s-1"))
        assert "client_id=my+client" in url
        assert "redirect_uri=http%3A%2F%2Flocalhost%3A8765%2Fcallback" in url

    def test_pkce_challenge_appended(self) -> None:
        secrets = SessionSecrets(state="s", code_verifier="v" * 43, code_challenge="chal")
        params = dict(_params(build_authorization_url(_config(pkce_enabled=True), secrets)))
        assert params["code_challenge"] == "chal"
        assert params["code_challenge_method"] == "S256"
        assert "code_verifier" not in params

    def test_no_challenge_without_pkce(self) -> None:
        params = dict(_params(build_authorization_url(_config(), SessionSecrets(state="s"))))
        assert "code_challenge" not in params
        assert "code_challenge_method" not in params

    def test_scopes_joined_with_spaces(self) -> None:
        config = _config(scopes=["openid", "profile"])
        params = dict(_params(build_authorization_url(config, SessionSecrets(state="s"))))
        assert params["scope"] == "openid profile"

    def test_existing_query_preserved_first(self) -> None:
        config = _config(authorization_endpoint="https://idp.example.com/authorize?tenant=acme")
        params = _params(build_authorization_url(config, SessionSecrets(state="s")))
        assert params[0] == ("tenant", "acme")
        assert ("response_type", "code") in params

    @pytest.mark.parametrize(
        "endpoint",
        ["", "not a url", "ftp://idp.example.com/authorize", "/authorize", "https://"],
    )
    def test_invalid_endpoint_rejected(self, endpoint: str) -> None:
        with pytest.raises(InvalidURIError):
            build_authorization_url(
                _config(authorization_endpoint=endpoint), SessionSecrets(state="s")
            )
