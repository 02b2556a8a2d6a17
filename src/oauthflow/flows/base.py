"""Grant strategy interface and the request-building helpers it uses.

Every grant type implements :class:`OAuthFlow`. Implementations do not share
behaviour through inheritance; each composes a
:class:`~oauthflow.exchange.TokenExchanger` and the module-level helpers
below.

To add a grant type, subclass :class:`OAuthFlow`, set :attr:`grant_type`,
and implement all five members. Register it with
:class:`~oauthflow.flows.manager.FlowManager`.
"""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urlencode

from oauthflow.exceptions import ConfigurationError
from oauthflow.models import FlowConfig, TokenResponse

CONTENT_TYPE_HEADER = "Content-Type"
ACCEPT_HEADER = "Accept"
AUTHORIZATION_HEADER = "Authorization"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_ACCEPT = "application/json"


class OAuthFlow(ABC):
    """Capability interface for one OAuth 2.0 grant type."""

    @property
    @abstractmethod
    def grant_type(self) -> str:
        """The ``grant_type`` value this flow sends (e.g. ``"refresh_token"``)."""
        ...

    @abstractmethod
    def get_token(self, config: FlowConfig) -> TokenResponse:
        """Acquire a token using this grant.

        Raises:
            ConfigurationError: If :meth:`validate_config` reports problems.
                Raised before any network activity.
            OAuthProtocolError: If the token endpoint returns an error.
            ConnectionError_: If the token endpoint cannot be reached.
        """
        ...

    @abstractmethod
    def validate_config(self, config: Optional[FlowConfig]) -> list[str]:
        """Return human-readable problems with *config*; empty when valid."""
        ...

    @abstractmethod
    def build_body(self, config: FlowConfig) -> str:
        """Return the URL-encoded token request body."""
        ...

    @abstractmethod
    def build_headers(self, config: FlowConfig) -> dict[str, str]:
        """Return the token request headers."""
        ...


# --- Helpers shared by the implementations ---


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def missing_fields(
    config: Optional[FlowConfig], required: tuple[str, ...], grant_type: str
) -> list[str]:
    """List a problem for each *required* field that is missing or blank."""
    if config is None:
        return [f"{grant_type} requires a configuration"]
    return [
        f"{grant_type} requires '{name}'"
        for name in required
        if is_blank(getattr(config, name))
    ]


def ensure_valid(flow: OAuthFlow, config: Optional[FlowConfig]) -> FlowConfig:
    """Raise :class:`ConfigurationError` unless *flow* accepts *config*."""
    problems = flow.validate_config(config)
    if problems or config is None:
        raise ConfigurationError(
            "Invalid OAuth configuration: " + "; ".join(problems), problems=problems
        )
    return config


def form_headers() -> dict[str, str]:
    """Headers common to every token request."""
    return {CONTENT_TYPE_HEADER: FORM_CONTENT_TYPE, ACCEPT_HEADER: JSON_ACCEPT}


def basic_auth_header(client_id: Optional[str], client_secret: Optional[str]) -> str:
    """Build an HTTP Basic ``Authorization`` value from client credentials.

    Raises:
        ValueError: If either value is missing or blank.
    """
    if is_blank(client_id):
        raise ValueError("Client ID cannot be null or empty")
    if is_blank(client_secret):
        raise ValueError("Client secret cannot be null or empty")
    credentials = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


def encode_form(pairs: list[tuple[str, str]]) -> str:
    """URL-encode ordered form fields."""
    return urlencode(pairs)


def scope_pair(config: FlowConfig) -> list[tuple[str, str]]:
    """``[("scope", ...)]`` when scopes are configured, else ``[]``."""
    if config.scopes:
        return [("scope", " ".join(config.scopes))]
    return []
