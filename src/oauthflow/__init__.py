"""oauthflow -- acquire OAuth 2.0 access tokens.

Three interchangeable grant strategies share one token exchange:

- client credentials (:class:`~oauthflow.flows.ClientCredentialsFlow`)
- refresh token (:class:`~oauthflow.flows.RefreshTokenFlow`)
- authorization code with a local browser redirect and optional PKCE
  (:class:`~oauthflow.flows.AuthorizationCodeFlow`)

Typical usage::

    from oauthflow import FlowConfig, create_default_manager

    config = FlowConfig(
        client_id="my-client",
        client_secret="my-secret",
        token_endpoint="https://idp.example.com/oauth2/token",
    )
    token = create_default_manager().get_token("client_credentials", config)

Modules:
    flows: Grant strategies and the flow manager.
    callback: Local redirect listener and callback validation.
    exchange: Token endpoint request/response handling.
    pkce: State and PKCE parameter generation.
    authorize: Authorization URL construction.
    models: Pydantic models shared across the package.
    config: XDG-aware profile and credential resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from oauthflow.exceptions import (  # noqa: E402
    AuthorizationError,
    CallbackServerError,
    CallbackTimeoutError,
    ConfigurationError,
    ConnectionError_,
    InvalidURIError,
    OAuthFlowError,
    OAuthProtocolError,
)
from oauthflow.flows import (  # noqa: E402
    AuthorizationCodeFlow,
    ClientCredentialsFlow,
    FlowManager,
    OAuthFlow,
    RefreshTokenFlow,
    create_default_manager,
)
from oauthflow.models import FlowConfig, TokenResponse  # noqa: E402

__all__ = [
    "AuthorizationCodeFlow",
    "AuthorizationError",
    "CallbackServerError",
    "CallbackTimeoutError",
    "ClientCredentialsFlow",
    "ConfigurationError",
    "ConnectionError_",
    "FlowConfig",
    "FlowManager",
    "InvalidURIError",
    "OAuthFlow",
    "OAuthFlowError",
    "OAuthProtocolError",
    "RefreshTokenFlow",
    "TokenResponse",
    "__version__",
    "create_default_manager",
]
